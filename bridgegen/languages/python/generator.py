"""
Python binding generator implementation.

Generates a self-contained Python module of dataclasses, enums, codec
functions and an API class using templates.
"""

from pathlib import Path
from typing import List, Optional

from ...core.config import GeneratorConfig
from ...core.generator import CodeGenerator, EmittedUnit
from ...core.model import DeclarationSet, EnumDecl, FunctionSig, StructDecl
from ...core.naming import TargetNaming
from .aggregates import MODULE_SCOPE, PythonAggregateBuilder
from .config import PythonOptions
from .naming import PythonNaming
from .signatures import PythonSignatureBuilder
from .types import RUNTIME, PythonTypeMapper

# Names every generated module binds at import time
MODULE_IMPORTS = ("annotations", "asyncio", "enum", "dataclass", RUNTIME)


class PythonGenerator(CodeGenerator):
    """Code generator for Python bindings."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Python generator with configuration."""
        super().__init__(config)
        self.options = PythonOptions.from_custom(self.config.custom)
        self.aggregates: Optional[PythonAggregateBuilder] = None
        self.signatures: Optional[PythonSignatureBuilder] = None

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "python"

    @property
    def file_extension(self) -> str:
        """Return Python file extension."""
        return ".py"

    def get_template_directory(self) -> Path:
        """Return the Python templates directory."""
        return Path(__file__).parent / "templates"

    def create_naming(self) -> TargetNaming:
        return PythonNaming(self.config)

    def create_type_mapper(self, declarations: DeclarationSet, naming: TargetNaming) -> PythonTypeMapper:
        return PythonTypeMapper(declarations, naming)

    def begin(self, declarations: DeclarationSet):
        super().begin(declarations)
        self.aggregates = PythonAggregateBuilder(
            self.mapper, self.naming, self.options, self.config.add_comments
        )
        self.signatures = PythonSignatureBuilder(
            self.mapper,
            self.naming,
            self.api_class_name,
            param_style=self.config.param_style,
            add_comments=self.config.add_comments,
        )

    @property
    def api_class_name(self) -> str:
        return self.naming.api_class_name(self.module_name)

    def module_claims(self):
        claims = [(MODULE_SCOPE, name, "generated import") for name in MODULE_IMPORTS]
        claims.append((MODULE_SCOPE, self.api_class_name, "generated API class"))
        return claims

    def build_struct(self, decl: StructDecl) -> EmittedUnit:
        return self.aggregates.build_struct(decl)

    def build_enum(self, decl: EnumDecl) -> EmittedUnit:
        return self.aggregates.build_enum(decl)

    def build_function(self, sig: FunctionSig) -> EmittedUnit:
        return self.signatures.build_function(sig)

    def render_module(self, aggregates: List[EmittedUnit], functions: List[EmittedUnit]) -> str:
        context = {
            "module": self.module_name,
            "runtime_module": self.config.runtime_module,
            "runtime": RUNTIME,
            "add_comments": self.config.add_comments,
            "api_class": self.api_class_name,
            "aggregates": aggregates,
            "functions": functions,
            "needs_enum": any(
                isinstance(unit.declaration, EnumDecl) and unit.declaration.is_unit_only
                for unit in aggregates
            ),
            "needs_dataclass": any(
                not (isinstance(unit.declaration, EnumDecl) and unit.declaration.is_unit_only)
                for unit in aggregates
            ),
            "needs_asyncio": any(unit.declaration.is_async for unit in functions),
        }
        return self.render_template("module.py.j2", context)


def create_python_generator(config: Optional[GeneratorConfig] = None) -> PythonGenerator:
    """Create a Python generator, with the Python defaults if no config is given."""
    return PythonGenerator(config)
