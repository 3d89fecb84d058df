"""
Dart binding generator implementation.

Generates a single Dart library of classes, enums, private codec
functions and an API class that talks to the bridge runtime package.
"""

from pathlib import Path
from typing import List, Optional

from ...core.config import GeneratorConfig
from ...core.generator import CodeGenerator, EmittedUnit
from ...core.model import DeclarationSet, EnumDecl, FunctionSig, StructDecl
from ...core.naming import TargetNaming
from .aggregates import MODULE_SCOPE, DartAggregateBuilder
from .config import DartOptions
from .naming import DART_CORE_TYPES, DART_RUNTIME_HELPERS, DartNaming
from .signatures import DartSignatureBuilder
from .types import DartTypeMapper


class DartGenerator(CodeGenerator):
    """Code generator for Dart bindings."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Dart generator with configuration."""
        super().__init__(config)
        self.options = DartOptions.from_custom(self.config.custom)
        self.aggregates: Optional[DartAggregateBuilder] = None
        self.signatures: Optional[DartSignatureBuilder] = None

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "dart"

    @property
    def file_extension(self) -> str:
        """Return Dart file extension."""
        return ".dart"

    def get_template_directory(self) -> Path:
        """Return the Dart templates directory."""
        return Path(__file__).parent / "templates"

    def create_naming(self) -> TargetNaming:
        return DartNaming(self.config)

    def create_type_mapper(self, declarations: DeclarationSet, naming: TargetNaming) -> DartTypeMapper:
        return DartTypeMapper(declarations, naming)

    def begin(self, declarations: DeclarationSet):
        super().begin(declarations)
        self.aggregates = DartAggregateBuilder(
            self.mapper, self.naming, self.options, self.config.add_comments
        )
        self.signatures = DartSignatureBuilder(
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
        claims = [(MODULE_SCOPE, name, "imported type") for name in sorted(DART_CORE_TYPES)]
        for helper in sorted(DART_RUNTIME_HELPERS):
            claims.append((MODULE_SCOPE, helper, "runtime helper"))
            claims.append((f"methods of {self.api_class_name}", helper, "runtime helper"))
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
            "add_comments": self.config.add_comments,
            "api_class": self.api_class_name,
            "aggregates": aggregates,
            "functions": functions,
        }
        return self.render_template("module.dart.j2", context)


def create_dart_generator(config: Optional[GeneratorConfig] = None) -> DartGenerator:
    """Create a Dart generator, with the Dart defaults if no config is given."""
    return DartGenerator(config)
