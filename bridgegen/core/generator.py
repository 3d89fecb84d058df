"""
Base generator interface for all binding targets.

Defines the contract that all language generators must implement and the
generation pipeline that drives them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..logging_config import get_logger
from .classifier import classify_module, resolve_references
from .config import ConfigError, GeneratorConfig, get_config_manager
from .descriptor import CodecEntry, FunctionEntry, MarshalDescriptor
from .errors import BridgeGenError, DeclarationError, Diagnostic, RunError
from .model import Declaration, DeclarationSet, EnumDecl, FunctionSig, StructDecl
from .naming import NameRegistry, TargetNaming
from .source import SourceModule
from .templates import TemplateEngine, create_template_engine
from .types import TypeMapper

logger = get_logger(__name__)


def owner_label(decl: Declaration) -> str:
    """Human-readable name of a declaration for diagnostics."""
    where = f" ({decl.location})" if decl.location else ""
    return f"{decl.kind} {decl.name}{where}"


@dataclass
class EmittedUnit:
    """Everything generated for one declaration, before rendering."""

    declaration: Declaration
    template: str
    context: Dict[str, Any]
    claims: List[Tuple[str, str, str]] = field(default_factory=list)
    codec: Optional[CodecEntry] = None
    function: Optional[FunctionEntry] = None

    @property
    def is_function(self) -> bool:
        return isinstance(self.declaration, FunctionSig)


class CodeGenerator(ABC):
    """Abstract base class for all binding generators."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize generator with optional configuration."""
        self.config = config or get_config_manager().get_config(self.language_name)
        errors = get_config_manager().validate_config(self.config, self.language_name)
        if errors:
            raise ConfigError(
                f"Invalid {self.language_name} configuration: {'; '.join(errors)}"
            )

        self._template_engine: Optional[TemplateEngine] = None

        # Per-run state
        self.declarations: Optional[DeclarationSet] = None
        self.naming: Optional[TargetNaming] = None
        self.mapper: Optional[TypeMapper] = None

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'python', 'dart')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.py', '.dart')."""
        pass

    @abstractmethod
    def get_template_directory(self) -> Path:
        """Return the directory holding this target's ``.j2`` templates."""
        pass

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._template_engine = create_template_engine(self.get_template_directory())
        return self._template_engine

    # Per-run hooks

    @abstractmethod
    def create_naming(self) -> TargetNaming:
        pass

    @abstractmethod
    def create_type_mapper(self, declarations: DeclarationSet, naming: TargetNaming) -> TypeMapper:
        pass

    @abstractmethod
    def build_struct(self, decl: StructDecl) -> EmittedUnit:
        pass

    @abstractmethod
    def build_enum(self, decl: EnumDecl) -> EmittedUnit:
        pass

    @abstractmethod
    def build_function(self, sig: FunctionSig) -> EmittedUnit:
        pass

    @abstractmethod
    def render_module(self, aggregates: List[EmittedUnit], functions: List[EmittedUnit]) -> str:
        """Render the complete artifact from the emitted units."""
        pass

    def module_claims(self) -> List[Tuple[str, str, str]]:
        """Identifiers the generator itself places in the module scope."""
        return []

    # Pipeline steps

    def begin(self, declarations: DeclarationSet):
        """Reset per-run state; a generator instance can be reused."""
        self.declarations = declarations
        self.naming = self.create_naming()
        self.mapper = self.create_type_mapper(declarations, self.naming)

    @property
    def module_name(self) -> str:
        return self.config.module_name or self.declarations.module

    def build(self, decl: Declaration) -> EmittedUnit:
        """Map one declaration. Raises DeclarationError if it cannot be generated."""
        if isinstance(decl, StructDecl):
            return self.build_struct(decl)
        if isinstance(decl, EnumDecl):
            return self.build_enum(decl)
        return self.build_function(decl)

    def check_names(self, units: List[EmittedUnit]):
        """
        Raises:
            NameCollision: if two declarations emit the same identifier
        """
        registry = NameRegistry()
        registry.claim_all(self.module_claims())
        for unit in units:
            registry.claim_all(unit.claims)
        registry.check()

    def render(self, units: List[EmittedUnit]) -> str:
        aggregates = [unit for unit in units if not unit.is_function]
        functions = [unit for unit in units if unit.is_function]
        return self.render_module(aggregates, functions)

    def build_descriptor(self, units: List[EmittedUnit]) -> MarshalDescriptor:
        return MarshalDescriptor(
            module=self.module_name,
            language=self.language_name,
            codecs=tuple(unit.codec for unit in units if unit.codec is not None),
            functions=tuple(unit.function for unit in units if unit.function is not None),
        )

    def format_code(self, code: str) -> str:
        """
        Apply language-agnostic formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 2:  # Allow max 2 consecutive blank lines
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        return "\n".join(formatted_lines).strip("\n") + "\n"

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        return self.template_engine.template_exists(template_name)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        code: str,
        descriptor: Optional[MarshalDescriptor] = None,
        warnings: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            descriptor: Marshaling descriptor for the generated code
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.descriptor = descriptor
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.diagnostics: List[Diagnostic] = []
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @classmethod
    def error(
        cls,
        message: str,
        diagnostics: Optional[List[Diagnostic]] = None,
        exception: Optional[Exception] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="", metadata=metadata)
        result.success = False
        result.error_message = message
        result.exception = exception
        result.diagnostics = list(diagnostics or [])
        return result

    def __repr__(self) -> str:
        if self.success:
            return f"<GenerationResult ok {len(self.code)} chars>"
        return f"<GenerationResult failed: {len(self.diagnostics)} diagnostic(s)>"


def _run_failure(error: RunError, diagnostics: List[Diagnostic], metadata) -> GenerationResult:
    logger.error("%s", error)
    return GenerationResult.error(
        str(error),
        diagnostics=diagnostics + error.to_diagnostics(),
        exception=error,
        metadata=metadata,
    )


def generate_code(generator: CodeGenerator, source: SourceModule) -> GenerationResult:
    """
    Generate bindings for one source module with error handling.

    Per-declaration errors are collected across all declarations; whole-run
    errors stop the pipeline at the pass that found them. Either way a
    failed run carries no code.

    Args:
        generator: Code generator instance
        source: Declarations handed over by the front-end

    Returns:
        GenerationResult with code, descriptor, warnings, and metadata
    """
    metadata = {
        "language": generator.language_name,
        "file_extension": generator.file_extension,
        "module": source.name,
        "declaration_count": len(source.decls),
    }

    try:
        logger.info("Phase: classify %d declaration(s) of %s", len(source.decls), source.name)
        classified, diagnostics = classify_module(source)

        logger.info("Phase: resolve type references")
        try:
            declarations, unrepresentable = resolve_references(source, classified)
        except RunError as e:
            return _run_failure(e, diagnostics, metadata)
        diagnostics.extend(unrepresentable)

        logger.info("Phase: generate %s declarations", generator.language_name)
        generator.begin(declarations)
        units = []
        for decl in declarations.declarations:
            try:
                units.append(generator.build(decl))
                logger.debug("Generated %s %s", decl.kind, decl.name)
            except DeclarationError as e:
                e.attach(decl.name, decl.location)
                logger.warning("Cannot generate %s %s: %s", decl.kind, decl.name, e.message)
                diagnostics.append(e.to_diagnostic())

        logger.info("Phase: check target names")
        try:
            generator.check_names(units)
        except RunError as e:
            return _run_failure(e, diagnostics, metadata)

        if diagnostics:
            logger.error("%d declaration(s) could not be generated", len(diagnostics))
            return GenerationResult.error(
                f"{len(diagnostics)} declaration(s) could not be generated",
                diagnostics=diagnostics,
                metadata=metadata,
            )

        logger.info("Phase: emit %s", generator.language_name)
        code = generator.format_code(generator.render(units))
        descriptor = generator.build_descriptor(units)

    except BridgeGenError as e:
        logger.error("Code generation failed: %s", e)
        return GenerationResult.error(
            f"Code generation failed: {e}", exception=e, metadata=metadata
        )

    metadata.update(
        {
            "module": generator.module_name,
            "struct_count": len(declarations.structs),
            "enum_count": len(declarations.enums),
            "function_count": len(declarations.functions),
        }
    )
    return GenerationResult(code, descriptor, generator.naming.warnings(), metadata)
