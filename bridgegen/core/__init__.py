"""Language-independent core: source model, classification and the generation pipeline."""

from .config import ConfigError, ConfigManager, GeneratorConfig, load_config
from .descriptor import CodecEntry, FunctionEntry, MarshalDescriptor
from .errors import (
    BridgeGenError,
    DeclarationError,
    Diagnostic,
    GenerationFailed,
    NameCollision,
    RunError,
    SourceError,
    UnhashableKeyType,
    UnresolvedTypeReference,
    UnsupportedTypeKind,
)
from .generator import CodeGenerator, EmittedUnit, GenerationResult, generate_code
from .model import DeclarationSet
from .source import SourceModule
from .templates import TemplateError

__all__ = [
    "BridgeGenError",
    "CodeGenerator",
    "CodecEntry",
    "ConfigError",
    "ConfigManager",
    "DeclarationError",
    "DeclarationSet",
    "Diagnostic",
    "EmittedUnit",
    "FunctionEntry",
    "GenerationFailed",
    "GenerationResult",
    "GeneratorConfig",
    "MarshalDescriptor",
    "NameCollision",
    "RunError",
    "SourceError",
    "SourceModule",
    "TemplateError",
    "UnhashableKeyType",
    "UnresolvedTypeReference",
    "UnsupportedTypeKind",
    "generate_code",
    "load_config",
]
