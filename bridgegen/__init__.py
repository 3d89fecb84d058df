"""
bridgegen: cross-language binding generator.

Turns structs, enums and function signatures declared in a systems
language into equivalent bindings for a managed target language, together
with the marshaling code that carries values across the boundary.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from .core.config import GeneratorConfig, load_config
from .core.errors import BridgeGenError, Diagnostic, GenerationFailed, SourceError
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.source import SourceModule
from .registry import GeneratorRegistry, get_generator, get_registry, list_supported_languages

__version__ = "0.1.0"

SourceInput = Union[SourceModule, Dict[str, Any], str, Path]


def _load_source(source: SourceInput) -> SourceModule:
    if isinstance(source, SourceModule):
        return source
    if isinstance(source, dict):
        return SourceModule.from_dict(source)
    if isinstance(source, (str, Path)):
        return SourceModule.load(source)
    raise SourceError(f"Unsupported source type: {type(source).__name__}")


def generate_bindings(
    source: SourceInput,
    language: str = "python",
    config: Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]] = None,
) -> GenerationResult:
    """
    Generate bindings for a source module.

    Args:
        source: SourceModule, declaration document dict, or path to a JSON file
        language: Target language name or alias
        config: Generator configuration, overrides dict, or config file path

    Returns:
        GenerationResult with code and descriptor, or diagnostics on failure

    Raises:
        SourceError: If the declaration document is malformed
    """
    module = _load_source(source)
    generator = get_generator(language, config)
    return generate_code(generator, module)


def quick_generate(source: SourceInput, language: str = "python", **options) -> str:
    """
    Generate bindings and return the code.

    Args:
        source: SourceModule, declaration document dict, or path to a JSON file
        language: Target language
        **options: Generator configuration overrides

    Returns:
        Generated code string

    Raises:
        GenerationFailed: If the run produced diagnostics instead of code
    """
    result = generate_bindings(source, language, options or None)
    if result.success:
        return result.code
    raise GenerationFailed(result.error_message, result.diagnostics)


def write_result(result: GenerationResult, path: Union[str, Path]) -> Path:
    """
    Write generated code and its descriptor next to each other.

    ``<stem>.descriptor.json`` is written beside the code file.

    Returns:
        Path of the descriptor file
    """
    if not result.success:
        raise GenerationFailed(
            f"Refusing to write a failed run: {result.error_message}", result.diagnostics
        )
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.code, encoding="utf-8")
    descriptor_path = path.with_name(f"{path.stem}.descriptor.json")
    descriptor_path.write_text(result.descriptor.to_json(), encoding="utf-8")
    return descriptor_path


# Global registry with the built-in generators
registry: GeneratorRegistry = get_registry()

__all__ = [
    "BridgeGenError",
    "CodeGenerator",
    "Diagnostic",
    "GenerationFailed",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorRegistry",
    "SourceError",
    "SourceModule",
    "generate_bindings",
    "get_generator",
    "list_supported_languages",
    "load_config",
    "quick_generate",
    "registry",
    "write_result",
]
