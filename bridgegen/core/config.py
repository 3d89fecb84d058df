"""
Configuration management for binding generation.

Handles loading and merging configuration from JSON files,
providing per-language defaults and validation for generator settings.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..logging_config import get_logger
from .errors import BridgeGenError
from .naming import NamingCase

logger = get_logger(__name__)


class ConfigError(BridgeGenError):
    """Exception raised for configuration-related errors."""

    pass


PARAM_STYLES = ("positional", "keyword")


@dataclass
class GeneratorConfig:
    """Base configuration for binding generators."""

    # Output settings
    output_file: Optional[str] = None
    module_name: Optional[str] = None  # defaults to the source module's name
    api_class_name: Optional[str] = None  # defaults to <Module>Bindings
    runtime_module: str = "bridgegen.runtime"

    # Naming settings
    type_case: str = "pascal"
    field_case: str = "snake"
    function_case: str = "snake"
    member_case: str = "screaming_snake"

    # Signature settings
    param_style: str = "positional"  # positional, keyword
    wire_prefix: str = "wire_"

    # Additional metadata
    add_comments: bool = True

    # Custom settings (language-specific)
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for supported languages."""
        self._configs["python"] = {
            "runtime_module": "bridgegen.runtime",
            "type_case": "pascal",
            "field_case": "snake",
            "function_case": "snake",
            "member_case": "screaming_snake",
            "custom": {
                "frozen": False,
                "slots": False,
            },
        }

        self._configs["dart"] = {
            "runtime_module": "package:bridge_runtime/bridge_runtime.dart",
            "type_case": "pascal",
            "field_case": "camel",
            "function_case": "camel",
            "member_case": "camel",
            "custom": {
                "equality": True,
            },
        }

    def get_config(
        self,
        language: str,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration for a language.

        Args:
            language: Target language name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration for the language
        """
        defaults = self._configs.get(language, {})
        base_config = dict(defaults)
        base_config["custom"] = dict(defaults.get("custom", {}))

        if config_file:
            self._merge(base_config, self._load_config_file(config_file))

        if custom_config:
            self._merge(base_config, custom_config)

        return self._dict_to_config(base_config)

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]):
        for key, value in overrides.items():
            if key == "custom" and isinstance(value, dict):
                base["custom"].update(value)
            else:
                base[key] = value

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}")

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        logger.debug("Loaded configuration file %s", path)
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Unknown keys are language-specific settings
        if custom_args:
            merged = dict(config_args.get("custom", {}))
            merged.update(custom_args)
            config_args["custom"] = merged

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}")

    def list_languages(self) -> List[str]:
        """Get list of languages with default settings."""
        return list(self._configs.keys())

    def validate_config(self, config: GeneratorConfig, language: str) -> List[str]:
        """
        Validate configuration for a language.

        Returns:
            List of validation errors (empty if the configuration is usable)
        """
        errors = []

        valid_cases = {case.value for case in NamingCase}
        for name in ("type_case", "field_case", "function_case", "member_case"):
            value = getattr(config, name)
            if value not in valid_cases:
                errors.append(f"Invalid {name}: {value}")

        if config.param_style not in PARAM_STYLES:
            errors.append(f"Invalid param_style: {config.param_style}")

        if config.wire_prefix and not config.wire_prefix.isidentifier():
            errors.append(f"Invalid wire_prefix: {config.wire_prefix}")

        if config.api_class_name is not None and not config.api_class_name.isidentifier():
            errors.append(f"Invalid api_class_name: {config.api_class_name}")

        if config.module_name is not None and not config.module_name.isidentifier():
            errors.append(f"Invalid module_name: {config.module_name}")

        if not config.runtime_module:
            errors.append("runtime_module must not be empty")

        # Language-specific validations
        if language == "python":
            if not all(part.isidentifier() for part in config.runtime_module.split(".")):
                errors.append(f"Invalid Python runtime module: {config.runtime_module}")
            for flag in ("frozen", "slots"):
                if not isinstance(config.custom.get(flag, False), bool):
                    errors.append(f"Invalid {flag}: expected true or false")

        elif language == "dart":
            if not config.runtime_module.endswith(".dart"):
                errors.append(f"Invalid Dart runtime import: {config.runtime_module}")
            if not isinstance(config.custom.get("equality", True), bool):
                errors.append("Invalid equality: expected true or false")

        return errors


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    language: str,
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        language: Target language name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration for the language
    """
    manager = get_config_manager()
    return manager.get_config(language, custom_config, config_file)

