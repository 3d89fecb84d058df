"""
Dart-specific configuration and type mappings.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ...core.model import PrimitiveKind

# Dart's int is a 64-bit two's complement value, so u64 needs BigInt
DART_TYPE_MAP = {
    PrimitiveKind.INT: "int",
    PrimitiveKind.FLOAT: "double",
    PrimitiveKind.BOOL: "bool",
}
DART_U64_TYPE = "BigInt"

TEXT_TYPE = "String"
UNIT_TYPE = "void"


@dataclass
class DartOptions:
    """Dart-specific settings read from ``GeneratorConfig.custom``."""

    equality: bool = True  # emit == and hashCode on generated classes

    @classmethod
    def from_custom(cls, custom: Dict[str, Any]) -> "DartOptions":
        return cls(equality=bool(custom.get("equality", True)))
