"""
Python-specific configuration and type mappings.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ...core.model import PrimitiveKind

# Python type mappings
PYTHON_TYPE_MAP = {
    PrimitiveKind.INT: "int",
    PrimitiveKind.FLOAT: "float",
    PrimitiveKind.BOOL: "bool",
}

TEXT_TYPE = "str"
UNIT_TYPE = "None"


@dataclass
class PythonOptions:
    """Python-specific settings read from ``GeneratorConfig.custom``."""

    frozen: bool = False  # frozen dataclasses
    slots: bool = False  # requires Python 3.10+

    @classmethod
    def from_custom(cls, custom: Dict[str, Any]) -> "PythonOptions":
        return cls(
            frozen=bool(custom.get("frozen", False)),
            slots=bool(custom.get("slots", False)),
        )

    @property
    def dataclass_decorator(self) -> str:
        args = []
        if self.frozen:
            args.append("frozen=True")
        if self.slots:
            args.append("slots=True")
        return f"@dataclass({', '.join(args)})" if args else "@dataclass"
