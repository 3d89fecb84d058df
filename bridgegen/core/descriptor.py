"""
Marshaling descriptor.

The table a runtime transport needs to route calls and values: one codec
entry per aggregate and one entry per exposed function, in emission order.
"""

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class CodecEntry:
    """Encode/decode procedures generated for one struct or enum."""

    source_name: str
    target_name: str
    shape: str  # struct, tuple_struct, enum, tagged_enum
    encode: str
    decode: str


@dataclass(frozen=True)
class FunctionEntry:
    """How one source function is exposed and reached over the wire."""

    source_name: str
    target_name: str
    wire_name: str
    is_async: bool
    fallible: bool
    params: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MarshalDescriptor:
    module: str
    language: str
    codecs: Tuple[CodecEntry, ...] = ()
    functions: Tuple[FunctionEntry, ...] = ()

    def codec_for(self, source_name: str) -> Optional[CodecEntry]:
        for entry in self.codecs:
            if entry.source_name == source_name:
                return entry
        return None

    def function_for(self, source_name: str) -> Optional[FunctionEntry]:
        for entry in self.functions:
            if entry.source_name == source_name:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for entry in data["functions"]:
            entry["params"] = list(entry["params"])
        data["codecs"] = list(data["codecs"])
        data["functions"] = list(data["functions"])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarshalDescriptor":
        return cls(
            module=data["module"],
            language=data["language"],
            codecs=tuple(CodecEntry(**entry) for entry in data.get("codecs", [])),
            functions=tuple(
                FunctionEntry(**{**entry, "params": tuple(entry.get("params", ()))})
                for entry in data.get("functions", [])
            ),
        )

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent) + "\n"
