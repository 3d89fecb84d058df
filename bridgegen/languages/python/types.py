"""
Python type mapping.

Every integer width maps to ``int`` and both float widths to ``float``;
range fidelity is enforced by the runtime checks in the codec instead.
"""

from ...core.model import PrimitiveKind, PrimitiveShape, TypeShape
from ...core.types import TypeMapper
from .config import PYTHON_TYPE_MAP, TEXT_TYPE, UNIT_TYPE

RUNTIME = "_rt"


class PythonTypeMapper(TypeMapper):
    """Maps shapes to Python annotations and ``_rt`` codec expressions."""

    def primitive_type(self, shape: PrimitiveShape) -> str:
        return PYTHON_TYPE_MAP[shape.kind]

    def text_type(self) -> str:
        return TEXT_TYPE

    def optional_type(self, inner: str) -> str:
        return f"{inner} | None"

    def sequence_type(self, inner: str) -> str:
        return f"list[{inner}]"

    def map_type(self, key: str, value: str) -> str:
        return f"dict[{key}, {value}]"

    def unit_type(self) -> str:
        return UNIT_TYPE

    # Codec fragments

    def _check_primitive(self, shape: PrimitiveShape, expr: str) -> str:
        if shape.kind == PrimitiveKind.INT:
            return f"{RUNTIME}.check_int({expr}, {shape.width}, {shape.signed})"
        if shape.kind == PrimitiveKind.FLOAT:
            return f"{RUNTIME}.check_float({expr}, {shape.width})"
        return f"{RUNTIME}.check_bool({expr})"

    def encode_primitive(self, shape: PrimitiveShape, value: str) -> str:
        return self._check_primitive(shape, value)

    def decode_primitive(self, shape: PrimitiveShape, wire: str) -> str:
        return self._check_primitive(shape, wire)

    def encode_text(self, value: str) -> str:
        return f"{RUNTIME}.check_text({value})"

    def decode_text(self, wire: str) -> str:
        return f"{RUNTIME}.check_text({wire})"

    def encode_optional(self, inner: TypeShape, value: str, depth: int) -> str:
        return f"(None if {value} is None else {self.encode(inner, value, depth)})"

    def decode_optional(self, inner: TypeShape, wire: str, depth: int) -> str:
        return f"(None if {wire} is None else {self.decode(inner, wire, depth)})"

    def encode_sequence(self, inner: TypeShape, value: str, depth: int) -> str:
        item = f"_v{depth}"
        return (
            f"[{self.encode(inner, item, depth + 1)} "
            f"for {item} in {RUNTIME}.check_list({value})]"
        )

    def decode_sequence(self, inner: TypeShape, wire: str, depth: int) -> str:
        item = f"_v{depth}"
        return (
            f"[{self.decode(inner, item, depth + 1)} "
            f"for {item} in {RUNTIME}.check_list({wire})]"
        )

    def encode_map(self, key: TypeShape, value_shape: TypeShape, value: str, depth: int) -> str:
        k, v = f"_k{depth}", f"_v{depth}"
        return (
            f"[[{self.encode(key, k, depth + 1)}, {self.encode(value_shape, v, depth + 1)}] "
            f"for {k}, {v} in {RUNTIME}.check_dict({value}).items()]"
        )

    def decode_map(self, key: TypeShape, value_shape: TypeShape, wire: str, depth: int) -> str:
        k, v = f"_k{depth}", f"_v{depth}"
        return (
            f"{{{self.decode(key, k, depth + 1)}: {self.decode(value_shape, v, depth + 1)} "
            f"for {k}, {v} in {RUNTIME}.check_pairs({wire})}}"
        )

    def encode_unit(self, value: str) -> str:
        return f"{RUNTIME}.check_unit({value})"

    def decode_unit(self, wire: str) -> str:
        return f"{RUNTIME}.check_unit({wire})"
