"""
Dart type mapping.

Integers up to 32 bits unsigned and all signed widths fit Dart's 64-bit
``int``; ``u64`` does not and maps to ``BigInt``.
"""

from ...core.model import PrimitiveKind, PrimitiveShape, TypeShape
from ...core.types import TypeMapper
from .config import DART_TYPE_MAP, DART_U64_TYPE, TEXT_TYPE, UNIT_TYPE


def is_u64(shape: PrimitiveShape) -> bool:
    return shape.kind == PrimitiveKind.INT and shape.width == 64 and not shape.signed


def dart_bool(value: bool) -> str:
    return "true" if value else "false"


class DartTypeMapper(TypeMapper):
    """Maps shapes to Dart types and runtime-package codec expressions."""

    def primitive_type(self, shape: PrimitiveShape) -> str:
        if is_u64(shape):
            return DART_U64_TYPE
        return DART_TYPE_MAP[shape.kind]

    def text_type(self) -> str:
        return TEXT_TYPE

    def optional_type(self, inner: str) -> str:
        return f"{inner}?"

    def sequence_type(self, inner: str) -> str:
        return f"List<{inner}>"

    def map_type(self, key: str, value: str) -> str:
        return f"Map<{key}, {value}>"

    def unit_type(self) -> str:
        return UNIT_TYPE

    # Codec fragments

    def encode_primitive(self, shape: PrimitiveShape, value: str) -> str:
        if is_u64(shape):
            return f"u64ToWire({value})"
        if shape.kind == PrimitiveKind.INT:
            return f"checkInt({value}, {shape.width}, {dart_bool(shape.signed)})"
        if shape.kind == PrimitiveKind.FLOAT:
            return f"checkDouble({value}, {shape.width})"
        return value

    def decode_primitive(self, shape: PrimitiveShape, wire: str) -> str:
        if is_u64(shape):
            return f"wireToU64({wire})"
        if shape.kind == PrimitiveKind.INT:
            return f"checkInt({wire}, {shape.width}, {dart_bool(shape.signed)})"
        if shape.kind == PrimitiveKind.FLOAT:
            return f"checkDouble({wire}, {shape.width})"
        return f"checkBool({wire})"

    def encode_text(self, value: str) -> str:
        return value

    def decode_text(self, wire: str) -> str:
        return f"checkString({wire})"

    def encode_optional(self, inner: TypeShape, value: str, depth: int) -> str:
        return f"({value} == null ? null : {self.encode(inner, value + '!', depth)})"

    def decode_optional(self, inner: TypeShape, wire: str, depth: int) -> str:
        return f"({wire} == null ? null : {self.decode(inner, wire, depth)})"

    def encode_sequence(self, inner: TypeShape, value: str, depth: int) -> str:
        item = f"_v{depth}"
        return f"listToWire({value}, ({item}) => {self.encode(inner, item, depth + 1)})"

    def decode_sequence(self, inner: TypeShape, wire: str, depth: int) -> str:
        item = f"_v{depth}"
        return f"wireToList({wire}, ({item}) => {self.decode(inner, item, depth + 1)})"

    def encode_map(self, key: TypeShape, value_shape: TypeShape, value: str, depth: int) -> str:
        k, v = f"_k{depth}", f"_v{depth}"
        return (
            f"mapToWire({value}, ({k}) => {self.encode(key, k, depth + 1)}, "
            f"({v}) => {self.encode(value_shape, v, depth + 1)})"
        )

    def decode_map(self, key: TypeShape, value_shape: TypeShape, wire: str, depth: int) -> str:
        k, v = f"_k{depth}", f"_v{depth}"
        return (
            f"wireToMap({wire}, ({k}) => {self.decode(key, k, depth + 1)}, "
            f"({v}) => {self.decode(value_shape, v, depth + 1)})"
        )

    def encode_unit(self, value: str) -> str:
        return "null"

    def decode_unit(self, wire: str) -> str:
        return f"checkUnit({wire})"
