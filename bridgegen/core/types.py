"""
Shape-to-target type mapping.

A :class:`TypeMapper` turns a classified shape into the target language's
type token plus the encode/decode expressions that move a value of that
shape across the boundary. Language packages implement the per-shape hooks;
validation of the rules every target shares lives here.
"""

from abc import ABC, abstractmethod
from typing import List, Set

from .errors import UnhashableKeyType, UnsupportedTypeKind
from .model import (
    BoxedShape,
    DeclarationSet,
    EnumRef,
    MapShape,
    OptionalShape,
    PrimitiveKind,
    PrimitiveShape,
    SequenceShape,
    StructRef,
    TextShape,
    TypeShape,
    UnitShape,
)
from .naming import TargetNaming

UNIT_PLACEMENT = "the unit type is only allowed as a return type, sequence item or map value"


def unbox(shape: TypeShape) -> TypeShape:
    """Strip any number of Boxed layers."""
    while isinstance(shape, BoxedShape):
        shape = shape.inner
    return shape


class TypeMapper(ABC):
    """
    Maps shapes to target type tokens and codec fragments.

    Codec fragments are expressions: ``encode(shape, "value.x")`` returns an
    expression producing the wire form of ``value.x``; ``decode`` the
    reverse. ``depth`` keeps the loop variables of nested comprehensions
    or closures apart.
    """

    def __init__(self, declarations: DeclarationSet, naming: TargetNaming):
        self.declarations = declarations
        self.naming = naming
        self.referenced_codecs: Set[str] = set()

    def _codec(self, name: str) -> str:
        self.referenced_codecs.add(name)
        return name

    def take_referenced_codecs(self) -> List[str]:
        """Codec functions named by fragments built since the last call."""
        taken = sorted(self.referenced_codecs)
        self.referenced_codecs.clear()
        return taken

    # Validation

    def validate(self, shape: TypeShape, *, allow_unit: bool = False):
        """
        Check the rules every target shares.

        Raises:
            UnsupportedTypeKind: for nested optionals and misplaced unit
            UnhashableKeyType: for map keys without stable equality/hash
        """
        if isinstance(shape, UnitShape) and not allow_unit:
            raise UnsupportedTypeKind("()", UNIT_PLACEMENT)

        for node in shape.walk():
            if isinstance(node, OptionalShape):
                inner = unbox(node.inner)
                if isinstance(inner, (OptionalShape, UnitShape)):
                    raise UnsupportedTypeKind(
                        str(node), "cannot be told apart from \"no value\" in a nullable type"
                    )
            elif isinstance(node, MapShape) and not self.is_hashable(node.key):
                raise UnhashableKeyType(str(node.key))

            # Sequences and maps carry unit values as a run of nulls
            if isinstance(node, SequenceShape):
                continue
            for child in node.children():
                if isinstance(child, UnitShape) and not (
                    isinstance(node, MapShape) and child is node.value
                ):
                    raise UnsupportedTypeKind(str(node), UNIT_PLACEMENT)

    def is_hashable(self, shape: TypeShape) -> bool:
        """True if values of ``shape`` have stable equality and hash in the target."""
        shape = unbox(shape)
        if isinstance(shape, PrimitiveShape):
            return shape.kind in (PrimitiveKind.INT, PrimitiveKind.BOOL)
        if isinstance(shape, TextShape):
            return True
        if isinstance(shape, EnumRef):
            decl = self.declarations.get_enum(shape.name)
            return decl is None or decl.is_unit_only
        return False

    # Dispatch

    def type_name(self, shape: TypeShape) -> str:
        """Target type token for ``shape``."""
        if isinstance(shape, BoxedShape):
            return self.type_name(shape.inner)  # transparent
        if isinstance(shape, PrimitiveShape):
            return self.primitive_type(shape)
        if isinstance(shape, TextShape):
            return self.text_type()
        if isinstance(shape, OptionalShape):
            return self.optional_type(self.type_name(shape.inner))
        if isinstance(shape, SequenceShape):
            return self.sequence_type(self.type_name(shape.inner))
        if isinstance(shape, MapShape):
            return self.map_type(self.type_name(shape.key), self.type_name(shape.value))
        if isinstance(shape, (StructRef, EnumRef)):
            return self.naming.type_name(shape.name)
        if isinstance(shape, UnitShape):
            return self.unit_type()
        raise TypeError(f"Unmapped shape: {shape!r}")

    def encode(self, shape: TypeShape, value: str, depth: int = 0) -> str:
        """Expression turning target value ``value`` into its wire form."""
        if isinstance(shape, BoxedShape):
            return self.encode(shape.inner, value, depth)
        if isinstance(shape, PrimitiveShape):
            return self.encode_primitive(shape, value)
        if isinstance(shape, TextShape):
            return self.encode_text(value)
        if isinstance(shape, OptionalShape):
            return self.encode_optional(shape.inner, value, depth)
        if isinstance(shape, SequenceShape):
            return self.encode_sequence(shape.inner, value, depth)
        if isinstance(shape, MapShape):
            return self.encode_map(shape.key, shape.value, value, depth)
        if isinstance(shape, (StructRef, EnumRef)):
            return f"{self._codec(self.naming.encoder_name(shape.name))}({value})"
        if isinstance(shape, UnitShape):
            return self.encode_unit(value)
        raise TypeError(f"Unmapped shape: {shape!r}")

    def decode(self, shape: TypeShape, wire: str, depth: int = 0) -> str:
        """Expression turning wire value ``wire`` into a target value."""
        if isinstance(shape, BoxedShape):
            return self.decode(shape.inner, wire, depth)
        if isinstance(shape, PrimitiveShape):
            return self.decode_primitive(shape, wire)
        if isinstance(shape, TextShape):
            return self.decode_text(wire)
        if isinstance(shape, OptionalShape):
            return self.decode_optional(shape.inner, wire, depth)
        if isinstance(shape, SequenceShape):
            return self.decode_sequence(shape.inner, wire, depth)
        if isinstance(shape, MapShape):
            return self.decode_map(shape.key, shape.value, wire, depth)
        if isinstance(shape, (StructRef, EnumRef)):
            return f"{self._codec(self.naming.decoder_name(shape.name))}({wire})"
        if isinstance(shape, UnitShape):
            return self.decode_unit(wire)
        raise TypeError(f"Unmapped shape: {shape!r}")

    # Type tokens

    @abstractmethod
    def primitive_type(self, shape: PrimitiveShape) -> str:
        pass

    @abstractmethod
    def text_type(self) -> str:
        pass

    @abstractmethod
    def optional_type(self, inner: str) -> str:
        pass

    @abstractmethod
    def sequence_type(self, inner: str) -> str:
        pass

    @abstractmethod
    def map_type(self, key: str, value: str) -> str:
        pass

    @abstractmethod
    def unit_type(self) -> str:
        pass

    # Codec fragments

    @abstractmethod
    def encode_primitive(self, shape: PrimitiveShape, value: str) -> str:
        pass

    @abstractmethod
    def decode_primitive(self, shape: PrimitiveShape, wire: str) -> str:
        pass

    @abstractmethod
    def encode_text(self, value: str) -> str:
        pass

    @abstractmethod
    def decode_text(self, wire: str) -> str:
        pass

    @abstractmethod
    def encode_optional(self, inner: TypeShape, value: str, depth: int) -> str:
        pass

    @abstractmethod
    def decode_optional(self, inner: TypeShape, wire: str, depth: int) -> str:
        pass

    @abstractmethod
    def encode_sequence(self, inner: TypeShape, value: str, depth: int) -> str:
        pass

    @abstractmethod
    def decode_sequence(self, inner: TypeShape, wire: str, depth: int) -> str:
        pass

    @abstractmethod
    def encode_map(self, key: TypeShape, value_shape: TypeShape, value: str, depth: int) -> str:
        pass

    @abstractmethod
    def decode_map(self, key: TypeShape, value_shape: TypeShape, wire: str, depth: int) -> str:
        pass

    @abstractmethod
    def encode_unit(self, value: str) -> str:
        pass

    @abstractmethod
    def decode_unit(self, wire: str) -> str:
        pass
