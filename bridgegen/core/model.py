"""
Classified declaration model.

Every declared type is reduced to one :class:`TypeShape` from a closed set.
Shapes are immutable trees; references between declarations go through
:class:`StructRef` / :class:`EnumRef` by name, so a shape never contains
itself.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional, Tuple, Union


class ShapeTag(Enum):
    """The closed set of shapes a declared type can have."""

    PRIMITIVE = "primitive"
    TEXT = "text"
    BOXED = "boxed"
    OPTIONAL = "optional"
    SEQUENCE = "sequence"
    MAP = "map"
    STRUCT_REF = "struct_ref"
    ENUM_REF = "enum_ref"
    UNIT = "unit"


class PrimitiveKind(Enum):
    """Numeric/boolean families of primitive shapes."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


@dataclass(frozen=True)
class TypeShape:
    """Base class for all shapes."""

    tag: ClassVar[ShapeTag]

    def children(self) -> Tuple["TypeShape", ...]:
        return ()

    def walk(self) -> Iterator["TypeShape"]:
        """Yield this shape and every nested shape, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()


@dataclass(frozen=True)
class PrimitiveShape(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.PRIMITIVE

    kind: PrimitiveKind
    width: int
    signed: bool = True

    def __str__(self) -> str:
        if self.kind == PrimitiveKind.BOOL:
            return "bool"
        if self.kind == PrimitiveKind.FLOAT:
            return f"f{self.width}"
        return f"{'i' if self.signed else 'u'}{self.width}"


@dataclass(frozen=True)
class TextShape(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.TEXT

    def __str__(self) -> str:
        return "String"


@dataclass(frozen=True)
class BoxedShape(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.BOXED

    inner: TypeShape

    def children(self) -> Tuple[TypeShape, ...]:
        return (self.inner,)

    def __str__(self) -> str:
        return f"Box<{self.inner}>"


@dataclass(frozen=True)
class OptionalShape(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.OPTIONAL

    inner: TypeShape

    def children(self) -> Tuple[TypeShape, ...]:
        return (self.inner,)

    def __str__(self) -> str:
        return f"Option<{self.inner}>"


@dataclass(frozen=True)
class SequenceShape(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.SEQUENCE

    inner: TypeShape

    def children(self) -> Tuple[TypeShape, ...]:
        return (self.inner,)

    def __str__(self) -> str:
        return f"Vec<{self.inner}>"


@dataclass(frozen=True)
class MapShape(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.MAP

    key: TypeShape
    value: TypeShape

    def children(self) -> Tuple[TypeShape, ...]:
        return (self.key, self.value)

    def __str__(self) -> str:
        return f"HashMap<{self.key}, {self.value}>"


@dataclass(frozen=True)
class StructRef(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.STRUCT_REF

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class EnumRef(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.ENUM_REF

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnresolvedRef(TypeShape):
    """Placeholder emitted by the first classifier pass for a by-name reference."""

    tag: ClassVar[ShapeTag] = ShapeTag.STRUCT_REF

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnitShape(TypeShape):
    tag: ClassVar[ShapeTag] = ShapeTag.UNIT

    def __str__(self) -> str:
        return "()"


# Shared singletons for the leaf shapes
TEXT = TextShape()
UNIT = UnitShape()


@dataclass(frozen=True)
class FieldDecl:
    """A struct field or variant payload member."""

    name: str
    shape: TypeShape
    index: int


@dataclass(frozen=True)
class StructDecl:
    name: str
    fields: Tuple[FieldDecl, ...]
    is_tuple: bool = False
    location: Optional[str] = None
    doc: Optional[str] = None

    kind: ClassVar[str] = "struct"


class PayloadKind(Enum):
    UNIT = "unit"
    TUPLE = "tuple"
    NAMED = "named"


@dataclass(frozen=True)
class VariantDecl:
    name: str
    payload: PayloadKind
    fields: Tuple[FieldDecl, ...] = ()
    doc: Optional[str] = None


@dataclass(frozen=True)
class EnumDecl:
    name: str
    variants: Tuple[VariantDecl, ...]
    location: Optional[str] = None
    doc: Optional[str] = None

    kind: ClassVar[str] = "enum"

    @property
    def is_unit_only(self) -> bool:
        """True when no variant carries a payload (maps to a native enum)."""
        return all(v.payload == PayloadKind.UNIT for v in self.variants)


@dataclass(frozen=True)
class ParamDecl:
    name: str
    shape: TypeShape
    index: int


@dataclass(frozen=True)
class FunctionSig:
    name: str
    params: Tuple[ParamDecl, ...]
    return_shape: TypeShape
    fallible: bool = False
    is_async: bool = False
    error_shape: Optional[TypeShape] = None
    location: Optional[str] = None
    doc: Optional[str] = None

    kind: ClassVar[str] = "function"


Aggregate = Union[StructDecl, EnumDecl]
Declaration = Union[StructDecl, EnumDecl, FunctionSig]


@dataclass(frozen=True)
class DeclarationSet:
    """All successfully classified declarations of one module, in source order."""

    module: str
    declarations: Tuple[Declaration, ...] = ()
    _index: Dict[str, Declaration] = field(
        default_factory=dict, compare=False, repr=False
    )

    def __post_init__(self):
        index = {}
        for decl in self.declarations:
            if not isinstance(decl, FunctionSig):
                index.setdefault(decl.name, decl)
        object.__setattr__(self, "_index", index)

    @property
    def aggregates(self) -> List[Aggregate]:
        return [d for d in self.declarations if not isinstance(d, FunctionSig)]

    @property
    def structs(self) -> List[StructDecl]:
        return [d for d in self.declarations if isinstance(d, StructDecl)]

    @property
    def enums(self) -> List[EnumDecl]:
        return [d for d in self.declarations if isinstance(d, EnumDecl)]

    @property
    def functions(self) -> List[FunctionSig]:
        return [d for d in self.declarations if isinstance(d, FunctionSig)]

    def lookup(self, name: str) -> Optional[Aggregate]:
        """Find a struct or enum by source name."""
        return self._index.get(name)

    def get_enum(self, name: str) -> Optional[EnumDecl]:
        decl = self._index.get(name)
        return decl if isinstance(decl, EnumDecl) else None

    def __len__(self) -> int:
        return len(self.declarations)
