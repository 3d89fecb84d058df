"""
Type classification.

Turns the front-end's type expressions into :mod:`~bridgegen.core.model`
shapes in two passes: :class:`TypeClassifier` classifies each declaration on
its own (leaving by-name references unresolved), then
:func:`resolve_references` checks that every reference names a declared
struct or enum and rejects inline recursion.
"""

from dataclasses import replace
from typing import Dict, List, Optional, Set, Tuple

from ..logging_config import get_logger
from .errors import DeclarationError, Diagnostic, UnresolvedTypeReference, UnsupportedTypeKind
from .model import (
    TEXT,
    UNIT,
    BoxedShape,
    Declaration,
    DeclarationSet,
    EnumDecl,
    EnumRef,
    FieldDecl,
    FunctionSig,
    MapShape,
    OptionalShape,
    ParamDecl,
    PayloadKind,
    PrimitiveKind,
    PrimitiveShape,
    SequenceShape,
    StructDecl,
    StructRef,
    TypeShape,
    UnresolvedRef,
    VariantDecl,
)
from .source import (
    ExprKind,
    SourceDecl,
    SourceEnum,
    SourceField,
    SourceFunction,
    SourceModule,
    SourceStruct,
    TypeExpr,
    TypeSyntaxError,
)

logger = get_logger(__name__)


BOX_TYPES = {"Box"}
OPTION_TYPES = {"Option"}
SEQUENCE_TYPES = {"Vec", "VecDeque"}
MAP_TYPES = {"HashMap", "BTreeMap"}
TEXT_TYPES = {"String"}
RESULT_TYPES = {"Result"}

PRIMITIVE_TYPES: Dict[str, PrimitiveShape] = {
    "i8": PrimitiveShape(PrimitiveKind.INT, 8, True),
    "i16": PrimitiveShape(PrimitiveKind.INT, 16, True),
    "i32": PrimitiveShape(PrimitiveKind.INT, 32, True),
    "i64": PrimitiveShape(PrimitiveKind.INT, 64, True),
    "isize": PrimitiveShape(PrimitiveKind.INT, 64, True),
    "u8": PrimitiveShape(PrimitiveKind.INT, 8, False),
    "u16": PrimitiveShape(PrimitiveKind.INT, 16, False),
    "u32": PrimitiveShape(PrimitiveKind.INT, 32, False),
    "u64": PrimitiveShape(PrimitiveKind.INT, 64, False),
    "usize": PrimitiveShape(PrimitiveKind.INT, 64, False),
    "f32": PrimitiveShape(PrimitiveKind.FLOAT, 32, True),
    "f64": PrimitiveShape(PrimitiveKind.FLOAT, 64, True),
    "bool": PrimitiveShape(PrimitiveKind.BOOL, 8, False),
}

# Builtins that look like plain paths but have no mapping
UNSUPPORTED_BUILTINS = {
    "char": "`char` has no fixed-width mapping; use `String` or `u32`",
    "i128": "128-bit integers are not supported",
    "u128": "128-bit integers are not supported",
    "str": "unsized `str`; use `String`",
    "Rc": "shared ownership cannot cross the boundary",
    "Arc": "shared ownership cannot cross the boundary",
    "RefCell": "interior mutability cannot cross the boundary",
    "Mutex": "interior mutability cannot cross the boundary",
    "HashSet": "set containers are not supported",
    "BTreeSet": "set containers are not supported",
    "Self": "`Self` is not allowed in exposed declarations",
}

NON_PATH_REASONS = {
    ExprKind.POINTER: "raw pointers cannot cross the boundary",
    ExprKind.REFERENCE: "borrowed references cannot cross the boundary",
    ExprKind.DYN: "trait objects are not supported",
    ExprKind.IMPL: "`impl Trait` types are not supported",
    ExprKind.TUPLE: "tuples are not supported; declare a tuple struct",
    ExprKind.ARRAY: "arrays and slices are not supported; use `Vec`",
    ExprKind.FN: "function pointers are not supported",
}


class TypeClassifier:
    """First pass: classify one declaration's type expressions."""

    def __init__(self, generics: Optional[List[str]] = None):
        self.generics = set(generics or [])

    def classify(self, text: str) -> TypeShape:
        """Classify a type expression given in source syntax."""
        try:
            expr = TypeExpr.parse(text)
        except TypeSyntaxError as e:
            raise UnsupportedTypeKind(text, f"malformed type expression ({e})")
        return self.classify_expr(expr)

    def classify_expr(self, expr: TypeExpr) -> TypeShape:
        if expr.kind == ExprKind.UNIT:
            return UNIT
        if expr.kind != ExprKind.PATH:
            raise UnsupportedTypeKind(expr.text, NON_PATH_REASONS[expr.kind])

        name = expr.name

        # Rules are ordered, first match wins
        if name in BOX_TYPES:
            (inner,) = self._expect_args(expr, 1)
            return BoxedShape(self.classify_expr(inner))

        if name in OPTION_TYPES:
            (inner,) = self._expect_args(expr, 1)
            return OptionalShape(self.classify_expr(inner))

        if name in SEQUENCE_TYPES:
            (inner,) = self._expect_args(expr, 1)
            return SequenceShape(self.classify_expr(inner))

        if name in MAP_TYPES:
            key, value = self._expect_args(expr, 2)
            return MapShape(self.classify_expr(key), self.classify_expr(value))

        if name in PRIMITIVE_TYPES:
            self._expect_args(expr, 0)
            return PRIMITIVE_TYPES[name]

        if name in TEXT_TYPES:
            self._expect_args(expr, 0)
            return TEXT

        if name in RESULT_TYPES:
            raise UnsupportedTypeKind(
                expr.text, "`Result` is only allowed as a function return type"
            )
        if name in UNSUPPORTED_BUILTINS:
            raise UnsupportedTypeKind(expr.text, UNSUPPORTED_BUILTINS[name])
        if name in self.generics:
            raise UnsupportedTypeKind(
                expr.text, "generic type parameter without a concrete instantiation"
            )
        if expr.args:
            raise UnsupportedTypeKind(
                expr.text, "generic instantiations of user types are not supported"
            )
        return UnresolvedRef(name)

    def classify_return(self, text: str) -> Tuple[TypeShape, bool, Optional[TypeShape]]:
        """Classify a return type, unwrapping ``Result<T, E>``.

        Returns:
            ``(ok shape, fallible, error shape)``
        """
        try:
            expr = TypeExpr.parse(text)
        except TypeSyntaxError as e:
            raise UnsupportedTypeKind(text, f"malformed type expression ({e})")

        if expr.kind == ExprKind.PATH and expr.name in RESULT_TYPES:
            if len(expr.args) not in (1, 2):
                raise UnsupportedTypeKind(
                    expr.text, "`Result` takes one or two type arguments"
                )
            ok = self.classify_expr(expr.args[0])
            error = self.classify_expr(expr.args[1]) if len(expr.args) == 2 else TEXT
            return ok, True, error
        return self.classify_expr(expr), False, None

    def _expect_args(self, expr: TypeExpr, count: int) -> Tuple[TypeExpr, ...]:
        if len(expr.args) != count:
            raise UnsupportedTypeKind(
                expr.text,
                f"`{expr.name}` takes {count} type argument(s), got {len(expr.args)}",
            )
        return expr.args

    # Declarations

    def classify_declaration(self, decl: SourceDecl) -> Declaration:
        """Classify every type in one declaration; raises on the first failure."""
        if isinstance(decl, SourceStruct):
            return StructDecl(
                name=decl.name,
                fields=self._classify_fields(decl.fields),
                is_tuple=decl.is_tuple,
                location=decl.location,
                doc=decl.doc,
            )
        if isinstance(decl, SourceEnum):
            variants = []
            for variant in decl.variants:
                if variant.is_unit:
                    payload = PayloadKind.UNIT
                elif variant.is_tuple:
                    payload = PayloadKind.TUPLE
                else:
                    payload = PayloadKind.NAMED
                variants.append(
                    VariantDecl(
                        name=variant.name,
                        payload=payload,
                        fields=self._classify_fields(variant.fields),
                        doc=variant.doc,
                    )
                )
            return EnumDecl(
                name=decl.name,
                variants=tuple(variants),
                location=decl.location,
                doc=decl.doc,
            )
        if isinstance(decl, SourceFunction):
            return self._classify_function(decl)
        raise TypeError(f"Not a source declaration: {decl!r}")

    def _classify_fields(self, fields: List[SourceField]) -> Tuple[FieldDecl, ...]:
        return tuple(
            FieldDecl(
                name=f.name if f.name is not None else f"field{index}",
                shape=self.classify(f.type),
                index=index,
            )
            for index, f in enumerate(fields)
        )

    def _classify_function(self, decl: SourceFunction) -> FunctionSig:
        params = tuple(
            ParamDecl(name=p.name, shape=self.classify(p.type), index=index)
            for index, p in enumerate(decl.params)
        )
        return_shape, fallible, error_shape = self.classify_return(decl.return_type)
        if decl.fallible and not fallible:
            fallible = True
            error_shape = self.classify(decl.error_type) if decl.error_type else TEXT
        return FunctionSig(
            name=decl.name,
            params=params,
            return_shape=return_shape,
            fallible=fallible,
            is_async=decl.is_async,
            error_shape=error_shape,
            location=decl.location,
            doc=decl.doc,
        )


def classify_module(source: SourceModule) -> Tuple[List[Declaration], List[Diagnostic]]:
    """Classify every declaration; failures are collected, siblings continue."""
    classified: List[Declaration] = []
    diagnostics: List[Diagnostic] = []

    for decl in source.decls:
        classifier = TypeClassifier(decl.generics)
        try:
            classified.append(classifier.classify_declaration(decl))
            logger.debug("Classified %s %s", decl.kind, decl.name)
        except DeclarationError as e:
            e.attach(decl.name, decl.location)
            logger.warning("Skipping %s %s: %s", decl.kind, decl.name, e.message)
            diagnostics.append(e.to_diagnostic())

    return classified, diagnostics


# Second pass


def _resolve_shape(
    shape: TypeShape,
    kinds: Dict[str, str],
    unresolved: List[str],
) -> TypeShape:
    if isinstance(shape, UnresolvedRef):
        kind = kinds.get(shape.name)
        if kind == "struct":
            return StructRef(shape.name)
        if kind == "enum":
            return EnumRef(shape.name)
        unresolved.append(shape.name)
        return shape
    if isinstance(shape, MapShape):
        return MapShape(
            _resolve_shape(shape.key, kinds, unresolved),
            _resolve_shape(shape.value, kinds, unresolved),
        )
    if isinstance(shape, (BoxedShape, OptionalShape, SequenceShape)):
        return replace(shape, inner=_resolve_shape(shape.inner, kinds, unresolved))
    return shape


def _resolve_fields(fields, kinds, unresolved):
    return tuple(
        replace(f, shape=_resolve_shape(f.shape, kinds, unresolved)) for f in fields
    )


def _resolve_declaration(decl: Declaration, kinds: Dict[str, str], unresolved: List[str]):
    if isinstance(decl, StructDecl):
        return replace(decl, fields=_resolve_fields(decl.fields, kinds, unresolved))
    if isinstance(decl, EnumDecl):
        variants = tuple(
            replace(v, fields=_resolve_fields(v.fields, kinds, unresolved))
            for v in decl.variants
        )
        return replace(decl, variants=variants)
    params = tuple(
        replace(p, shape=_resolve_shape(p.shape, kinds, unresolved)) for p in decl.params
    )
    error_shape = (
        _resolve_shape(decl.error_shape, kinds, unresolved)
        if decl.error_shape is not None
        else None
    )
    return replace(
        decl,
        params=params,
        return_shape=_resolve_shape(decl.return_shape, kinds, unresolved),
        error_shape=error_shape,
    )


def _inline_refs(shape: TypeShape) -> List[str]:
    """Names reached from ``shape`` without going through an owned indirection."""
    if isinstance(shape, (StructRef, EnumRef)):
        return [shape.name]
    if isinstance(shape, OptionalShape):
        return _inline_refs(shape.inner)
    return []  # Box, Vec and HashMap allocate; leaves hold no references


def _find_inline_cycles(aggregates: List[Declaration]) -> Set[str]:
    """Return the names of aggregates that contain themselves by value."""
    edges: Dict[str, List[str]] = {}
    for decl in aggregates:
        if isinstance(decl, StructDecl):
            fields = decl.fields
        else:
            fields = [f for v in decl.variants for f in v.fields]
        edges[decl.name] = [name for f in fields for name in _inline_refs(f.shape)]

    cyclic: Set[str] = set()
    for start in edges:
        stack = list(edges[start])
        seen: Set[str] = set()
        while stack:
            name = stack.pop()
            if name == start:
                cyclic.add(start)
                break
            if name in seen:
                continue
            seen.add(name)
            stack.extend(edges.get(name, []))
    return cyclic


def resolve_references(
    source: SourceModule, classified: List[Declaration]
) -> Tuple[DeclarationSet, List[Diagnostic]]:
    """Second pass: resolve by-name references and validate recursion.

    Raises:
        UnresolvedTypeReference: if any reference names no declaration
    """
    # Names of declarations that failed classification still resolve
    kinds = source.declared_kinds()
    resolved: List[Declaration] = []
    dangling: List[Tuple[str, str, Optional[str]]] = []

    for decl in classified:
        unresolved: List[str] = []
        resolved.append(_resolve_declaration(decl, kinds, unresolved))
        for name in dict.fromkeys(unresolved):
            dangling.append((name, decl.name, decl.location))

    if dangling:
        raise UnresolvedTypeReference(dangling)

    diagnostics: List[Diagnostic] = []
    cyclic = _find_inline_cycles([d for d in resolved if not isinstance(d, FunctionSig)])
    if cyclic:
        kept = []
        for decl in resolved:
            if decl.name in cyclic and not isinstance(decl, FunctionSig):
                error = UnsupportedTypeKind(
                    decl.name,
                    "contains itself without an owned indirection; wrap the "
                    "recursive field in `Box`",
                    declaration=decl.name,
                    location=decl.location,
                )
                logger.warning("Skipping %s %s: %s", decl.kind, decl.name, error.message)
                diagnostics.append(error.to_diagnostic())
            else:
                kept.append(decl)
        resolved = kept

    return DeclarationSet(module=source.name, declarations=tuple(resolved)), diagnostics
