"""Tests for bridgegen.core.classifier."""

from __future__ import annotations

import pytest

from bridgegen.core.classifier import TypeClassifier, classify_module, resolve_references
from bridgegen.core.errors import UnresolvedTypeReference, UnsupportedTypeKind
from bridgegen.core.model import (
    TEXT,
    UNIT,
    BoxedShape,
    EnumDecl,
    EnumRef,
    MapShape,
    OptionalShape,
    PayloadKind,
    PrimitiveKind,
    PrimitiveShape,
    SequenceShape,
    StructDecl,
    StructRef,
    UnresolvedRef,
)
from bridgegen.core.source import SourceModule
from tests._fixtures.declarations import COLOR, FETCH, MESSAGE, PAIR, POINT, SHAPE, TREE, module


def _resolve(document):
    source = SourceModule.from_dict(document)
    classified, diagnostics = classify_module(source)
    declarations, unrepresentable = resolve_references(source, classified)
    return declarations, diagnostics + unrepresentable


@pytest.mark.parametrize(
    "text, width, signed",
    [("i8", 8, True), ("u16", 16, False), ("i32", 32, True), ("u64", 64, False), ("usize", 64, False)],
)
def test_classify_integer_primitives(text: str, width: int, signed: bool) -> None:
    shape = TypeClassifier().classify(text)

    assert shape == PrimitiveShape(PrimitiveKind.INT, width, signed)
    assert str(shape) == f"{'i' if signed else 'u'}{width}"


def test_classify_collections_and_wrappers() -> None:
    classifier = TypeClassifier()

    assert classifier.classify("String") == TEXT
    assert classifier.classify("()") == UNIT
    assert classifier.classify("Box<f64>") == BoxedShape(PrimitiveShape(PrimitiveKind.FLOAT, 64))
    assert classifier.classify("Option<bool>") == OptionalShape(
        PrimitiveShape(PrimitiveKind.BOOL, 8, False)
    )
    assert classifier.classify("Vec<Point>") == SequenceShape(UnresolvedRef("Point"))
    assert classifier.classify("BTreeMap<String, Vec<u8>>") == MapShape(
        TEXT, SequenceShape(PrimitiveShape(PrimitiveKind.INT, 8, False))
    )


@pytest.mark.parametrize(
    "text, reason",
    [
        ("&str", "borrowed references"),
        ("*mut u8", "raw pointers"),
        ("(i32, i32)", "tuples are not supported"),
        ("[u8; 16]", "arrays and slices"),
        ("char", "`char`"),
        ("u128", "128-bit"),
        ("Rc<Point>", "shared ownership"),
        ("HashSet<u8>", "set containers"),
        ("Result<u8, String>", "only allowed as a function return type"),
        ("Vec<u8, u8>", "takes 1 type argument"),
        ("Wrapper<u8>", "generic instantiations"),
        ("Vec<", "malformed type expression"),
    ],
)
def test_classify_rejects_unsupported_types(text: str, reason: str) -> None:
    with pytest.raises(UnsupportedTypeKind, match=reason):
        TypeClassifier().classify(text)


def test_classify_rejects_generic_parameters() -> None:
    with pytest.raises(UnsupportedTypeKind, match="generic type parameter"):
        TypeClassifier(["T"]).classify("Vec<T>")


def test_classify_return_unwraps_result() -> None:
    classifier = TypeClassifier()

    assert classifier.classify_return("Result<u32, Point>") == (
        PrimitiveShape(PrimitiveKind.INT, 32, False),
        True,
        UnresolvedRef("Point"),
    )
    assert classifier.classify_return("Result<()>") == (UNIT, True, TEXT)
    assert classifier.classify_return("bool") == (
        PrimitiveShape(PrimitiveKind.BOOL, 8, False),
        False,
        None,
    )


def test_fallible_flag_without_result_defaults_error_to_text() -> None:
    document = module(
        {"kind": "function", "name": "save", "return": "()", "fallible": True},
        {"kind": "function", "name": "load", "return": "u8", "fallible": True, "error": "i32"},
    )
    declarations, diagnostics = _resolve(document)

    save, load = declarations.functions
    assert diagnostics == []
    assert save.fallible and save.error_shape == TEXT
    assert load.error_shape == PrimitiveShape(PrimitiveKind.INT, 32, True)


def test_classify_declarations_in_source_order() -> None:
    declarations, diagnostics = _resolve(module(COLOR, POINT, PAIR, SHAPE, MESSAGE, FETCH))

    assert diagnostics == []
    assert [d.name for d in declarations.declarations] == [
        "Color", "Point", "Pair", "Shape", "Message", "fetch",
    ]

    pair = declarations.lookup("Pair")
    assert isinstance(pair, StructDecl) and pair.is_tuple
    assert [f.name for f in pair.fields] == ["field0", "field1"]

    message = declarations.get_enum("Message")
    assert isinstance(message, EnumDecl) and not message.is_unit_only
    assert [v.payload for v in message.variants] == [
        PayloadKind.UNIT, PayloadKind.NAMED, PayloadKind.TUPLE, PayloadKind.TUPLE,
    ]
    paint = message.variants[3]
    assert paint.fields[0].shape == EnumRef("Color")
    assert paint.fields[1].shape == OptionalShape(StructRef("Point"))


def test_references_resolve_to_struct_or_enum() -> None:
    document = module(
        {"kind": "enum", "name": "Color", "variants": ["Red"]},
        {"kind": "struct", "name": "Pixel", "fields": [
            {"name": "at", "type": "Point"},
            {"name": "color", "type": "Option<Color>"},
        ]},
        POINT,
    )
    declarations, _ = _resolve(document)

    pixel = declarations.lookup("Pixel")
    assert pixel.fields[0].shape == StructRef("Point")
    assert pixel.fields[1].shape == OptionalShape(EnumRef("Color"))


def test_one_bad_declaration_does_not_stop_siblings() -> None:
    document = module(
        POINT,
        {"kind": "struct", "name": "Handle", "fields": [{"name": "raw", "type": "*const u8"}],
         "location": "ffi.rs:4"},
        {"kind": "struct", "name": "Clock", "fields": [{"name": "tick", "type": "char"}]},
    )
    source = SourceModule.from_dict(document)

    classified, diagnostics = classify_module(source)

    assert [d.name for d in classified] == ["Point"]
    assert [(d.declaration, d.kind, d.location) for d in diagnostics] == [
        ("Handle", "UnsupportedTypeKind", "ffi.rs:4"),
        ("Clock", "UnsupportedTypeKind", None),
    ]
    assert "*const u8" in diagnostics[0].message


def test_failed_declaration_names_still_resolve() -> None:
    document = module(
        {"kind": "struct", "name": "Handle", "fields": [{"name": "raw", "type": "&u8"}]},
        {"kind": "struct", "name": "Owner", "fields": [{"name": "handle", "type": "Handle"}]},
    )

    declarations, diagnostics = _resolve(document)

    assert [d.name for d in declarations.declarations] == ["Owner"]
    assert [d.declaration for d in diagnostics] == ["Handle"]


def test_unresolved_references_list_every_owner() -> None:
    document = module(
        {"kind": "struct", "name": "A", "fields": [{"name": "b", "type": "Missing"}], "location": "a.rs:1"},
        {"kind": "function", "name": "f", "params": [{"name": "x", "type": "Vec<Gone>"}], "return": "Missing"},
    )
    source = SourceModule.from_dict(document)
    classified, _ = classify_module(source)

    with pytest.raises(UnresolvedTypeReference) as excinfo:
        resolve_references(source, classified)

    assert excinfo.value.references == [
        ("Missing", "A", "a.rs:1"),
        ("Gone", "f", None),
        ("Missing", "f", None),
    ]
    assert [d.declaration for d in excinfo.value.to_diagnostics()] == ["A", "f", "f"]


def test_boxed_and_sequenced_recursion_is_accepted() -> None:
    declarations, diagnostics = _resolve(module(TREE))

    assert diagnostics == []
    tree = declarations.lookup("Tree")
    assert tree.fields[1].shape == OptionalShape(BoxedShape(StructRef("Tree")))
    assert tree.fields[2].shape == SequenceShape(StructRef("Tree"))


def test_inline_recursion_rejects_every_declaration_on_the_cycle() -> None:
    document = module(
        {"kind": "struct", "name": "Node", "fields": [{"name": "next", "type": "Option<Node>"}]},
        {"kind": "struct", "name": "Ping", "fields": [{"name": "pong", "type": "Pong"}]},
        {"kind": "enum", "name": "Pong", "variants": [{"name": "Back", "types": ["Ping"]}]},
        {"kind": "struct", "name": "User", "fields": [{"name": "ping", "type": "Box<Ping>"}]},
    )

    declarations, diagnostics = _resolve(document)

    assert [d.name for d in declarations.declarations] == ["User"]
    assert [d.declaration for d in diagnostics] == ["Node", "Ping", "Pong"]
    assert all(d.kind == "UnsupportedTypeKind" for d in diagnostics)
    assert "Box" in diagnostics[0].message
