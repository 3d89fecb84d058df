"""End-to-end tests of generated Python bindings."""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import inspect

import pytest

from bridgegen import generate_bindings
from bridgegen.runtime import SourceError, SourcePanic, UnknownVariantTag, WireFailure, WireFormatError
from tests._fixtures.declarations import (
    ADD,
    FETCH,
    PARSE_POINT,
    POINT,
    SHAPE,
    kitchen_sink,
    module,
)
from tests._fixtures.transport import ManualTransport

NUMBERS = {
    "kind": "struct",
    "name": "Numbers",
    "fields": [
        {"name": "small", "type": "u8"},
        {"name": "short", "type": "u16"},
        {"name": "word", "type": "u32"},
        {"name": "wide", "type": "u64"},
        {"name": "signed", "type": "i8"},
        {"name": "real", "type": "f32"},
    ],
}


def test_point_round_trips_with_fields_in_order(load_bindings) -> None:
    mod = load_bindings(module(POINT))

    point = mod.Point(x=3, y=-4)
    wire = mod.encode_point(point)

    assert [f.name for f in dataclasses.fields(mod.Point)] == ["x", "y"]
    assert wire == [3, -4]
    assert mod.decode_point(wire) == point


def test_unit_case_decodes_to_unit_case(load_bindings) -> None:
    mod = load_bindings(module(SHAPE))

    square = mod.decode_shape(mod.encode_shape(mod.ShapeSquare()))
    circle = mod.decode_shape(mod.encode_shape(mod.ShapeCircle(radius=1.5)))

    assert mod.encode_shape(mod.ShapeSquare()) == [1]
    assert isinstance(square, mod.ShapeSquare)
    assert not isinstance(square, mod.ShapeCircle)
    assert circle == mod.ShapeCircle(radius=1.5)
    assert mod.Shape.variants == (mod.ShapeCircle, mod.ShapeSquare)


def test_tagged_union_is_closed(load_bindings) -> None:
    mod = load_bindings(module(SHAPE))

    with pytest.raises(TypeError, match="variant base"):
        mod.Shape()
    with pytest.raises(TypeError, match="sealed"):
        type("ShapeTriangle", (mod.Shape,), {})
    with pytest.raises(TypeError, match="sealed"):
        type("BigCircle", (mod.ShapeCircle,), {})


def test_unknown_discriminant_is_rejected_before_payload(load_bindings) -> None:
    mod = load_bindings(kitchen_sink())

    with pytest.raises(UnknownVariantTag) as excinfo:
        mod.decode_message([9, "not", "a", "payload"])
    assert excinfo.value.enum_name == "Message"
    assert excinfo.value.tag == 9
    assert isinstance(excinfo.value, ValueError)

    with pytest.raises(UnknownVariantTag):
        mod.decode_color(3)
    with pytest.raises(WireFormatError, match="expected 2 element"):
        mod.decode_message([1, 5])


def test_kitchen_sink_round_trips(load_bindings) -> None:
    mod = load_bindings(kitchen_sink())

    tree = mod.Tree(
        value=1,
        left=mod.Tree(value=2, left=None, children=[]),
        children=[mod.Tree(value=3, left=None, children=[])],
    )
    inventory = mod.Inventory(
        counts={"bolts": 4_000_000_000, "nuts": 0},
        by_color={mod.Color.GREEN: [mod.Point(x=1, y=2)], mod.Color.RED: []},
        tags=["a", None, ""],
        ratio=0.5,
        enabled=True,
    )
    messages = [
        mod.MessageQuit(),
        mod.MessageMove(x=-1, y=1),
        mod.MessageWrite(field0="hello"),
        mod.MessagePaint(field0=mod.Color.BLUE, field1=None),
        mod.MessagePaint(field0=mod.Color.RED, field1=mod.Point(x=0, y=0)),
    ]
    pair = mod.Pair(field0=2**64 - 1, field1="max")

    assert mod.decode_tree(mod.encode_tree(tree)) == tree
    assert mod.decode_inventory(mod.encode_inventory(inventory)) == inventory
    assert [mod.decode_message(mod.encode_message(m)) for m in messages] == messages
    assert mod.decode_pair(mod.encode_pair(pair)) == pair


def test_wire_forms(load_bindings) -> None:
    mod = load_bindings(kitchen_sink())

    assert mod.encode_color(mod.Color.BLUE) == 2
    assert mod.encode_message(mod.MessageMove(x=5, y=6)) == [1, 5, 6]
    assert mod.encode_message(mod.MessagePaint(field0=mod.Color.RED, field1=None)) == [3, 0, None]
    assert mod.encode_inventory(
        mod.Inventory(counts={"a": 1}, by_color={}, tags=[], ratio=1.0, enabled=False)
    ) == [[["a", 1]], [], [], 1.0, False]


def test_absent_optional_differs_from_empty_value(load_bindings) -> None:
    mod = load_bindings(kitchen_sink())

    empty = mod.decode_inventory([[], [], [""], 0.0, False])
    absent = mod.decode_inventory([[], [], [None], 0.0, False])

    assert empty.tags == [""]
    assert absent.tags == [None]
    assert mod.decode_tree([1, None, []]).left is None


def test_unit_only_enum_is_native_enum(load_bindings) -> None:
    mod = load_bindings(kitchen_sink())

    assert issubclass(mod.Color, enum.Enum)
    assert [member.name for member in mod.Color] == ["RED", "GREEN", "BLUE"]
    assert [member.value for member in mod.Color] == [0, 1, 2]


def test_empty_enum_and_empty_struct(load_bindings) -> None:
    mod = load_bindings(
        module(
            {"kind": "enum", "name": "Never", "variants": []},
            {"kind": "struct", "name": "Marker", "fields": []},
        )
    )

    assert list(mod.Never) == []
    with pytest.raises(UnknownVariantTag):
        mod.decode_never(0)
    assert mod.encode_marker(mod.Marker()) == []
    assert mod.decode_marker([]) == mod.Marker()


def test_unsigned_widths_keep_their_full_range(load_bindings) -> None:
    mod = load_bindings(module(NUMBERS))

    for small, short, word, wide in [(0, 0, 0, 0), (255, 65535, 2**32 - 1, 2**64 - 1), (128, 2**15, 2**31, 2**63)]:
        value = mod.Numbers(small=small, short=short, word=word, wide=wide, signed=-128, real=1.25)
        assert mod.decode_numbers(mod.encode_numbers(value)) == value


@pytest.mark.parametrize(
    "field, bad",
    [("small", 256), ("short", -1), ("word", 2**32), ("wide", 2**64), ("signed", 128), ("small", True), ("real", 1e39)],
)
def test_out_of_range_values_are_rejected(load_bindings, field: str, bad) -> None:
    mod = load_bindings(module(NUMBERS))
    values = {"small": 0, "short": 0, "word": 0, "wide": 0, "signed": 0, "real": 0.0}

    with pytest.raises(WireFormatError):
        mod.encode_numbers(mod.Numbers(**{**values, field: bad}))

    wire = mod.encode_numbers(mod.Numbers(**values))
    index = list(values).index(field)
    wire[index] = bad
    with pytest.raises(WireFormatError):
        mod.decode_numbers(wire)


def test_encode_checks_the_aggregate_type(load_bindings) -> None:
    mod = load_bindings(module(POINT, SHAPE))

    with pytest.raises(WireFormatError):
        mod.encode_point((3, 4))
    with pytest.raises(WireFormatError):
        mod.encode_shape(mod.Point(x=1, y=1))
    with pytest.raises(WireFormatError):
        mod.decode_point([1])


def test_sync_call_encodes_arguments_and_decodes_result(load_bindings, transport) -> None:
    mod = load_bindings(module(ADD))
    transport.on("wire_add", lambda a, b: a + b)
    api = mod.GeometryBindings(transport)

    assert api.add(2, 40) == 42
    assert transport.calls == [("wire_add", [2, 40])]

    with pytest.raises(WireFormatError):
        api.add(2**31, 0)
    assert len(transport.calls) == 1

    transport.on("wire_add", lambda a, b: 2**40)
    with pytest.raises(WireFormatError):
        api.add(1, 1)


def test_fallible_call_raises_source_error(load_bindings, transport) -> None:
    mod = load_bindings(module(POINT, PARSE_POINT))
    api = mod.GeometryBindings(transport)

    transport.on("wire_parse_point", lambda text: [1, 2])
    assert api.parse_point("1,2") == mod.Point(x=1, y=2)

    def reject(text):
        raise WireFailure.error(f"cannot parse {text!r}")

    transport.on("wire_parse_point", reject)
    with pytest.raises(SourceError) as excinfo:
        api.parse_point("x")
    assert excinfo.value.payload == "cannot parse 'x'"


def test_panic_surfaces_on_every_call(load_bindings, transport) -> None:
    mod = load_bindings(module(ADD))
    api = mod.GeometryBindings(transport)

    def explode(a, b):
        raise WireFailure.panic("attempt to add with overflow")

    transport.on("wire_add", explode)
    with pytest.raises(SourcePanic, match="overflow"):
        api.add(1, 2)

    def fail(a, b):
        raise WireFailure.error("unexpected")

    transport.on("wire_add", fail)
    with pytest.raises(WireFormatError, match="cannot fail"):
        api.add(1, 2)


def test_async_fallible_call_resolves(load_bindings, transport) -> None:
    mod = load_bindings(module(FETCH))
    api = mod.GeometryBindings(transport)
    transport.on("wire_fetch", lambda id: f"item {id}")

    async def main():
        future = api.fetch(7)
        assert isinstance(future, asyncio.Future)
        return await future

    assert asyncio.run(main()) == "item 7"
    assert transport.calls == [("wire_fetch", [7])]


def test_async_failure_and_panic(load_bindings, transport) -> None:
    mod = load_bindings(module(FETCH))
    api = mod.GeometryBindings(transport)

    def missing(id):
        raise WireFailure.error(f"no item {id}")

    def crash(id):
        raise WireFailure.panic("index out of bounds")

    async def main():
        transport.on("wire_fetch", missing)
        with pytest.raises(SourceError) as excinfo:
            await api.fetch(3)
        assert excinfo.value.payload == "no item 3"

        transport.on("wire_fetch", crash)
        with pytest.raises(SourcePanic):
            await api.fetch(4)

    asyncio.run(main())


def test_async_completion_happens_exactly_once(load_bindings) -> None:
    mod = load_bindings(module(FETCH))
    manual = ManualTransport()
    api = mod.GeometryBindings(manual)

    async def main():
        future = api.fetch(1)
        (slot,) = manual.slots
        slot.fail("gone")
        with pytest.raises(AssertionError, match="completed twice"):
            slot.succeed("late")
        with pytest.raises(SourceError):
            await future
        assert slot.done

    asyncio.run(main())


def test_completion_after_cancel_or_loop_close_is_dropped(load_bindings) -> None:
    mod = load_bindings(module(FETCH))
    manual = ManualTransport()
    api = mod.GeometryBindings(manual)

    async def cancelled():
        future = api.fetch(1)
        future.cancel()
        manual.slots[0].succeed("late")
        await asyncio.sleep(0)
        return future.cancelled()

    async def abandoned():
        api.fetch(2)

    assert asyncio.run(cancelled()) is True
    asyncio.run(abandoned())
    manual.slots[1].succeed("after close")


def test_unit_returns(load_bindings, transport) -> None:
    mod = load_bindings(kitchen_sink())
    api = mod.PaintBindings(transport)
    transport.on("wire_reset", lambda: None).on("wire_ping", lambda: None)

    assert api.reset() is None

    async def main():
        return await api.ping()

    assert asyncio.run(main()) is None


def test_keyword_parameter_style(load_bindings, transport) -> None:
    mod = load_bindings(module(ADD), param_style="keyword", api_class_name="Client")
    api = mod.Client(transport)
    transport.on("wire_add", lambda a, b: a - b)

    params = inspect.signature(api.add).parameters
    assert [p.kind for p in params.values()] == [inspect.Parameter.KEYWORD_ONLY] * 2
    assert api.add(b=1, a=5) == 4
    with pytest.raises(TypeError):
        api.add(5, 1)


def test_frozen_dataclasses(load_bindings) -> None:
    mod = load_bindings(module(POINT, SHAPE), frozen=True)

    with pytest.raises(dataclasses.FrozenInstanceError):
        mod.Point(x=1, y=2).x = 5
    assert hash(mod.ShapeCircle(radius=1.0)) == hash(mod.ShapeCircle(radius=1.0))


def test_reserved_words_are_escaped(load_bindings, transport) -> None:
    document = module(
        {"kind": "struct", "name": "Options", "fields": [
            {"name": "class", "type": "bool"},
            {"name": "from", "type": "String"},
        ]},
        {"kind": "function", "name": "import", "params": [{"name": "lambda", "type": "u8"}], "return": "Options"},
    )
    mod = load_bindings(document)
    api = mod.GeometryBindings(transport)
    transport.on("wire_import", lambda value: [value > 1, "here"])

    options = api.import_(2)

    assert options.class_ is True
    assert options.from_ == "here"
    assert "lambda_" in inspect.signature(api.import_).parameters
    assert set(generate_bindings(document).warnings) == {
        "`class` is a reserved word; emitted as `class_`",
        "`from` is a reserved word; emitted as `from_`",
        "`import` is a reserved word; emitted as `import_`",
        "`lambda` is a reserved word; emitted as `lambda_`",
    }


def test_generated_module_layout() -> None:
    result = generate_bindings(kitchen_sink())
    code = result.code

    assert code.startswith("# AUTO-GENERATED by bridgegen from module `paint`. Do not edit.\n")
    assert "import bridgegen.runtime as _rt\n" in code
    positions = [
        code.index(marker)
        for marker in (
            "class Color(enum.Enum):",
            "class Point:",
            "class Pair:",
            "class Tree:",
            "class Shape(_rt.SealedVariant):",
            "class Message(_rt.SealedVariant):",
            "class Inventory:",
            "class PaintBindings:",
            "    def add(",
            "    def parse_point(",
            "    def reset(",
            "    def fetch(",
            "    def ping(",
        )
    ]
    assert positions == sorted(positions)
    assert "# Adds two numbers." in code
    assert "    def fetch(self, id: int) -> asyncio.Future[str]:" in code


def test_generation_is_deterministic() -> None:
    first = generate_bindings(kitchen_sink())
    second = generate_bindings(kitchen_sink())

    assert first.code == second.code
    assert first.descriptor == second.descriptor


def test_custom_runtime_module_name() -> None:
    code = generate_bindings(module(POINT), config={"runtime_module": "vendor.bridge_rt"}).code

    assert "import vendor.bridge_rt as _rt\n" in code


def test_module_path_yields_a_valid_api_class(load_bindings, transport) -> None:
    mod = load_bindings(module(POINT, ADD, name="crate::api"))
    transport.on("wire_add", lambda a, b: a + b)

    assert mod.CrateApiBindings(transport).add(2, 3) == 5


def test_unit_values_cross_as_none(load_bindings) -> None:
    mod = load_bindings(module({"kind": "struct", "name": "Flags", "fields": [
        {"name": "seen", "type": "HashMap<String, ()>"},
        {"name": "ticks", "type": "Vec<()>"},
    ]}))

    flags = mod.Flags(seen={"a": None}, ticks=[None, None])

    assert mod.encode_flags(flags) == [[["a", None]], [None, None]]
    assert mod.decode_flags([[["a", None]], [None, None]]) == flags
    with pytest.raises(WireFormatError):
        mod.decode_flags([[["a", 1]], []])
