"""Tests for bridgegen.runtime."""

from __future__ import annotations

import asyncio
import enum
import math
import threading

import pytest

from bridgegen import runtime as rt


class Level(enum.Enum):
    LOW = 0
    HIGH = 1


@pytest.mark.parametrize(
    "value, bits, signed",
    [(0, 8, False), (255, 8, False), (-128, 8, True), (127, 8, True), (2**64 - 1, 64, False), (-(2**63), 64, True)],
)
def test_check_int_accepts_the_full_range(value: int, bits: int, signed: bool) -> None:
    assert rt.check_int(value, bits, signed) == value


@pytest.mark.parametrize(
    "value, bits, signed",
    [(256, 8, False), (-1, 8, False), (128, 8, True), (2**64, 64, False), (True, 8, False), (1.0, 32, True), ("1", 8, True)],
)
def test_check_int_rejects(value, bits: int, signed: bool) -> None:
    with pytest.raises(rt.WireFormatError):
        rt.check_int(value, bits, signed)


def test_check_float() -> None:
    assert rt.check_float(3, 64) == 3.0
    assert math.isinf(rt.check_float(float("inf"), 32))
    assert math.isnan(rt.check_float(float("nan"), 32))
    with pytest.raises(rt.WireFormatError, match="out of range for f32"):
        rt.check_float(1e39, 32)
    with pytest.raises(rt.WireFormatError, match="out of range for f64"):
        rt.check_float(10**400, 64)
    with pytest.raises(rt.WireFormatError):
        rt.check_float(False, 64)


def test_scalar_and_container_checks() -> None:
    assert rt.check_bool(False) is False
    assert rt.check_text("") == ""
    assert rt.check_unit(None) is None
    assert rt.check_list((1, 2), 2) == (1, 2)
    assert list(rt.check_pairs([["a", 1], ["b", 2]])) == [("a", 1), ("b", 2)]

    with pytest.raises(rt.WireFormatError):
        rt.check_bool(0)
    with pytest.raises(rt.WireFormatError):
        rt.check_text(b"bytes")
    with pytest.raises(rt.WireFormatError):
        rt.check_unit([])
    with pytest.raises(rt.WireFormatError, match="expected 3 element"):
        rt.check_list([1], 3, "Point")
    with pytest.raises(rt.WireFormatError):
        rt.check_dict([("a", 1)])
    with pytest.raises(rt.WireFormatError, match="map entry"):
        list(rt.check_pairs([["a", 1, 2]]))


def test_ordinals() -> None:
    assert rt.encode_ordinal(Level, Level.HIGH) == 1
    assert rt.decode_ordinal(Level, 0, "Level") is Level.LOW

    with pytest.raises(rt.WireFormatError):
        rt.encode_ordinal(Level, 1)
    with pytest.raises(rt.WireFormatError):
        rt.decode_ordinal(Level, True, "Level")
    with pytest.raises(rt.UnknownVariantTag, match="unknown variant tag 5 for Level"):
        rt.decode_ordinal(Level, 5, "Level")
    with pytest.raises(rt.UnknownVariantTag):
        rt.decode_ordinal(Level, -1, "Level")


def test_decoding_any_ordinal_of_an_empty_enum_is_an_unknown_tag() -> None:
    class Never(enum.Enum):
        pass

    for wire in (0, 1):
        with pytest.raises(rt.UnknownVariantTag, match="for Never"):
            rt.decode_ordinal(Never, wire, "Never")


def test_split_variant() -> None:
    assert rt.split_variant([2, "a", None], "Message") == (2, ["a", None])

    for wire in ([], 3, ["1"], [True]):
        with pytest.raises(rt.WireFormatError):
            rt.split_variant(wire, "Message")


def test_outcome_unwrap() -> None:
    decode = str.upper

    assert rt.Outcome(rt.OutcomeKind.OK, "ok").unwrap(decode) == "OK"
    with pytest.raises(rt.SourceError) as excinfo:
        rt.Outcome(rt.OutcomeKind.ERROR, "bad").unwrap(decode, decode)
    assert excinfo.value.payload == "BAD"
    with pytest.raises(rt.SourcePanic, match="boom"):
        rt.Outcome(rt.OutcomeKind.PANIC, "boom").unwrap(decode, decode)
    with pytest.raises(rt.WireFormatError):
        rt.Outcome(rt.OutcomeKind.ERROR, "bad").unwrap(decode)


def test_completion_slot_accepts_one_completion_from_any_thread() -> None:
    delivered = []
    slot = rt.CompletionSlot(delivered.append, "wire_fetch")
    errors = []

    def complete(value):
        try:
            slot.succeed(value)
        except AssertionError as e:
            errors.append(e)

    threads = [threading.Thread(target=complete, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert slot.done
    assert len(delivered) == 1
    assert len(errors) == 7


def test_dispatch_reports_transport_errors_on_the_future() -> None:
    class Refusing:
        def call_async(self, wire_name, args, slot):
            raise ConnectionError("transport is down")

    async def main():
        future = rt.dispatch(Refusing(), "wire_fetch", [], decode=lambda wire: wire)
        with pytest.raises(ConnectionError):
            await future

    asyncio.run(main())


def test_dispatch_requires_a_running_loop() -> None:
    with pytest.raises(RuntimeError):
        rt.dispatch(object(), "wire_fetch", [], decode=lambda wire: wire)


def test_seal_blocks_new_cases() -> None:
    class Base(rt.SealedVariant):
        pass

    class First(Base):
        pass

    rt.seal(Base, (First,))

    assert Base.variants == (First,)
    assert isinstance(First(), Base)
    with pytest.raises(TypeError):
        Base()
    with pytest.raises(TypeError):
        type("Second", (Base,), {})
