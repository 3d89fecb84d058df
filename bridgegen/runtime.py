"""
Support code imported by generated Python bindings.

Generated modules do ``import bridgegen.runtime as _rt`` and use the value
checks, the sealed variant base and the call helpers defined here. Moving
bytes across the boundary is left to a transport supplied by the caller.

Wire forms:

* integers, floats, booleans and strings are themselves
* optionals are the inner wire form or ``None``
* sequences and structs are lists, maps are lists of ``[key, value]`` pairs
* unit-only enums are their ordinal
* tagged unions are ``[ordinal, *payload]``
"""

from __future__ import annotations

import asyncio
import enum
import math
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Protocol, Sequence, Tuple

from .logging_config import get_logger

logger = get_logger(__name__)

_F32_MAX = 3.4028234663852886e38


class BindingError(Exception):
    """Base class for errors raised by generated bindings."""


class WireFormatError(BindingError, ValueError):
    """A value does not have the wire form or range its declaration requires."""


class UnknownVariantTag(BindingError, ValueError):
    """A discriminant does not name any variant of the enum being decoded."""

    def __init__(self, enum_name: str, tag: Any):
        super().__init__(f"unknown variant tag {tag!r} for {enum_name}")
        self.enum_name = enum_name
        self.tag = tag


class SourceError(BindingError):
    """The source side returned an error; ``payload`` holds the decoded value."""

    def __init__(self, payload: Any):
        super().__init__(payload)
        self.payload = payload


class SourcePanic(BindingError):
    """The source side aborted while serving a call."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Completion


class OutcomeKind(enum.Enum):
    OK = "ok"
    ERROR = "error"
    PANIC = "panic"


@dataclass(frozen=True)
class Outcome:
    """How one call ended, still in wire form."""

    kind: OutcomeKind
    value: Any = None

    def unwrap(
        self,
        decode: Callable[[Any], Any],
        decode_error: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """Decode a success, or raise the error this outcome stands for."""
        if self.kind == OutcomeKind.OK:
            return decode(self.value)
        if self.kind == OutcomeKind.PANIC:
            raise SourcePanic(str(self.value))
        if decode_error is None:
            raise WireFormatError("a function that cannot fail returned an error")
        raise SourceError(decode_error(self.value))


class WireFailure(Exception):
    """Raised by a transport's ``call`` when the source side did not succeed."""

    def __init__(self, outcome: Outcome):
        super().__init__(outcome.value)
        self.outcome = outcome

    @classmethod
    def error(cls, payload: Any) -> "WireFailure":
        return cls(Outcome(OutcomeKind.ERROR, payload))

    @classmethod
    def panic(cls, message: str) -> "WireFailure":
        return cls(Outcome(OutcomeKind.PANIC, message))


class CompletionSlot:
    """Single-assignment slot through which a transport completes an async call.

    Any thread may complete it, exactly once; a second completion is a
    transport bug and raises ``AssertionError``.
    """

    def __init__(self, deliver: Callable[[Outcome], None], wire_name: str = ""):
        self.wire_name = wire_name
        self._deliver = deliver
        self._lock = threading.Lock()
        self._outcome: Optional[Outcome] = None

    @property
    def done(self) -> bool:
        with self._lock:
            return self._outcome is not None

    def succeed(self, wire: Any):
        self._complete(Outcome(OutcomeKind.OK, wire))

    def fail(self, payload: Any):
        self._complete(Outcome(OutcomeKind.ERROR, payload))

    def panic(self, message: str):
        self._complete(Outcome(OutcomeKind.PANIC, message))

    def _complete(self, outcome: Outcome):
        with self._lock:
            if self._outcome is not None:
                raise AssertionError(
                    f"completion slot of {self.wire_name or 'call'} completed twice "
                    f"(first {self._outcome.kind.value}, then {outcome.kind.value})"
                )
            self._outcome = outcome
        self._deliver(outcome)


class Transport(Protocol):
    """What generated bindings need from the code that crosses the boundary."""

    def call(self, wire_name: str, args: list) -> Any:
        """Run a call to completion; raise ``WireFailure`` if it did not succeed."""
        ...

    def call_async(self, wire_name: str, args: list, slot: CompletionSlot) -> None:
        """Start a call without blocking; complete ``slot`` exactly once."""
        ...


def invoke(
    transport: Transport,
    wire_name: str,
    args: list,
    decode: Callable[[Any], Any],
    decode_error: Optional[Callable[[Any], Any]] = None,
) -> Any:
    """Perform a blocking call and decode its result."""
    try:
        wire = transport.call(wire_name, args)
    except WireFailure as failure:
        outcome = failure.outcome
    else:
        outcome = Outcome(OutcomeKind.OK, wire)
    return outcome.unwrap(decode, decode_error)


def dispatch(
    transport: Transport,
    wire_name: str,
    args: list,
    decode: Callable[[Any], Any],
    decode_error: Optional[Callable[[Any], Any]] = None,
) -> "asyncio.Future[Any]":
    """Start an async call and return a future for its decoded result.

    Must be called from a running event loop. The completion may arrive on
    any thread; it is handed to the loop with ``call_soon_threadsafe``.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def resolve(outcome: Outcome):
        if future.done():
            logger.debug("Dropping completion of %s: future already done", wire_name)
            return
        try:
            result = outcome.unwrap(decode, decode_error)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    def deliver(outcome: Outcome):
        try:
            loop.call_soon_threadsafe(resolve, outcome)
        except RuntimeError:
            logger.debug("Dropping completion of %s: event loop is closed", wire_name)

    slot = CompletionSlot(deliver, wire_name)
    try:
        transport.call_async(wire_name, args, slot)
    except Exception as e:
        logger.debug("Transport refused %s: %s", wire_name, e)
        future.set_exception(e)
    return future


# Tagged unions


class SealedVariant:
    """Base of the case classes generated for one tagged union.

    The base itself cannot be instantiated, and once :func:`seal` has run
    neither the base nor its cases accept new subclasses.
    """

    variants: Tuple[type, ...] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        for base in cls.__mro__[1:]:
            if base.__dict__.get("_sealed", False):
                raise TypeError(f"{base.__name__} is sealed; it cannot be subclassed")

    def __new__(cls, *args, **kwargs):
        if "variants" in cls.__dict__:
            raise TypeError(f"{cls.__name__} is a variant base; instantiate one of its cases")
        return super().__new__(cls)


def seal(base: type, variants: Sequence[type]):
    """Close ``base`` over ``variants`` in declaration order."""
    base.variants = tuple(variants)
    base._sealed = True


def split_variant(wire: Any, enum_name: str) -> Tuple[int, list]:
    """Split ``[tag, *payload]`` into the tag and the payload list."""
    if not isinstance(wire, list) or not wire:
        raise WireFormatError(f"{enum_name}: expected [tag, *payload], got {wire!r}")
    tag = wire[0]
    if isinstance(tag, bool) or not isinstance(tag, int):
        raise WireFormatError(f"{enum_name}: variant tag must be an integer, got {tag!r}")
    return tag, wire[1:]


def unexpected_value(expected: str, value: Any) -> WireFormatError:
    return WireFormatError(f"expected {expected}, got {type(value).__name__}")


# Unit-only enums


def encode_ordinal(enum_type: type, value: Any) -> int:
    if not isinstance(value, enum_type):
        raise unexpected_value(enum_type.__name__, value)
    return value.value


def decode_ordinal(enum_type: type, wire: Any, enum_name: str) -> Any:
    if isinstance(wire, bool) or not isinstance(wire, int):
        raise WireFormatError(f"{enum_name}: ordinal must be an integer, got {wire!r}")
    # Calling an Enum without members raises TypeError, so index the members instead
    members = list(enum_type)
    if not 0 <= wire < len(members):
        raise UnknownVariantTag(enum_name, wire)
    return members[wire]


# Value checks, used in both directions


def check_int(value: Any, bits: int, signed: bool) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise unexpected_value(f"{'i' if signed else 'u'}{bits}", value)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise WireFormatError(
            f"{value} is out of range for {'i' if signed else 'u'}{bits} [{low}, {high}]"
        )
    return value


def check_float(value: Any, bits: int) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise unexpected_value(f"f{bits}", value)
    try:
        value = float(value)
    except OverflowError:
        raise WireFormatError(f"{value} is out of range for f{bits}") from None
    if bits == 32 and math.isfinite(value) and abs(value) > _F32_MAX:
        raise WireFormatError(f"{value} is out of range for f32")
    return value


def check_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise unexpected_value("bool", value)
    return value


def check_text(value: Any) -> str:
    if not isinstance(value, str):
        raise unexpected_value("str", value)
    return value


def check_unit(value: Any) -> None:
    if value is not None:
        raise unexpected_value("None", value)
    return None


def check_instance(value: Any, cls: type) -> Any:
    if not isinstance(value, cls):
        raise unexpected_value(cls.__name__, value)
    return value


def check_list(value: Any, length: Optional[int] = None, what: str = "sequence") -> list:
    """Accept a list (or tuple when encoding); optionally of an exact length."""
    if not isinstance(value, (list, tuple)):
        raise unexpected_value(f"a list for {what}", value)
    if length is not None and len(value) != length:
        raise WireFormatError(f"{what}: expected {length} element(s), got {len(value)}")
    return value


def check_dict(value: Any) -> dict:
    if not isinstance(value, dict):
        raise unexpected_value("dict", value)
    return value


def check_pairs(wire: Any) -> Iterator[Tuple[Any, Any]]:
    """Iterate the ``[key, value]`` pairs of a wire map."""
    for pair in check_list(wire, what="map"):
        check_list(pair, 2, "map entry")
        yield pair[0], pair[1]
