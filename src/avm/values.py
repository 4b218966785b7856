"""Capability contract and element kinds for containers accepted by the engine."""

from __future__ import annotations

import numbers
from enum import Enum
from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


class ElementKind(str, Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"
    ANY = "any"


@runtime_checkable
class ReadableSequence(Protocol[T]):
    """Indexed read over ``0 .. len-1``."""

    def __getitem__(self, index: int) -> T: ...

    def __len__(self) -> int: ...


@runtime_checkable
class WritableSequence(ReadableSequence[T], Protocol[T]):
    """Indexed read and write; required for destinations."""

    def __setitem__(self, index: int, value: T) -> None: ...


@runtime_checkable
class GrowableSequence(WritableSequence[T], Protocol[T]):
    """A writable sequence that can be extended in place."""

    def extend(self, values) -> None: ...


def is_scalar(value: object) -> bool:
    return isinstance(value, numbers.Number)


def is_sequence(value: object) -> bool:
    if value is None or isinstance(value, (str, bytes)) or is_scalar(value):
        return False
    return hasattr(value, "__getitem__") and hasattr(value, "__len__")


def is_writable(value: object) -> bool:
    if isinstance(value, tuple):
        return False
    writable = getattr(value, "writable", None)
    if isinstance(writable, bool):
        return writable
    return is_sequence(value) and hasattr(value, "__setitem__")


def is_growable(value: object) -> bool:
    return is_writable(value) and callable(getattr(value, "extend", None))


def kind_of(value: object) -> ElementKind:
    # numpy.bool_ is not a numbers.Number, numpy integer and float scalars are.
    if isinstance(value, bool) or type(value).__name__ in ("bool_", "bool"):
        return ElementKind.BOOLEAN
    if is_scalar(value):
        return ElementKind.NUMBER
    return ElementKind.ANY


def kind_of_sequence(src, start: int = 0, count: int | None = None) -> ElementKind:
    """Element kind of a sequence, sampled from its first element."""
    if count is None:
        count = len(src) - start
    if count <= 0:
        return ElementKind.NUMBER
    return kind_of(src[start])


def zero_of(kind: ElementKind):
    if kind is ElementKind.NUMBER:
        return 0
    if kind is ElementKind.BOOLEAN:
        return False
    return None
