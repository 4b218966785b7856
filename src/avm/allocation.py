"""Pluggable allocation hook used whenever the engine materialises a result.

The hook is process-wide configuration: assign it before concurrent use and
never reassign it while another thread is inside an engine call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, MutableSequence
from contextlib import contextmanager
from typing import Callable

from .errors import LengthMismatchError, require
from .values import ElementKind, zero_of

logger = logging.getLogger(__name__)

Allocator = Callable[[ElementKind, int], MutableSequence]


def default_allocator(kind: ElementKind, length: int) -> list:
    return [zero_of(kind)] * length


_allocator: Allocator = default_allocator


def get_allocator() -> Allocator:
    return _allocator


def set_allocator(allocator: Allocator) -> Allocator:
    """Replace the process-wide allocator and return the previous one.

    Containers allocated before the call keep their representation.
    """
    global _allocator
    require(allocator, "allocator")
    if not callable(allocator):
        raise TypeError(f"allocator must be callable, got {type(allocator).__name__}")
    previous = _allocator
    _allocator = allocator
    logger.debug("allocator replaced: %r -> %r", previous, allocator)
    return previous


def reset_allocator() -> Allocator:
    return set_allocator(default_allocator)


@contextmanager
def using_allocator(allocator: Allocator) -> Iterator[Allocator]:
    previous = set_allocator(allocator)
    try:
        yield allocator
    finally:
        set_allocator(previous)


def allocate(kind: ElementKind, length: int) -> MutableSequence:
    if length < 0:
        raise ValueError(f"allocation length must be non-negative, got {length}")
    dest = _allocator(kind, length)
    if len(dest) != length:
        raise LengthMismatchError(
            f"allocator returned a container of length {len(dest)}, expected {length}"
        )
    return dest
