"""Slice resolution: the single place where range arithmetic is validated.

Every ``_ex`` operation resolves its ``(sequence, start, count)`` operands and
its destination here before any element is read or written.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass

from .allocation import allocate
from .errors import MissingArgumentError, OutOfRangeError
from .values import ElementKind, is_sequence, is_writable


@dataclass(frozen=True)
class Slice:
    seq: object
    start: int
    count: int

    @property
    def stop(self) -> int:
        return self.start + self.count

    def indices(self) -> range:
        return range(self.start, self.start + self.count)

    def offset(self, i: int) -> int:
        return self.start + i

    def __len__(self) -> int:
        return self.count


def require_sequence(value, name: str):
    if value is None:
        raise MissingArgumentError(f"bad argument '{name}' (expected array or sequence, got None)")
    if not is_sequence(value):
        raise TypeError(f"bad argument '{name}' (expected array or sequence, got {type(value).__name__})")
    return value


def length(seq) -> int:
    return len(require_sequence(seq, "src"))


def _as_index(value, *, name: str) -> int:
    try:
        return operator.index(value)
    except TypeError:
        raise TypeError(f"bad argument '{name}' (expected integer, got {type(value).__name__})") from None


def resolve(seq, start: int | None = None, count: int | None = None, *, name: str = "src") -> Slice:
    require_sequence(seq, name)
    n = len(seq)
    start = 0 if start is None else _as_index(start, name=f"{name}_index")
    if start < 0 or start > n:
        raise OutOfRangeError(f"'{name}' start index out of range", start=start, count=count, length=n)
    if count is None:
        count = n - start
    else:
        count = _as_index(count, name=f"{name}_count")
    if count < 0:
        raise OutOfRangeError(f"'{name}' count must be non-negative", start=start, count=count, length=n)
    if start + count > n:
        raise OutOfRangeError(f"'{name}' range exceeds sequence bounds", start=start, count=count, length=n)
    return Slice(seq, start, count)


def resolve_destination(
    dest,
    dest_index: int | None,
    count: int,
    *,
    kind: ElementKind = ElementKind.NUMBER,
    name: str = "dest",
) -> Slice:
    """Resolve a destination range of ``count`` elements.

    With ``dest=None`` a fresh array of exactly ``count`` elements is allocated
    through the allocation hook; this is the only allocation of the call.
    """
    if dest is None:
        if dest_index is not None:
            raise MissingArgumentError(f"bad argument '{name}' (dest_index given without a destination)")
        return Slice(allocate(kind, count), 0, count)
    if not is_writable(dest):
        raise TypeError(f"bad argument '{name}' (expected a writable sequence, got {type(dest).__name__})")
    return resolve(dest, dest_index, count, name=name)


def storage_roots(seq) -> frozenset[int]:
    """Identities of the base containers behind ``seq``, following view sources."""
    pending = [seq]
    roots: set[int] = set()
    while pending:
        item = pending.pop()
        sources = getattr(item, "sources", None)
        if sources is None:
            roots.add(id(item))
        else:
            pending.extend(sources)
    return frozenset(roots)


def same_storage(a: Slice, b: Slice) -> bool:
    """True when both slices may reach the same base container, directly or through views."""
    if a.seq is b.seq:
        return True
    return not storage_roots(a.seq).isdisjoint(storage_roots(b.seq))
