"""Zero-copy views that remap indices onto other sequences.

Views satisfy the same capability contract as plain arrays, so every engine
operation accepts them as sources (and as destinations when writable). Index
translation is validated at access time rather than at construction, since
the underlying sequence may still grow before first use.

Examples::

    data = [1, 2, 3, 4, 5, 6]
    odds = view.stride(data, 0, 2)          # [1, 3, 5]
    backwards = view.reverse(data)          # [6, 5, 4, 3, 2, 1]
    pairs = view.interleave([1, 2, 0, 5, 6, 0], 0, 2, 3, 4)  # [1, 2, 5, 6]
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod

from .errors import MissingArgumentError, OutOfRangeError, ReadOnlyViewError
from .slices import storage_roots
from .values import is_sequence, is_writable


def _require_source(src, name: str = "src"):
    if src is None:
        raise MissingArgumentError(f"bad argument '{name}' (expected array or sequence, got None)")
    if not is_sequence(src):
        raise TypeError(f"bad argument '{name}' (expected array or sequence, got {type(src).__name__})")
    return src


class _View(ABC):
    __slots__ = ("_src",)

    def __init__(self, src) -> None:
        self._src = _require_source(src)

    @property
    def source(self):
        return self._src

    @property
    def sources(self) -> tuple:
        return (self._src,)

    @property
    def writable(self) -> bool:
        return is_writable(self._src)

    @abstractmethod
    def __len__(self) -> int: ...

    @abstractmethod
    def _locate(self, index) -> tuple[object, int]:
        """Map a view index to ``(sequence, index)``, raising ``OutOfRangeError`` when out of bounds."""

    def __getitem__(self, index):
        src, j = self._locate(index)
        return src[j]

    def __setitem__(self, index, value) -> None:
        if not self.writable:
            raise ReadOnlyViewError(f"{type(self).__name__} is read-only")
        src, j = self._locate(index)
        src[j] = value

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class _MappedView(_View):
    """A view over one source whose indices map through ``_translate``."""

    __slots__ = ()

    @abstractmethod
    def _translate(self, index: int) -> int: ...

    def _locate(self, index) -> tuple[object, int]:
        i = operator.index(index)
        n = len(self)
        if i < 0 or i >= n:
            raise OutOfRangeError(f"{type(self).__name__} index out of range", start=i, length=n)
        j = self._translate(i)
        m = len(self._src)
        if j < 0 or j >= m:
            raise OutOfRangeError(
                f"{type(self).__name__} maps index {i} outside its source", start=j, length=m
            )
        return self._src, j


class SliceView(_MappedView):
    """Offset view: ``i -> start + i``."""

    __slots__ = ("_start", "_count")

    def __init__(self, src, start: int | None = 0, count: int | None = None) -> None:
        super().__init__(src)
        self._start = 0 if start is None else operator.index(start)
        self._count = None if count is None else operator.index(count)

    def __len__(self) -> int:
        if self._count is not None:
            return self._count
        return max(0, len(self._src) - self._start)

    def _translate(self, index: int) -> int:
        return self._start + index


class StrideView(_MappedView):
    """Strided view: ``i -> start + i * stride``."""

    __slots__ = ("_start", "_stride", "_count")

    def __init__(self, src, start: int, stride: int, count: int | None = None) -> None:
        super().__init__(src)
        stride = operator.index(stride)
        if stride == 0:
            raise ValueError("bad argument 'stride' (must be non-zero)")
        self._start = operator.index(start)
        self._stride = stride
        self._count = None if count is None else operator.index(count)

    def __len__(self) -> int:
        if self._count is not None:
            return self._count
        if self._stride > 0:
            return max(0, (len(self._src) - self._start + self._stride - 1) // self._stride)
        if self._start < 0:
            return 0
        return self._start // -self._stride + 1

    def _translate(self, index: int) -> int:
        return self._start + index * self._stride


class ReverseView(_MappedView):
    """Reversed view over ``src[start : start + count]``."""

    __slots__ = ("_start", "_count")

    def __init__(self, src, start: int | None = 0, count: int | None = None) -> None:
        super().__init__(src)
        self._start = 0 if start is None else operator.index(start)
        self._count = None if count is None else operator.index(count)

    def __len__(self) -> int:
        if self._count is not None:
            return self._count
        return max(0, len(self._src) - self._start)

    def _translate(self, index: int) -> int:
        return self._start + len(self) - 1 - index


class InterleavedView(_MappedView):
    """Fixed-length view collecting ``group_size`` adjacent elements every ``stride``."""

    __slots__ = ("_start", "_group_size", "_stride", "_count")

    def __init__(self, src, start: int, group_size: int, stride: int, count: int) -> None:
        super().__init__(src)
        group_size = operator.index(group_size)
        stride = operator.index(stride)
        if group_size <= 0:
            raise ValueError("bad argument 'group_size' (must be greater than 0)")
        if stride == 0:
            raise ValueError("bad argument 'stride' (must be non-zero)")
        if count is None:
            raise MissingArgumentError("bad argument 'count' (interleaved views have a fixed length)")
        self._start = operator.index(start)
        self._group_size = group_size
        self._stride = stride
        self._count = operator.index(count)

    def __len__(self) -> int:
        return self._count

    def _translate(self, index: int) -> int:
        group, member = divmod(index, self._group_size)
        return self._start + group * self._stride + member


class JoinView(_View):
    """Concatenation of two sequences.

    Writable only when both sources are writable and reach no common base
    container, looking through nested views.
    """

    __slots__ = ("_second",)

    def __init__(self, first, second) -> None:
        super().__init__(first)
        self._second = _require_source(second, "b")

    @property
    def sources(self) -> tuple:
        return (self._src, self._second)

    @property
    def writable(self) -> bool:
        if not (is_writable(self._src) and is_writable(self._second)):
            return False
        return storage_roots(self._src).isdisjoint(storage_roots(self._second))

    def __len__(self) -> int:
        return len(self._src) + len(self._second)

    def _locate(self, index) -> tuple[object, int]:
        i = operator.index(index)
        first_len = len(self._src)
        n = first_len + len(self._second)
        if i < 0 or i >= n:
            raise OutOfRangeError("JoinView index out of range", start=i, length=n)
        if i < first_len:
            return self._src, i
        return self._second, i - first_len


def slice(src, start: int | None = 0, count: int | None = None) -> SliceView:
    """View ``count`` elements of ``src`` starting at ``start``.

    ``view.slice(buf, 1)`` turns a container indexed ``1..n`` into a 0-based one.
    """
    return SliceView(src, start, count)


def stride(src, start: int, stride: int, count: int | None = None) -> StrideView:
    return StrideView(src, start, stride, count)


def reverse(src, start: int | None = 0, count: int | None = None) -> ReverseView:
    return ReverseView(src, start, count)


def interleave(src, start: int, group_size: int, stride: int, count: int) -> InterleavedView:
    return InterleavedView(src, start, group_size, stride, count)


def join(a, b) -> JoinView:
    return JoinView(a, b)
