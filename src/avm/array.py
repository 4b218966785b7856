"""Broadcasting elementwise engine over flat, homogeneously typed arrays.

Every base operation comes in two forms:

* a short form over whole arrays that allocates its result through
  ``avm.allocation`` exactly once, e.g. ``add(a, b)``;
* an ``_ex`` form over slices ``(seq, index, count)`` that writes into an
  optional destination, e.g. ``add_ex(a, 0, 3, b, 0, dest, 2)``. Without a
  destination the ``_ex`` form allocates a result of ``count`` elements.

Binary operations broadcast their second operand: another sequence of the
same resolved length is combined pairwise, a scalar is combined with every
element. Resolved counts of 1..16 run through kernels specialised per count,
longer slices through a single loop; both apply the scalar function in
ascending index order.

Overlapping source and destination ranges:

* elementwise operations (arithmetic, comparison, map, mul_add, lerp) are
  safe when the ranges coincide or are disjoint;
* ``copy_ex`` behaves like ``memmove`` on a shared container and reads through
  a snapshot when source and destination reach the same storage through
  views; ``reverse_ex``, ``join_ex``,
  ``reshape_ex``, ``flatten_ex`` and ``append`` read through a snapshot and
  are safe for any overlap.

Example::

    a = array.arange(0, 9)
    b = array.arange(9, 0, -1)
    assert array.all_equal_constant(array.add(a, b), 9)
"""

from __future__ import annotations

import math
import operator
from typing import Callable, Final

from . import _unrolled
from .allocation import allocate
from .config import EPSILON, MAX_UNROLLED_ARITY, USE_UNROLLED_KERNELS
from .errors import LengthMismatchError, MissingArgumentError, NotGrowableError, ShapeMismatchError
from .slices import Slice, require_sequence, resolve, resolve_destination, same_storage
from .values import ElementKind, is_growable, is_scalar, is_sequence, kind_of, kind_of_sequence

_MISSING: Final = object()
_RANGE_TOLERANCE: Final[float] = 1e-9


def _use_unrolled(count: int) -> bool:
    return USE_UNROLLED_KERNELS and 1 <= count <= MAX_UNROLLED_ARITY


# ---------------------------------------------------------------------------
# Kernel drivers
# ---------------------------------------------------------------------------


def _read(src: Slice) -> tuple:
    if src.count == 0:
        return ()
    if _use_unrolled(src.count):
        return _unrolled.get_kernel(src.count)(src.seq, src.start)
    seq, start = src.seq, src.start
    return tuple(seq[start + i] for i in range(src.count))


def _write(dest: Slice, values) -> None:
    count = dest.count
    if count == 0:
        return
    if _use_unrolled(count):
        _unrolled.set_kernel(count)(dest.seq, dest.start, *values)
        return
    seq, start = dest.seq, dest.start
    for i, value in enumerate(values):
        seq[start + i] = value


def _compute(fn: Callable, sources: list[Slice], constants: tuple, count: int):
    """Apply ``fn`` position by position; returns a tuple (unrolled) or ``None``."""
    if _use_unrolled(count):
        args: list[object] = []
        for src in sources:
            args.append(src.seq)
            args.append(src.start)
        kernel = _unrolled.map_kernel(count, len(sources), len(constants))
        return kernel(fn, *args, *constants)
    return None


def _map_loop(fn: Callable, sources: list[Slice], constants: tuple, dest: Slice, first: int = 0) -> None:
    out, o = dest.seq, dest.start
    if len(sources) == 1:
        s, so = sources[0].seq, sources[0].start
        for i in range(first, dest.count):
            out[o + i] = fn(s[so + i], *constants)
    elif len(sources) == 2:
        a, ao = sources[0].seq, sources[0].start
        b, bo = sources[1].seq, sources[1].start
        for i in range(first, dest.count):
            out[o + i] = fn(a[ao + i], b[bo + i], *constants)
    else:
        for i in range(first, dest.count):
            out[o + i] = fn(*(s.seq[s.start + i] for s in sources), *constants)


def _map_into(
    fn: Callable,
    sources: list[Slice],
    constants: tuple,
    dest,
    dest_index: int | None,
    *,
    kind: ElementKind | None,
):
    """Resolve the destination, evaluate and write; returns the destination container.

    ``kind=None`` infers the result kind from the first computed value.
    """
    count = sources[0].count
    out = None
    if dest is not None or dest_index is not None:
        out = resolve_destination(dest, dest_index, count)
    values = _compute(fn, sources, constants, count)
    if out is None:
        if kind is None and values is not None:
            kind = kind_of(values[0])
        elif kind is None and count > 0:
            first = fn(*(s.seq[s.start] for s in sources), *constants)
            out = resolve_destination(None, dest_index, count, kind=kind_of(first))
            out.seq[out.start] = first
            _map_loop(fn, sources, constants, out, first=1)
            return out.seq
        elif kind is None:
            kind = ElementKind.NUMBER
        out = resolve_destination(None, dest_index, count, kind=kind)
    if values is not None:
        _unrolled.set_kernel(count)(out.seq, out.start, *values)
    else:
        _map_loop(fn, sources, constants, out)
    return out.seq


def _all(pred: Callable, sources: list[Slice], constants: tuple) -> bool:
    count = sources[0].count
    if count == 0:
        return True
    if _use_unrolled(count):
        args: list[object] = []
        for src in sources:
            args.append(src.seq)
            args.append(src.start)
        return _unrolled.all_kernel(count, len(sources), len(constants))(pred, *args, *constants)
    for i in range(count):
        if not pred(*(s.seq[s.start + i] for s in sources), *constants):
            return False
    return True


def _whole(seq, name: str) -> Slice:
    return resolve(seq, None, None, name=name)


def _matching(seq, count: int, name: str) -> Slice:
    src = _whole(seq, name)
    if src.count != count:
        raise LengthMismatchError(f"bad argument '{name}' (expected length {count}, got {src.count})")
    return src


def _require_scalar(value, name: str):
    if value is None:
        raise MissingArgumentError(f"bad argument '{name}' (expected number, got None)")
    if not is_scalar(value):
        raise TypeError(f"bad argument '{name}' (expected number, got {type(value).__name__})")
    return value


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def new_array(kind: ElementKind | str, length: int):
    """Allocate a new array through the allocation hook."""
    return allocate(ElementKind(kind), length)


def fill(constant, count: int):
    """New array of ``count`` copies of ``constant``."""
    return fill_ex(constant, count)


def fill_ex(constant, count: int, dest=None, dest_index: int | None = None):
    out = resolve_destination(dest, dest_index, count, kind=kind_of(constant))
    seq, start = out.seq, out.start
    for i in range(count):
        seq[start + i] = constant
    return out.seq


def zeros(count: int):
    return fill(0.0, count)


def _range_count(start, stop, step) -> int:
    if step == 0:
        raise ValueError("bad argument 'step' (must be non-zero)")
    if step > 0 and start > stop:
        raise ValueError("bad argument 'start' (must be <= 'stop' when step > 0)")
    if step < 0 and start < stop:
        raise ValueError("bad argument 'start' (must be >= 'stop' when step < 0)")
    return math.floor((stop - start) / step + _RANGE_TOLERANCE) + 1


def arange(start, stop, step=None):
    """Values ``start, start + step, ...`` up to and including ``stop``.

    ``arange(1, 10)`` is ``[1, 2, ..., 10]``; ``arange(0, 1, 0.25)`` is
    ``[0, 0.25, 0.5, 0.75, 1.0]``. Floating point steps may stop short of
    ``stop``.
    """
    if step is None:
        step = 1 if start <= stop else -1
    return arange_ex(start, stop, step)


def arange_ex(start, stop, step, dest=None, dest_index: int | None = None):
    count = _range_count(start, stop, step)
    out = resolve_destination(dest, dest_index, count, kind=ElementKind.NUMBER)
    seq, o = out.seq, out.start
    for i in range(count):
        seq[o + i] = start + i * step
    return out.seq


# ---------------------------------------------------------------------------
# Element access
# ---------------------------------------------------------------------------


def get(src, index: int, count: int) -> tuple:
    """``(src[index], ..., src[index + count - 1])``."""
    return _read(resolve(src, index, count))


def unpack(src) -> tuple:
    return _read(_whole(src, "src"))


def set(dest, index: int, *values) -> None:  # noqa: A001
    """``dest[index + j] = values[j]`` for every given value."""
    if dest is None:
        raise MissingArgumentError("bad argument 'dest' (expected array or sequence, got None)")
    _write(resolve(dest, index, len(values), name="dest"), values)


def push(dest, *values) -> None:
    """Append ``values`` to the end of a growable array."""
    require_sequence(dest, "dest")
    if not is_growable(dest):
        raise NotGrowableError(f"cannot push onto {type(dest).__name__} (not growable)")
    dest.extend(values)


def pop(src, count: int = 1) -> tuple:
    """Remove and return the last ``count`` elements in index order."""
    require_sequence(src, "src")
    if not is_growable(src):
        raise NotGrowableError(f"cannot pop from {type(src).__name__} (not growable)")
    n = len(src)
    tail = resolve(src, n - count if count <= n else -1, count)
    values = _read(tail)
    del src[tail.start:]
    return values


# ---------------------------------------------------------------------------
# Copying, reversing, joining
# ---------------------------------------------------------------------------


def copy(src):
    """New array with the elements of ``src``."""
    return copy_ex(src)


def copy_ex(src, src_index: int | None = None, src_count: int | None = None, dest=None, dest_index: int | None = None):
    """Copy a slice into ``dest`` (or a new array); overlapping ranges behave like ``memmove``.

    Overlap is also detected when ``src`` and ``dest`` reach the same base
    container through views; the slice is then read in full before writing.
    """
    s = resolve(src, src_index, src_count)
    out = resolve_destination(dest, dest_index, s.count, kind=kind_of_sequence(s.seq, s.start, s.count))
    if _use_unrolled(s.count):
        _write(out, _read(s))
        return out.seq
    a, ao, d, do = s.seq, s.start, out.seq, out.start
    if a is d and ao < do < s.stop:
        for i in range(s.count - 1, -1, -1):
            d[do + i] = a[ao + i]
    elif a is not d and same_storage(s, out):
        _write(out, _read(s))
    else:
        for i in range(s.count):
            d[do + i] = a[ao + i]
    return out.seq


def reverse(src):
    return reverse_ex(src)


def reverse_ex(src, src_index: int | None = None, src_count: int | None = None, dest=None, dest_index: int | None = None):
    """Reverse a slice into ``dest`` (or a new array); safe when ``dest`` overlaps ``src``."""
    s = resolve(src, src_index, src_count)
    out = resolve_destination(dest, dest_index, s.count, kind=kind_of_sequence(s.seq, s.start, s.count))
    values = _read(s)
    _write(out, values[::-1])
    return out.seq


def join(a, b):
    """New array ``[a_0, ..., a_n, b_0, ..., b_m]``."""
    return join_ex(a, None, None, b, None, None)


def join_ex(
    a,
    a_index: int | None,
    a_count: int | None,
    b,
    b_index: int | None,
    b_count: int | None,
    dest=None,
    dest_index: int | None = None,
):
    sa = resolve(a, a_index, a_count, name="a")
    sb = resolve(b, b_index, b_count, name="b")
    if sa.count:
        kind = kind_of_sequence(sa.seq, sa.start, sa.count)
    else:
        kind = kind_of_sequence(sb.seq, sb.start, sb.count)
    out = resolve_destination(dest, dest_index, sa.count + sb.count, kind=kind)
    first, second = _read(sa), _read(sb)
    _write(Slice(out.seq, out.start, sa.count), first)
    _write(Slice(out.seq, out.start + sa.count, sb.count), second)
    return out.seq


def append(dest, src) -> None:
    """Extend ``dest`` in place with the elements of ``src``; ``append(a, a)`` doubles ``a``."""
    append_ex(dest, src)


def append_ex(dest, src, src_index: int | None = None, src_count: int | None = None) -> None:
    require_sequence(dest, "dest")
    if not is_growable(dest):
        raise NotGrowableError(f"cannot append to {type(dest).__name__} (not growable)")
    values = _read(resolve(src, src_index, src_count))
    if values:
        dest.extend(values)


def extend(dest, src) -> None:
    append_ex(dest, src)


# ---------------------------------------------------------------------------
# Reshape and flatten
# ---------------------------------------------------------------------------


def _validate_shape(shape) -> tuple[int, ...]:
    if shape is None:
        raise MissingArgumentError("bad argument 'shape' (expected a sequence of positive integers, got None)")
    if is_scalar(shape):
        shape = (shape,)
    dims = tuple(operator.index(d) for d in shape)
    if not dims:
        raise ShapeMismatchError("shape must have at least one dimension")
    if any(d <= 0 for d in dims):
        raise ShapeMismatchError(f"shape dimensions must be positive, got {dims}")
    return dims


def _nested_shape(src) -> tuple[int, ...]:
    dims: list[int] = []
    node = src
    while is_sequence(node):
        dims.append(len(node))
        if len(node) == 0:
            break
        node = node[0]
    return tuple(dims)


def _flat_snapshot(src) -> list:
    require_sequence(src, "src")
    dims = _nested_shape(src)
    out: list = []

    def walk(node, depth: int) -> None:
        if depth == len(dims):
            if is_sequence(node):
                raise ShapeMismatchError("ragged nested source: mixed depths")
            out.append(node)
            return
        if not is_sequence(node) or len(node) != dims[depth]:
            raise ShapeMismatchError(f"ragged nested source at depth {depth}")
        for i in range(dims[depth]):
            walk(node[i], depth + 1)

    walk(src, 0)
    return out


def _build_nested(flat: list, dims: tuple[int, ...], offset: int = 0) -> list:
    if len(dims) == 1:
        return flat[offset:offset + dims[0]]
    step = math.prod(dims[1:])
    return [_build_nested(flat, dims[1:], offset + r * step) for r in range(dims[0])]


def reshape(src, shape):
    """Copy ``src`` (flat or nested) into a new array of ``shape``, row-major.

    ``reshape([1, 2, 3, 4, 5, 6], (3, 2))`` is ``[[1, 2], [3, 4], [5, 6]]``;
    ``reshape([[1, 2, 3], [4, 5, 6]], (6,))`` is ``[1, 2, 3, 4, 5, 6]``.
    The outermost level comes from the allocation hook, inner rows are lists.
    """
    return reshape_ex(src, shape)


def reshape_ex(src, shape, dest=None, dest_index: int | None = None):
    """Reshape into ``dest`` starting at ``dest_index``; reads ``src`` through a snapshot.

    For a multi-dimensional shape the rows of the outermost dimension are
    written as elements of ``dest``.
    """
    dims = _validate_shape(shape)
    flat = _flat_snapshot(src)
    if math.prod(dims) != len(flat):
        raise ShapeMismatchError(f"cannot reshape {len(flat)} elements into shape {dims}")
    if len(dims) == 1:
        kind = kind_of(flat[0])
        out = resolve_destination(dest, dest_index, dims[0], kind=kind)
        _write(out, flat)
        return out.seq
    rows = _build_nested(flat, dims)
    out = resolve_destination(dest, dest_index, dims[0], kind=ElementKind.ANY)
    _write(out, rows)
    return out.seq


def flatten(src):
    """``flatten([[1, 2, 3], [4, 5, 6]])`` is ``[1, 2, 3, 4, 5, 6]``."""
    return flatten_ex(src)


def flatten_ex(src, dest=None, dest_index: int | None = None):
    flat = _flat_snapshot(src)
    kind = kind_of(flat[0]) if flat else ElementKind.NUMBER
    out = resolve_destination(dest, dest_index, len(flat), kind=kind)
    _write(out, flat)
    return out.seq


# ---------------------------------------------------------------------------
# Generation, map and fold
# ---------------------------------------------------------------------------


def generate(count: int, f: Callable[[int], object]):
    """New array ``[f(0), f(1), ..., f(count - 1)]``."""
    return generate_ex(count, f)


def generate_ex(count: int, f: Callable[[int], object], dest=None, dest_index: int | None = None):
    indices = range(count)
    src = Slice(indices, 0, count)
    return _map_into(f, [src], (), dest, dest_index, kind=None)


def _as_slice(value, count: int | None, name: str) -> Slice:
    if isinstance(value, Slice):
        if count is not None and value.count != count:
            raise LengthMismatchError(f"bad argument '{name}' (expected length {count}, got {value.count})")
        return resolve(value.seq, value.start, value.count, name=name)
    src = resolve(value, None, count, name=name)
    return src


def map(f: Callable, *arrays):  # noqa: A001
    """New array ``[f(a[i], b[i], ...)]`` over arrays of equal length."""
    if not arrays:
        raise MissingArgumentError("map requires at least one array")
    first = _whole(arrays[0], "a1")
    sources = [first] + [_matching(arr, first.count, f"a{m + 2}") for m, arr in enumerate(arrays[1:])]
    return _map_into(f, sources, (), None, None, kind=None)


def map_ex(f: Callable, *sources, dest=None, dest_index: int | None = None):
    """Map over ``Slice`` descriptors (or whole sequences) into ``dest``.

    The first source fixes the count; later sources must supply as many
    elements from their own start::

        map_ex(f, resolve(a, 2, 3), resolve(b, 0), dest=out, dest_index=1)
    """
    if not sources:
        raise MissingArgumentError("map_ex requires at least one source")
    first = _as_slice(sources[0], None, "a1")
    rest = [_as_slice(s, first.count, f"a{m + 2}") for m, s in enumerate(sources[1:])]
    return _map_into(f, [first, *rest], (), dest, dest_index, kind=None)


def _fold(f: Callable, src: Slice, initial):
    start, count = src.start, src.count
    if initial is _MISSING:
        if count == 0:
            raise MissingArgumentError("reduce of an empty slice requires an initial value")
        acc = src.seq[start]
        start, count = start + 1, count - 1
    else:
        acc = initial
    if count == 0:
        return acc
    if _use_unrolled(count):
        return _unrolled.fold_kernel(count)(f, acc, src.seq, start)
    seq = src.seq
    for i in range(start, start + count):
        acc = f(acc, seq[i])
    return acc


def reduce(f: Callable, src, initial=_MISSING):
    """Left fold ``f(...f(f(initial, a[0]), a[1])..., a[n-1])``."""
    return _fold(f, _whole(src, "src"), initial)


def reduce_ex(f: Callable, src, src_index: int | None = None, src_count: int | None = None, initial=_MISSING):
    return _fold(f, resolve(src, src_index, src_count), initial)


fold = reduce
fold_ex = reduce_ex


# ---------------------------------------------------------------------------
# Elementwise binary operations
# ---------------------------------------------------------------------------


def _binary_family(name: str, fn: Callable, kind: ElementKind, formula: str):
    """Build ``name``, ``name_constant``, ``name_ex`` and ``name_constant_ex``."""

    def whole(a, b):
        sa = _whole(a, "a")
        if is_scalar(b):
            return _map_into(fn, [sa], (b,), None, None, kind=kind)
        sb = _matching(b, sa.count, "b")
        return _map_into(fn, [sa, sb], (), None, None, kind=kind)

    def constant(a, c):
        sa = _whole(a, "a")
        return _map_into(fn, [sa], (_require_scalar(c, "c"),), None, None, kind=kind)

    def ex(a, a_index, a_count, b, b_index=None, dest=None, dest_index=None):
        sa = resolve(a, a_index, a_count, name="a")
        if is_scalar(b):
            return _map_into(fn, [sa], (b,), dest, dest_index, kind=kind)
        sb = resolve(b, b_index, sa.count, name="b")
        return _map_into(fn, [sa, sb], (), dest, dest_index, kind=kind)

    def constant_ex(a, a_index, a_count, c, dest=None, dest_index=None):
        sa = resolve(a, a_index, a_count, name="a")
        return _map_into(fn, [sa], (_require_scalar(c, "c"),), dest, dest_index, kind=kind)

    docs = {
        "": f"``{formula}`` for every ``i``; ``b`` may be a scalar.",
        "_constant": f"``{formula.replace('b[i]', 'c')}`` for every ``i``.",
        "_ex": f"``{formula}`` over slices, written into ``dest`` or a new array.",
        "_constant_ex": f"``{formula.replace('b[i]', 'c')}`` over a slice, written into ``dest`` or a new array.",
    }
    funcs = (whole, constant, ex, constant_ex)
    for suffix, func in zip(docs, funcs):
        func.__name__ = func.__qualname__ = f"{name}{suffix}"
        func.__doc__ = docs[suffix]
        func.__module__ = __name__
    return funcs


def _minimum(x, y):
    return y if y < x else x


def _maximum(x, y):
    return y if y > x else x


def _almost_equal(x, y) -> bool:
    return abs(x - y) <= EPSILON


def _almost_equal_with_nan(x, y) -> bool:
    if x != x and y != y:
        return True
    return abs(x - y) <= EPSILON


add, add_constant, add_ex, add_constant_ex = _binary_family("add", operator.add, ElementKind.NUMBER, "a[i] + b[i]")
sub, sub_constant, sub_ex, sub_constant_ex = _binary_family("sub", operator.sub, ElementKind.NUMBER, "a[i] - b[i]")
mul, mul_constant, mul_ex, mul_constant_ex = _binary_family("mul", operator.mul, ElementKind.NUMBER, "a[i] * b[i]")
div, div_constant, div_ex, div_constant_ex = _binary_family("div", operator.truediv, ElementKind.NUMBER, "a[i] / b[i]")
mod, mod_constant, mod_ex, mod_constant_ex = _binary_family("mod", operator.mod, ElementKind.NUMBER, "a[i] % b[i]")
pow, pow_constant, pow_ex, pow_constant_ex = _binary_family("pow", operator.pow, ElementKind.NUMBER, "a[i] ** b[i]")  # noqa: A001
minimum, minimum_constant, minimum_ex, minimum_constant_ex = _binary_family(
    "minimum", _minimum, ElementKind.NUMBER, "min(a[i], b[i])"
)
maximum, maximum_constant, maximum_ex, maximum_constant_ex = _binary_family(
    "maximum", _maximum, ElementKind.NUMBER, "max(a[i], b[i])"
)

equal, equal_constant, equal_ex, equal_constant_ex = _binary_family(
    "equal", operator.eq, ElementKind.BOOLEAN, "a[i] == b[i]"
)
not_equal, not_equal_constant, not_equal_ex, not_equal_constant_ex = _binary_family(
    "not_equal", operator.ne, ElementKind.BOOLEAN, "a[i] != b[i]"
)
less_than, less_than_constant, less_than_ex, less_than_constant_ex = _binary_family(
    "less_than", operator.lt, ElementKind.BOOLEAN, "a[i] < b[i]"
)
less_than_or_equal, less_than_or_equal_constant, less_than_or_equal_ex, less_than_or_equal_constant_ex = _binary_family(
    "less_than_or_equal", operator.le, ElementKind.BOOLEAN, "a[i] <= b[i]"
)
greater_than, greater_than_constant, greater_than_ex, greater_than_constant_ex = _binary_family(
    "greater_than", operator.gt, ElementKind.BOOLEAN, "a[i] > b[i]"
)
greater_than_or_equal, greater_than_or_equal_constant, greater_than_or_equal_ex, greater_than_or_equal_constant_ex = (
    _binary_family("greater_than_or_equal", operator.ge, ElementKind.BOOLEAN, "a[i] >= b[i]")
)
almost_equal, almost_equal_constant, almost_equal_ex, almost_equal_constant_ex = _binary_family(
    "almost_equal", _almost_equal, ElementKind.BOOLEAN, "|a[i] - b[i]| <= epsilon"
)


def almost_equal_with_nan(a, b):
    """Like ``almost_equal`` but ``nan`` compares equal to ``nan``."""
    sa = _whole(a, "a")
    sb = _matching(b, sa.count, "b")
    return _map_into(_almost_equal_with_nan, [sa, sb], (), None, None, kind=ElementKind.BOOLEAN)


def almost_equal_with_nan_ex(a, a_index, a_count, b, b_index=None, dest=None, dest_index=None):
    sa = resolve(a, a_index, a_count, name="a")
    sb = resolve(b, b_index, sa.count, name="b")
    return _map_into(_almost_equal_with_nan, [sa, sb], (), dest, dest_index, kind=ElementKind.BOOLEAN)


# ---------------------------------------------------------------------------
# Compound operations
# ---------------------------------------------------------------------------


def _mul_add(x, y, z):
    return x + y * z


def _lerp(x, y, t):
    return x * (1 - t) + y * t


def mul_add(a, b, c):
    """``a[i] + b[i] * c[i]``; ``c`` may be a scalar."""
    sa = _whole(a, "a")
    sb = _matching(b, sa.count, "b")
    if is_scalar(c):
        return _map_into(_mul_add, [sa, sb], (c,), None, None, kind=ElementKind.NUMBER)
    sc = _matching(c, sa.count, "c")
    return _map_into(_mul_add, [sa, sb, sc], (), None, None, kind=ElementKind.NUMBER)


def mul_add_ex(a, a_index, a_count, b, b_index, c, c_index=None, dest=None, dest_index=None):
    sa = resolve(a, a_index, a_count, name="a")
    sb = resolve(b, b_index, sa.count, name="b")
    if is_scalar(c):
        return _map_into(_mul_add, [sa, sb], (c,), dest, dest_index, kind=ElementKind.NUMBER)
    sc = resolve(c, c_index, sa.count, name="c")
    return _map_into(_mul_add, [sa, sb, sc], (), dest, dest_index, kind=ElementKind.NUMBER)


def mul_add_constant(a, b, c):
    """``a[i] + b[i] * c``."""
    sa = _whole(a, "a")
    sb = _matching(b, sa.count, "b")
    return _map_into(_mul_add, [sa, sb], (_require_scalar(c, "c"),), None, None, kind=ElementKind.NUMBER)


def mul_add_constant_ex(a, a_index, a_count, b, b_index, c, dest=None, dest_index=None):
    sa = resolve(a, a_index, a_count, name="a")
    sb = resolve(b, b_index, sa.count, name="b")
    return _map_into(_mul_add, [sa, sb], (_require_scalar(c, "c"),), dest, dest_index, kind=ElementKind.NUMBER)


def lerp(a, b, t):
    """``a[i] * (1 - t) + b[i] * t``."""
    sa = _whole(a, "a")
    sb = _matching(b, sa.count, "b")
    return _map_into(_lerp, [sa, sb], (_require_scalar(t, "t"),), None, None, kind=ElementKind.NUMBER)


def lerp_ex(a, a_index, a_count, b, b_index, t, dest=None, dest_index=None):
    sa = resolve(a, a_index, a_count, name="a")
    sb = resolve(b, b_index, sa.count, name="b")
    return _map_into(_lerp, [sa, sb], (_require_scalar(t, "t"),), dest, dest_index, kind=ElementKind.NUMBER)


# ---------------------------------------------------------------------------
# Whole-slice predicates
# ---------------------------------------------------------------------------


def _eps(epsilon: float | None) -> float:
    return EPSILON if epsilon is None else epsilon


def _within(x, y, eps) -> bool:
    return abs(x - y) <= eps


def _within_or_nan(x, y, eps) -> bool:
    if x != x and y != y:
        return True
    return abs(x - y) <= eps


def all_equal(a, b) -> bool:
    """``True`` when ``a`` and ``b`` have equal length and elements."""
    sa, sb = _whole(a, "a"), _whole(b, "b")
    if sa.count != sb.count:
        return False
    return _all(operator.eq, [sa, sb], ())


def all_equal_ex(a, a_index, a_count, b, b_index=None) -> bool:
    sa = resolve(a, a_index, a_count, name="a")
    sb = resolve(b, b_index, sa.count, name="b")
    return _all(operator.eq, [sa, sb], ())


def all_equal_constant(a, constant) -> bool:
    return _all(operator.eq, [_whole(a, "a")], (constant,))


def all_equal_constant_ex(a, a_index, a_count, constant) -> bool:
    return _all(operator.eq, [resolve(a, a_index, a_count, name="a")], (constant,))


def all_almost_equal(a, b, epsilon: float | None = None) -> bool:
    """``True`` when lengths match and elements differ by ``epsilon`` or less."""
    sa, sb = _whole(a, "a"), _whole(b, "b")
    if sa.count != sb.count:
        return False
    return _all(_within, [sa, sb], (_eps(epsilon),))


def all_almost_equal_ex(a, a_index, a_count, b, b_index=None, epsilon: float | None = None) -> bool:
    sa = resolve(a, a_index, a_count, name="a")
    sb = resolve(b, b_index, sa.count, name="b")
    return _all(_within, [sa, sb], (_eps(epsilon),))


def all_almost_equal_constant(a, constant, epsilon: float | None = None) -> bool:
    return _all(_within, [_whole(a, "a")], (constant, _eps(epsilon)))


def all_almost_equal_constant_ex(a, a_index, a_count, constant, epsilon: float | None = None) -> bool:
    return _all(_within, [resolve(a, a_index, a_count, name="a")], (constant, _eps(epsilon)))


def all_almost_equal_with_nan(a, b, epsilon: float | None = None) -> bool:
    sa, sb = _whole(a, "a"), _whole(b, "b")
    if sa.count != sb.count:
        return False
    return _all(_within_or_nan, [sa, sb], (_eps(epsilon),))
