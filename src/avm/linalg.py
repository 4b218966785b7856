"""Fixed-size vector and matrix kernels.

Matrices are flat and column-major: an ``N x M`` matrix has ``N`` columns
and ``M`` rows, and element ``(col, row)`` lives at ``col * M + row``. A
2x2 matrix with columns ``(1, 2)`` and ``(3, 4)`` is ``(1, 2, 3, 4)``.

Every kernel returns a tuple. ``_ex`` forms read slices ``(seq, index)``
and, when a destination is given, also write the result into it.
"""

from __future__ import annotations

import math
from typing import Final

from . import _unrolled
from .config import EPSILON, MAX_UNROLLED_ARITY, SINGULAR_EPSILON, USE_UNROLLED_KERNELS
from .errors import DegenerateVectorError, LengthMismatchError, SingularMatrixError
from .slices import Slice, resolve, resolve_destination

_MAX_DIM: Final[int] = 4


def _unrolled_enabled() -> bool:
    return USE_UNROLLED_KERNELS


def _values(src: Slice) -> tuple:
    if 1 <= src.count <= MAX_UNROLLED_ARITY and _unrolled_enabled():
        return _unrolled.get_kernel(src.count)(src.seq, src.start)
    return tuple(src.seq[i] for i in src.indices())


def _sized(seq, index, count: int, name: str) -> Slice:
    if index is None:
        src = resolve(seq, None, None, name=name)
        if src.count != count:
            raise LengthMismatchError(f"bad argument '{name}' (expected {count} values, got {src.count})")
        return src
    return resolve(seq, index, count, name=name)


def _check_dim(value: int, name: str) -> int:
    if not 1 <= value <= _MAX_DIM:
        raise ValueError(f"bad argument '{name}' (matrix dimensions must be 1..{_MAX_DIM}, got {value})")
    return value


def _square_dim(count: int, name: str) -> int:
    n = math.isqrt(count)
    if n * n != count or not 1 <= n <= _MAX_DIM:
        raise LengthMismatchError(f"bad argument '{name}' (expected 1, 4, 9 or 16 values, got {count})")
    return n


def _emit(result: tuple, dest, dest_index) -> tuple:
    if dest is not None or dest_index is not None:
        out = resolve_destination(dest, dest_index, len(result))
        for i, value in enumerate(result):
            out.seq[out.start + i] = value
    return result


# ---------------------------------------------------------------------------
# Vectors
# ---------------------------------------------------------------------------


def _dot(a: Slice, b: Slice):
    count = a.count
    if 1 <= count <= MAX_UNROLLED_ARITY and _unrolled_enabled():
        return _unrolled.dot_kernel(count)(a.seq, a.start, b.seq, b.start)
    total = 0
    for i in range(count):
        term = a.seq[a.start + i] * b.seq[b.start + i]
        total = term if i == 0 else total + term
    return total


def dot(a, b):
    """Sum of pairwise products, accumulated left to right."""
    sa = resolve(a, name="a")
    sb = _sized(b, None, sa.count, "b")
    return _dot(sa, sb)


def dot_ex(a, a_index: int, count: int, b, b_index: int = 0):
    sa = resolve(a, a_index, count, name="a")
    sb = resolve(b, b_index, count, name="b")
    return _dot(sa, sb)


def _cross(a: Slice, b: Slice) -> tuple:
    a1, a2, a3 = _values(a)
    b1, b2, b3 = _values(b)
    return (a2 * b3 - a3 * b2, a3 * b1 - a1 * b3, a1 * b2 - a2 * b1)


def cross(a, b) -> tuple:
    """Cross product of two 3-vectors."""
    return _cross(_sized(a, None, 3, "a"), _sized(b, None, 3, "b"))


def cross_ex(a, a_index: int, b, b_index: int = 0, dest=None, dest_index: int | None = None) -> tuple:
    result = _cross(resolve(a, a_index, 3, name="a"), resolve(b, b_index, 3, name="b"))
    return _emit(result, dest, dest_index)


def length_squared(v):
    src = resolve(v, name="v")
    return _dot(src, src)


def length(v) -> float:
    return math.sqrt(length_squared(v))


def length_ex(v, v_index: int, count: int) -> float:
    src = resolve(v, v_index, count, name="v")
    return math.sqrt(_dot(src, src))


def _normalize(src: Slice) -> tuple:
    size = math.sqrt(_dot(src, src)) if src.count else 0.0
    if size == 0:
        raise DegenerateVectorError(f"cannot normalize a zero-length vector of {src.count} components")
    return tuple(x / size for x in _values(src))


def normalize(v) -> tuple:
    """``v / length(v)``; raises ``DegenerateVectorError`` when the length is zero."""
    return _normalize(resolve(v, name="v"))


def normalize_ex(v, v_index: int, count: int, dest=None, dest_index: int | None = None) -> tuple:
    return _emit(_normalize(resolve(v, v_index, count, name="v")), dest, dest_index)


def negate(v) -> tuple:
    return tuple(-x for x in _values(resolve(v, name="v")))


def _equals(a: Slice, b: Slice, epsilon: float | None) -> bool:
    eps = EPSILON if epsilon is None else epsilon
    for x, y in zip(_values(a), _values(b)):
        if abs(x - y) > eps:
            return False
    return True


def equals(a, b, epsilon: float | None = None) -> bool:
    """Componentwise ``|a[i] - b[i]| <= epsilon``; vectors of different length are unequal."""
    sa, sb = resolve(a, name="a"), resolve(b, name="b")
    if sa.count != sb.count:
        return False
    return _equals(sa, sb, epsilon)


def equals_ex(a, a_index: int, count: int, b, b_index: int = 0, epsilon: float | None = None) -> bool:
    return _equals(resolve(a, a_index, count, name="a"), resolve(b, b_index, count, name="b"), epsilon)


# ---------------------------------------------------------------------------
# Matrices
# ---------------------------------------------------------------------------


def identity(n: int) -> tuple:
    _check_dim(n, "n")
    return tuple(1 if col == row else 0 for col in range(n) for row in range(n))


def zero(n: int) -> tuple:
    _check_dim(n, "n")
    return (0,) * (n * n)


def _matmul(a: Slice, b: Slice, a_cols: int, a_rows: int, b_cols: int) -> tuple:
    if _unrolled_enabled():
        return _unrolled.matmul_kernel(a_cols, a_rows, b_cols)(a.seq, a.start, b.seq, b.start)
    out = []
    for col in range(b_cols):
        for row in range(a_rows):
            total = a.seq[a.start + row] * b.seq[b.start + col * a_cols]
            for k in range(1, a_cols):
                total = total + a.seq[a.start + k * a_rows + row] * b.seq[b.start + col * a_cols + k]
            out.append(total)
    return tuple(out)


def matmul(a, b, a_cols: int, a_rows: int, b_cols: int) -> tuple:
    """``(a_cols x a_rows) @ (b_cols x a_cols)``, a ``b_cols x a_rows`` matrix.

    >>> matmul((2, 4, 3, 1), (5, 1, 2, 6), 2, 2, 2)
    (13, 21, 22, 14)
    """
    for value, name in ((a_cols, "a_cols"), (a_rows, "a_rows"), (b_cols, "b_cols")):
        _check_dim(value, name)
    sa = _sized(a, None, a_cols * a_rows, "a")
    sb = _sized(b, None, b_cols * a_cols, "b")
    return _matmul(sa, sb, a_cols, a_rows, b_cols)


def matmul_ex(
    a,
    a_index: int,
    b,
    b_index: int,
    a_cols: int,
    a_rows: int,
    b_cols: int,
    dest=None,
    dest_index: int | None = None,
) -> tuple:
    for value, name in ((a_cols, "a_cols"), (a_rows, "a_rows"), (b_cols, "b_cols")):
        _check_dim(value, name)
    sa = resolve(a, a_index, a_cols * a_rows, name="a")
    sb = resolve(b, b_index, b_cols * a_cols, name="b")
    return _emit(_matmul(sa, sb, a_cols, a_rows, b_cols), dest, dest_index)


def matmul_mat2(a, b) -> tuple:
    return matmul(a, b, 2, 2, 2)


def matmul_mat3(a, b) -> tuple:
    return matmul(a, b, 3, 3, 3)


def matmul_mat4(a, b) -> tuple:
    return matmul(a, b, 4, 4, 4)


def matmul_vec(m, v) -> tuple:
    """Square matrix times a column vector of matching size."""
    sv = resolve(v, name="v")
    n = _check_dim(sv.count, "v")
    sm = _sized(m, None, n * n, "m")
    return _matmul(sm, sv, n, n, 1)


def transform_point(m, v) -> tuple:
    """Homogeneous transform: a 3x3 matrix with a 2-vector or a 4x4 matrix with a 3-vector.

    The point is extended with ``w = 1`` and the first ``len(v)`` components
    of the product are returned.
    """
    sv = resolve(v, name="v")
    if sv.count not in (1, 2, 3):
        raise LengthMismatchError(f"bad argument 'v' (expected 1, 2 or 3 components, got {sv.count})")
    n = sv.count + 1
    sm = _sized(m, None, n * n, "m")
    point = (*_values(sv), 1)
    return _matmul(sm, Slice(point, 0, n), n, n, 1)[: sv.count]


def _transpose(src: Slice, cols: int, rows: int) -> tuple:
    offsets = tuple(col * rows + row for row in range(rows) for col in range(cols))
    if _unrolled_enabled():
        return _unrolled.gather_kernel(offsets)(src.seq, src.start)
    return tuple(src.seq[src.start + o] for o in offsets)


def transpose(m, cols: int, rows: int | None = None) -> tuple:
    """Transpose a ``cols x rows`` matrix into a ``rows x cols`` one."""
    rows = cols if rows is None else rows
    _check_dim(cols, "cols")
    _check_dim(rows, "rows")
    return _transpose(_sized(m, None, cols * rows, "m"), cols, rows)


def transpose_ex(
    m, m_index: int, cols: int, rows: int | None = None, dest=None, dest_index: int | None = None
) -> tuple:
    rows = cols if rows is None else rows
    _check_dim(cols, "cols")
    _check_dim(rows, "rows")
    result = _transpose(resolve(m, m_index, cols * rows, name="m"), cols, rows)
    return _emit(result, dest, dest_index)


def _det2(m) -> float:
    a, b, c, d = m
    return a * d - c * b


def _det3(m) -> float:
    a, d, g, b, e, h, c, f, i = m
    return a * (e * i - f * h) - b * (d * i - f * g) + c * (d * h - e * g)


def _cofactors4(m) -> list:
    inv = [0] * 16
    inv[0] = m[5] * m[10] * m[15] - m[5] * m[11] * m[14] - m[9] * m[6] * m[15] + m[9] * m[7] * m[14] + m[13] * m[6] * m[11] - m[13] * m[7] * m[10]
    inv[4] = -m[4] * m[10] * m[15] + m[4] * m[11] * m[14] + m[8] * m[6] * m[15] - m[8] * m[7] * m[14] - m[12] * m[6] * m[11] + m[12] * m[7] * m[10]
    inv[8] = m[4] * m[9] * m[15] - m[4] * m[11] * m[13] - m[8] * m[5] * m[15] + m[8] * m[7] * m[13] + m[12] * m[5] * m[11] - m[12] * m[7] * m[9]
    inv[12] = -m[4] * m[9] * m[14] + m[4] * m[10] * m[13] + m[8] * m[5] * m[14] - m[8] * m[6] * m[13] - m[12] * m[5] * m[10] + m[12] * m[6] * m[9]
    inv[1] = -m[1] * m[10] * m[15] + m[1] * m[11] * m[14] + m[9] * m[2] * m[15] - m[9] * m[3] * m[14] - m[13] * m[2] * m[11] + m[13] * m[3] * m[10]
    inv[5] = m[0] * m[10] * m[15] - m[0] * m[11] * m[14] - m[8] * m[2] * m[15] + m[8] * m[3] * m[14] + m[12] * m[2] * m[11] - m[12] * m[3] * m[10]
    inv[9] = -m[0] * m[9] * m[15] + m[0] * m[11] * m[13] + m[8] * m[1] * m[15] - m[8] * m[3] * m[13] - m[12] * m[1] * m[11] + m[12] * m[3] * m[9]
    inv[13] = m[0] * m[9] * m[14] - m[0] * m[10] * m[13] - m[8] * m[1] * m[14] + m[8] * m[2] * m[13] + m[12] * m[1] * m[10] - m[12] * m[2] * m[9]
    inv[2] = m[1] * m[6] * m[15] - m[1] * m[7] * m[14] - m[5] * m[2] * m[15] + m[5] * m[3] * m[14] + m[13] * m[2] * m[7] - m[13] * m[3] * m[6]
    inv[6] = -m[0] * m[6] * m[15] + m[0] * m[7] * m[14] + m[4] * m[2] * m[15] - m[4] * m[3] * m[14] - m[12] * m[2] * m[7] + m[12] * m[3] * m[6]
    inv[10] = m[0] * m[5] * m[15] - m[0] * m[7] * m[13] - m[4] * m[1] * m[15] + m[4] * m[3] * m[13] + m[12] * m[1] * m[7] - m[12] * m[3] * m[5]
    inv[14] = -m[0] * m[5] * m[14] + m[0] * m[6] * m[13] + m[4] * m[1] * m[14] - m[4] * m[2] * m[13] - m[12] * m[1] * m[6] + m[12] * m[2] * m[5]
    inv[3] = -m[1] * m[6] * m[11] + m[1] * m[7] * m[10] + m[5] * m[2] * m[11] - m[5] * m[3] * m[10] - m[9] * m[2] * m[7] + m[9] * m[3] * m[6]
    inv[7] = m[0] * m[6] * m[11] - m[0] * m[7] * m[10] - m[4] * m[2] * m[11] + m[4] * m[3] * m[10] + m[8] * m[2] * m[7] - m[8] * m[3] * m[6]
    inv[11] = -m[0] * m[5] * m[11] + m[0] * m[7] * m[9] + m[4] * m[1] * m[11] - m[4] * m[3] * m[9] - m[8] * m[1] * m[7] + m[8] * m[3] * m[5]
    inv[15] = m[0] * m[5] * m[10] - m[0] * m[6] * m[9] - m[4] * m[1] * m[10] + m[4] * m[2] * m[9] + m[8] * m[1] * m[6] - m[8] * m[2] * m[5]
    return inv


def _det4(m, inv=None) -> float:
    if inv is None:
        inv = _cofactors4(m)
    return m[0] * inv[0] + m[1] * inv[4] + m[2] * inv[8] + m[3] * inv[12]


def _determinant(values: tuple, n: int) -> float:
    if n == 1:
        return values[0]
    if n == 2:
        return _det2(values)
    if n == 3:
        return _det3(values)
    return _det4(values)


def determinant(m) -> float:
    """Closed-form determinant of a 1x1, 2x2, 3x3 or 4x4 matrix."""
    src = resolve(m, name="m")
    return _determinant(_values(src), _square_dim(src.count, "m"))


def _singular(det: float) -> None:
    if abs(det) <= SINGULAR_EPSILON:
        raise SingularMatrixError(f"matrix is singular (determinant {det!r})")


def _inverse(values: tuple, n: int) -> tuple:
    if n == 1:
        _singular(values[0])
        return (1 / values[0],)
    if n == 2:
        det = _det2(values)
        _singular(det)
        m0, m1, m2, m3 = values
        return (m3 / det, -m1 / det, -m2 / det, m0 / det)
    if n == 3:
        det = _det3(values)
        _singular(det)
        a, d, g, b, e, h, c, f, i = values
        adj = (
            e * i - f * h, f * g - d * i, d * h - e * g,
            c * h - b * i, a * i - c * g, b * g - a * h,
            b * f - c * e, c * d - a * f, a * e - b * d,
        )
        return tuple(x / det for x in adj)
    inv = _cofactors4(values)
    det = _det4(values, inv)
    _singular(det)
    return tuple(x / det for x in inv)


def inverse(m) -> tuple:
    """Inverse by cofactor expansion; raises ``SingularMatrixError`` when ``|det| <= SINGULAR_EPSILON``.

    The threshold is absolute, not relative to the magnitude of the entries:
    a well-conditioned but small matrix such as ``1e-4 * I4`` (determinant
    ``1e-16``) is rejected. Rescale such inputs and scale the result back,
    or lower ``AVM_SINGULAR_EPSILON``.
    """
    src = resolve(m, name="m")
    return _inverse(_values(src), _square_dim(src.count, "m"))


def inverse_ex(m, m_index: int, n: int, dest=None, dest_index: int | None = None) -> tuple:
    _check_dim(n, "n")
    src = resolve(m, m_index, n * n, name="m")
    return _emit(_inverse(_values(src), n), dest, dest_index)


# ---------------------------------------------------------------------------
# Transform builders
# ---------------------------------------------------------------------------


def _rotation(angle: float, x: float, y: float, z: float) -> tuple:
    c = math.cos(angle)
    s = math.sin(angle)
    t = 1 - c
    return (
        c + x * x * t, y * x * t + z * s, z * x * t - y * s,
        x * y * t - z * s, c + y * y * t, z * y * t + x * s,
        x * z * t + y * s, y * z * t - x * s, c + z * z * t,
    )


def mat3_translate(x: float, y: float) -> tuple:
    """2-d homogeneous translation."""
    return (1, 0, 0, 0, 1, 0, x, y, 1)


def mat3_scale(x: float, y: float, z: float = 1) -> tuple:
    return (x, 0, 0, 0, y, 0, 0, 0, z)


def mat3_rotate_around_axis(angle: float, x: float, y: float, z: float) -> tuple:
    """Rotation by ``angle`` radians around the unit axis ``(x, y, z)``."""
    return _rotation(angle, x, y, z)


def mat4_translate(x: float, y: float, z: float) -> tuple:
    return (1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, x, y, z, 1)


def mat4_scale(x: float, y: float, z: float) -> tuple:
    return (x, 0, 0, 0, 0, y, 0, 0, 0, 0, z, 0, 0, 0, 0, 1)


def mat4_rotate_around_axis(angle: float, x: float, y: float, z: float) -> tuple:
    r = _rotation(angle, x, y, z)
    return (*r[0:3], 0, *r[3:6], 0, *r[6:9], 0, 0, 0, 0, 1)
