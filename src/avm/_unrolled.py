"""Kernels specialised for statically known small arities.

Each kernel is built once per ``(template, arity)`` and cached. Index tables
are precomputed at build time, and arities 1..4 of the hottest templates get
fixed-arity closures with no per-call loop, so a call for ``count == 3`` runs
the equivalent of::

    (f(s0[i0], s1[i1]), f(s0[i0 + 1], s1[i1 + 1]), f(s0[i0 + 2], s1[i1 + 2]))

The kernels apply the same scalar function in ascending index order as the
loop fallbacks in ``avm.array`` and ``avm.linalg``, which keeps both paths
bit-identical.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable

from .config import MAX_UNROLLED_ARITY, UNROLLED_CACHE_MAX

logger = logging.getLogger(__name__)


def _check_arity(arity: int, *, lo: int = 1, hi: int = MAX_UNROLLED_ARITY) -> None:
    if arity < lo or arity > hi:
        raise ValueError(f"unrolled kernels support arity {lo}..{hi}, got {arity}")


def _built(name: str, kernel: Callable) -> Callable:
    kernel.__name__ = kernel.__qualname__ = name
    logger.debug("built unrolled kernel %s", name)
    return kernel


@lru_cache(maxsize=UNROLLED_CACHE_MAX)
def gather_kernel(offsets: tuple[int, ...]) -> Callable:
    """``(src, i) -> (src[i + o0], src[i + o1], ...)`` for fixed offsets."""
    _check_arity(len(offsets))
    name = "gather_" + "_".join(str(o) for o in offsets)
    if len(offsets) == 1:
        (o0,) = offsets
        return _built(name, lambda src, i: (src[i + o0],))
    if len(offsets) == 2:
        o0, o1 = offsets
        return _built(name, lambda src, i: (src[i + o0], src[i + o1]))
    if len(offsets) == 3:
        o0, o1, o2 = offsets
        return _built(name, lambda src, i: (src[i + o0], src[i + o1], src[i + o2]))
    if len(offsets) == 4:
        o0, o1, o2, o3 = offsets
        return _built(name, lambda src, i: (src[i + o0], src[i + o1], src[i + o2], src[i + o3]))

    def gather(src, i):
        return tuple([src[i + o] for o in offsets])

    return _built(name, gather)


def get_kernel(arity: int) -> Callable:
    return gather_kernel(tuple(range(arity)))


@lru_cache(maxsize=UNROLLED_CACHE_MAX)
def set_kernel(arity: int) -> Callable:
    """``(dest, i, v0, ..., vk) -> None`` writing ``dest[i + j] = vj``."""
    _check_arity(arity)
    name = f"set_{arity}"
    if arity == 1:

        def set_1(dest, i, v0):
            dest[i] = v0

        return _built(name, set_1)
    if arity == 2:

        def set_2(dest, i, v0, v1):
            dest[i] = v0
            dest[i + 1] = v1

        return _built(name, set_2)
    positions = tuple(range(arity))

    def set_n(dest, i, *values):
        for j in positions:
            dest[i + j] = values[j]

    return _built(name, set_n)


@lru_cache(maxsize=UNROLLED_CACHE_MAX)
def map_kernel(arity: int, sources: int, constants: int = 0) -> Callable:
    """``(f, s0, i0, ..., c0, ...) -> tuple`` applying ``f`` per position."""
    _check_arity(arity)
    if sources < 1:
        raise ValueError("map kernels need at least one source")
    name = f"map_{arity}_{sources}_{constants}"
    positions = tuple(range(arity))
    if sources == 1:

        def map_1(f, s0, i0, *consts):
            return tuple([f(s0[i0 + j], *consts) for j in positions])

        return _built(name, map_1)
    if sources == 2:

        def map_2(f, s0, i0, s1, i1, *consts):
            return tuple([f(s0[i0 + j], s1[i1 + j], *consts) for j in positions])

        return _built(name, map_2)
    split = 2 * sources

    def map_n(f, *args):
        pairs = tuple(zip(args[0:split:2], args[1:split:2]))
        consts = args[split:]
        return tuple([f(*[s[i + j] for s, i in pairs], *consts) for j in positions])

    return _built(name, map_n)


@lru_cache(maxsize=UNROLLED_CACHE_MAX)
def all_kernel(arity: int, sources: int, constants: int = 0) -> Callable:
    """Short-circuiting ``all(f(...))`` over ``arity`` positions."""
    _check_arity(arity)
    name = f"all_{arity}_{sources}_{constants}"
    positions = tuple(range(arity))
    split = 2 * sources

    def all_n(f, *args):
        pairs = tuple(zip(args[0:split:2], args[1:split:2]))
        consts = args[split:]
        for j in positions:
            if not f(*[s[i + j] for s, i in pairs], *consts):
                return False
        return True

    return _built(name, all_n)


@lru_cache(maxsize=UNROLLED_CACHE_MAX)
def fold_kernel(arity: int) -> Callable:
    """``(f, acc, src, i) -> f(...f(f(acc, src[i]), src[i + 1])..., src[i + k - 1])``."""
    _check_arity(arity)
    positions = tuple(range(arity))

    def fold(f, acc, src, i):
        for j in positions:
            acc = f(acc, src[i + j])
        return acc

    return _built(f"fold_{arity}", fold)


def _sum_products(a, ai, b, bi, terms: tuple[tuple[int, int], ...]):
    (a0, b0), *rest = terms
    total = a[ai + a0] * b[bi + b0]
    for ao, bo in rest:
        total = total + a[ai + ao] * b[bi + bo]
    return total


@lru_cache(maxsize=UNROLLED_CACHE_MAX)
def dot_kernel(arity: int) -> Callable:
    """``(a, ai, b, bi) -> a[ai]*b[bi] + a[ai+1]*b[bi+1] + ...`` summed left to right."""
    _check_arity(arity)
    terms = tuple((j, j) for j in range(arity))
    if arity == 2:
        return _built("dot_2", lambda a, ai, b, bi: a[ai] * b[bi] + a[ai + 1] * b[bi + 1])
    if arity == 3:
        return _built(
            "dot_3",
            lambda a, ai, b, bi: a[ai] * b[bi] + a[ai + 1] * b[bi + 1] + a[ai + 2] * b[bi + 2],
        )
    return _built(f"dot_{arity}", lambda a, ai, b, bi: _sum_products(a, ai, b, bi, terms))


@lru_cache(maxsize=UNROLLED_CACHE_MAX)
def matmul_kernel(a_cols: int, a_rows: int, b_cols: int) -> Callable:
    """Column-major ``(a_cols x a_rows) @ (b_cols x a_cols)`` returning ``b_cols * a_rows`` values."""
    for dim in (a_cols, a_rows, b_cols):
        _check_arity(dim, hi=4)
    table = tuple(
        tuple((k * a_rows + row, col * a_cols + k) for k in range(a_cols))
        for col in range(b_cols)
        for row in range(a_rows)
    )

    def matmul(a, ai, b, bi):
        return tuple([_sum_products(a, ai, b, bi, terms) for terms in table])

    return _built(f"matmul_{a_cols}x{a_rows}_{b_cols}x{a_cols}", matmul)


def cache_stats() -> dict[str, object]:
    return {
        "gather": gather_kernel.cache_info()._asdict(),
        "set": set_kernel.cache_info()._asdict(),
        "map": map_kernel.cache_info()._asdict(),
        "all": all_kernel.cache_info()._asdict(),
        "fold": fold_kernel.cache_info()._asdict(),
        "dot": dot_kernel.cache_info()._asdict(),
        "matmul": matmul_kernel.cache_info()._asdict(),
    }
