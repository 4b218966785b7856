"""Bridges between avm arrays and NumPy / JAX storage."""

from __future__ import annotations

import jax.numpy as jnp
import numpy as np

from .allocation import Allocator, allocate
from .slices import resolve
from .values import ElementKind, kind_of


def numpy_allocator(dtype=np.float64) -> Allocator:
    """Allocation hook backed by ``numpy.ndarray`` storage.

    ``BOOLEAN`` results use ``bool`` and ``ANY`` results ``object`` arrays;
    every other kind uses ``dtype``::

        with allocation.using_allocator(interop.numpy_allocator()):
            out = array.add([1, 2], [3, 4])   # numpy.ndarray([4., 6.])
    """

    def allocate_numpy(kind: ElementKind, length: int) -> np.ndarray:
        if kind is ElementKind.BOOLEAN:
            return np.zeros(length, dtype=bool)
        if kind is ElementKind.ANY:
            return np.empty(length, dtype=object)
        return np.zeros(length, dtype=dtype)

    allocate_numpy.__qualname__ = f"numpy_allocator({np.dtype(dtype).name})"
    return allocate_numpy


def to_jax(src, start: int | None = None, count: int | None = None, dtype=None):
    """Copy a resolved slice into a 1-d ``jax.Array``."""
    s = resolve(src, start, count)
    values = [s.seq[i] for i in s.indices()]
    return jnp.asarray(values, dtype=dtype)


def _python_scalar(value):
    return value.item() if hasattr(value, "item") else value


def from_jax(x):
    """Flatten ``x`` (row-major) into a new array from the allocation hook."""
    flat = [_python_scalar(v) for v in np.asarray(x).reshape(-1)]
    kind = kind_of(flat[0]) if flat else ElementKind.NUMBER
    out = allocate(kind, len(flat))
    for i, value in enumerate(flat):
        out[i] = value
    return out


def matrix_to_jax(m, cols: int, rows: int | None = None):
    """Column-major flat matrix to a ``rows x cols`` ``jax.Array``."""
    rows = cols if rows is None else rows
    s = resolve(m, None, cols * rows, name="m")
    values = [s.seq[i] for i in s.indices()]
    return jnp.asarray(values).reshape(cols, rows).T


def matrix_from_jax(x) -> tuple:
    """``rows x cols`` ``jax.Array`` to a column-major flat tuple."""
    host = np.asarray(x)
    if host.ndim != 2:
        raise ValueError(f"expected a 2-d array, got {host.ndim} dimensions")
    return tuple(_python_scalar(v) for v in host.T.reshape(-1))
