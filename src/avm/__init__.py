"""avm public API."""

from . import allocation, array, linalg, view
from .allocation import get_allocator, reset_allocator, set_allocator, using_allocator
from .errors import (
    AVMError,
    DegenerateVectorError,
    LengthMismatchError,
    MissingArgumentError,
    NotGrowableError,
    OutOfRangeError,
    ReadOnlyViewError,
    ShapeMismatchError,
    SingularMatrixError,
)
from .slices import Slice, resolve
from .values import ElementKind

try:
    from .interop import from_jax, matrix_from_jax, matrix_to_jax, numpy_allocator, to_jax
except ModuleNotFoundError as exc:
    if exc.name and (exc.name.startswith("jax") or exc.name.startswith("numpy")):
        _interop_import_error = exc

        def to_jax(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for to_jax(). Install runtime deps first."
            ) from _interop_import_error

        def from_jax(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for from_jax(). Install runtime deps first."
            ) from _interop_import_error

        def matrix_to_jax(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for matrix_to_jax(). Install runtime deps first."
            ) from _interop_import_error

        def matrix_from_jax(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for matrix_from_jax(). Install runtime deps first."
            ) from _interop_import_error

        def numpy_allocator(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "numpy is required for numpy_allocator(). Install runtime deps first."
            ) from _interop_import_error

    else:
        raise

__all__ = [
    "allocation",
    "array",
    "linalg",
    "view",
    "get_allocator",
    "set_allocator",
    "reset_allocator",
    "using_allocator",
    "Slice",
    "resolve",
    "ElementKind",
    "to_jax",
    "from_jax",
    "matrix_to_jax",
    "matrix_from_jax",
    "numpy_allocator",
    "AVMError",
    "MissingArgumentError",
    "OutOfRangeError",
    "LengthMismatchError",
    "ShapeMismatchError",
    "NotGrowableError",
    "ReadOnlyViewError",
    "SingularMatrixError",
    "DegenerateVectorError",
]
