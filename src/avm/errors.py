"""Structured error types for slice resolution, the engine and linalg kernels."""

from __future__ import annotations

from dataclasses import dataclass


class AVMError(Exception):
    """Base class for structured avm errors."""


class MissingArgumentError(AVMError, TypeError):
    """A required argument was omitted or passed as ``None``."""


@dataclass(frozen=True)
class OutOfRangeError(AVMError, IndexError):
    """Slice or index resolution fell outside the bounds of a sequence."""

    message: str
    start: int | None = None
    count: int | None = None
    length: int | None = None

    def __str__(self) -> str:
        if self.length is None:
            return self.message
        span = ""
        if self.start is not None:
            span = f"; start {self.start}"
            if self.count is not None:
                span += f", count {self.count}"
        return f"{self.message}{span}; length {self.length}"


class LengthMismatchError(AVMError, ValueError):
    """Operands resolved to different non-scalar lengths."""


class ShapeMismatchError(AVMError, ValueError):
    """A reshape target does not match the element count of its source."""


class NotGrowableError(AVMError, TypeError):
    """Growth was requested on a fixed-length container or view."""


class ReadOnlyViewError(AVMError, TypeError):
    """A write was attempted through a view whose mapping is not invertible."""


class SingularMatrixError(AVMError, ArithmeticError):
    """Matrix determinant is within the singular epsilon of zero."""


class DegenerateVectorError(AVMError, ArithmeticError):
    """Vector has zero length where a direction is required."""


def require(value, name: str):
    """Return ``value`` or fail with ``MissingArgumentError`` when it is ``None``."""
    if value is None:
        raise MissingArgumentError(f"bad argument '{name}' (expected a value, got None)")
    return value
