"""Process-wide configuration flags, read once from the environment at import."""

from __future__ import annotations

import os
from typing import Final

EPSILON: Final[float] = float(os.environ.get("AVM_EPSILON", "1e-9"))
SINGULAR_EPSILON: Final[float] = float(os.environ.get("AVM_SINGULAR_EPSILON", "1e-12"))
USE_UNROLLED_KERNELS: Final[bool] = os.environ.get("AVM_DISABLE_UNROLLED_KERNELS", "0") != "1"
UNROLLED_CACHE_MAX: Final[int] = max(1, int(os.environ.get("AVM_UNROLLED_CACHE_MAX", "256")))

# Largest arity with an unrolled kernel.
MAX_UNROLLED_ARITY: Final[int] = 16
