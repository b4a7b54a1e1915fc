"""Fixed-step quantization of scalars and vectors.

Rounding is half away from zero: 0.5 -> 1, -0.5 -> -1, 2.5 -> 3.
numpy's own ``rint`` rounds half to even, so it is not used here.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from climbcodec.encoding.format import MAX_QUANTIZED
from climbcodec.errors import InvalidSample


def round_half_away(x: np.ndarray | float) -> np.ndarray:
    """Round to nearest integer, ties away from zero."""
    x = np.asarray(x, dtype=np.float64)
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def quantize(value: Any, step: float) -> Any:
    """Convert a float (or array of floats) to integer multiples of ``step``.

    Returns a Python int for scalar input and an int64 array otherwise.

    Raises:
        InvalidSample: if any input is NaN or infinite, or the quantized
            value cannot be represented exactly.
    """
    arr = np.asarray(value, dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        raise InvalidSample(f"Cannot quantize non-finite value: {value!r}")

    q = round_half_away(arr / step)
    if np.any(np.abs(q) > MAX_QUANTIZED):
        raise InvalidSample(f"Value {value!r} is out of range for step {step}")

    if q.ndim == 0:
        return int(q)
    return q.astype(np.int64)


def dequantize(value: Any, step: float) -> Any:
    """Inverse of :func:`quantize`: ``value * step``."""
    arr = np.asarray(value, dtype=np.float64) * step
    if arr.ndim == 0:
        return float(arr)
    return arr
