"""
Scalar and small-vector math used across the operators.

The weighting functions (``cubic_weighting``, ``sinc_norm``,
``lanczos_kernel``, ``clamp_zero``, ``xyz_to_lab_fn``, ``lab_to_xyz_fn``)
accept a scalar or a numpy array, so the resampling and colour-space code
can evaluate them over whole coordinate grids.
"""

import math
from typing import Sequence, Tuple

import numpy as np

from imgproc.constants.constants import FLOAT_DTYPE, LAB_DELTA
from imgproc.core.exceptions import InvalidArgError
from imgproc.core.validation import check_non_neg


def vector_mul(mat: Sequence[float], vec: Sequence[float]) -> np.ndarray:
    """
    Multiply a square row-major matrix by a vector.

    Args:
        mat: ``n * n`` values in row-major order
        vec: ``n`` values

    Returns:
        The ``n``-vector ``mat @ vec``

    Raises:
        InvalidArgError: If ``len(mat) != len(vec) ** 2``
    """
    vec = np.asarray(vec)
    mat = np.asarray(mat)
    rows = vec.shape[0]
    if rows == 0 or mat.size != rows * rows:
        raise InvalidArgError(
            f"mat and vec dimensions must be equal: {mat.size} values for a vector of length {rows}"
        )
    return mat.reshape(rows, rows) @ vec


def max_3(x: float, y: float, z: float) -> float:
    if x > y:
        return x if x > z else z
    return y if y > z else z


def min_3(x: float, y: float, z: float) -> float:
    if x < y:
        return x if x < z else z
    return y if y < z else z


def max_4(w: float, x: float, y: float, z: float) -> float:
    if w > x:
        return max_3(w, y, z)
    if x > y:
        return max_3(w, x, z)
    if y > z:
        return max_3(w, x, y)
    return max_3(x, y, z)


def min_4(w: float, x: float, y: float, z: float) -> float:
    if w < x:
        return min_3(w, y, z)
    if x < y:
        return min_3(w, x, z)
    if y < z:
        return min_3(w, x, y)
    return min_3(x, y, z)


def gaussian(x, sigma: float):
    """
    Evaluate the Gaussian ``(1 / (2*pi*sigma^2)) * exp(-x^2 / (2*sigma^2))``.

    ``x`` may be a scalar or an array.

    Raises:
        InvalidArgError: If ``sigma`` is negative or zero
    """
    check_non_neg(sigma, "sigma")
    if sigma == 0:
        raise InvalidArgError("sigma must be non-zero")

    sigma_squared = float(sigma) * float(sigma)
    x = np.asarray(x, dtype=FLOAT_DTYPE)
    result = (1.0 / (2.0 * math.pi * sigma_squared)) * np.exp(-(x * x) / (2.0 * sigma_squared))
    return float(result) if result.ndim == 0 else result


def distance(x_1: float, y_1: float, x_2: float, y_2: float) -> float:
    """Euclidean distance between two points."""
    return math.hypot(x_1 - x_2, y_1 - y_2)


def get_2d_coords(i: int, width: int) -> Tuple[int, int]:
    """Convert a row-major index into ``(x, y)``."""
    return i % width, i // width


def clamp_zero(x):
    """Return ``x`` where positive, 0 elsewhere."""
    result = np.maximum(np.asarray(x, dtype=FLOAT_DTYPE), 0.0)
    return float(result) if result.ndim == 0 else result


def cubic_weighting(x):
    """Cubic B-spline weight used by bicubic interpolation."""
    return (1.0 / 6.0) * (clamp_zero(x + 2.0) ** 3
                          - 4.0 * clamp_zero(x + 1.0) ** 3
                          + 6.0 * clamp_zero(x) ** 3
                          - 4.0 * clamp_zero(x - 1.0) ** 3)


def sinc_norm(x):
    """Normalised sinc, ``sin(pi*x) / (pi*x)`` with ``sinc_norm(0) == 1``."""
    result = np.sinc(np.asarray(x, dtype=FLOAT_DTYPE))
    return float(result) if result.ndim == 0 else result


def lanczos_kernel(x, a: float):
    """Lanczos window of half-width ``a``; zero outside ``(-a, a)``."""
    x = np.asarray(x, dtype=FLOAT_DTYPE)
    result = np.where((x > -a) & (x < a), np.sinc(x) * np.sinc(x / a), 0.0)
    return float(result) if result.ndim == 0 else result


def xyz_to_lab_fn(t):
    """Forward CIELAB companding function with break at ``(6/29)^3``."""
    t = np.asarray(t, dtype=FLOAT_DTYPE)
    result = np.where(t > LAB_DELTA ** 3,
                      np.cbrt(t),
                      t / (3.0 * LAB_DELTA * LAB_DELTA) + 4.0 / 29.0)
    return float(result) if result.ndim == 0 else result


def lab_to_xyz_fn(t):
    """Inverse CIELAB companding function with break at ``6/29``."""
    t = np.asarray(t, dtype=FLOAT_DTYPE)
    result = np.where(t > LAB_DELTA,
                      t ** 3,
                      3.0 * LAB_DELTA * LAB_DELTA * (t - 4.0 / 29.0))
    return float(result) if result.ndim == 0 else result
