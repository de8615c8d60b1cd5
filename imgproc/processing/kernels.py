"""
Kernel synthesis and table generation.

Kernels are flat row-major numpy arrays. ``separate_kernel`` decides whether a
2D kernel can be applied as two 1D passes.
"""

import logging
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np
import scipy.linalg

from imgproc.constants.constants import FLOAT_DTYPE
from imgproc.core.config import get_processing_config
from imgproc.core.exceptions import NumericError
from imgproc.core.validation import check_odd, check_positive, check_square
from imgproc.processing.math import distance, gaussian

logger = logging.getLogger(__name__)


def _squared_offsets(size: int) -> np.ndarray:
    k = (size - 1) // 2
    offsets = np.arange(size) - k
    return (offsets[:, np.newaxis] ** 2 + offsets[np.newaxis, :] ** 2).astype(FLOAT_DTYPE)


def generate_gaussian_kernel(size: int, sigma: float) -> np.ndarray:
    """
    Generate an unnormalised ``size x size`` Gaussian kernel.

    Args:
        size: Side of the kernel; must be odd
        sigma: Standard deviation

    Returns:
        Flat array of ``size * size`` weights
    """
    check_odd(size, "size")
    return gaussian(np.sqrt(_squared_offsets(size)), sigma).reshape(-1)


def generate_log_kernel(size: int, sigma: float) -> np.ndarray:
    """Generate a ``size x size`` Laplacian of Gaussian kernel."""
    check_odd(size, "size")
    check_positive(sigma, "sigma")

    exponent = -_squared_offsets(size) / (2.0 * sigma * sigma)
    kernel = (-1.0 / (np.pi * sigma ** 4)) * (1.0 - exponent) * np.exp(exponent)
    return kernel.reshape(-1)


def generate_spatial_mat(size: int, sigma: float) -> np.ndarray:
    """
    Generate a ``size x size`` matrix of Gaussian weights of the distance to the centre.

    One octant is evaluated and mirrored into the other seven.
    """
    check_odd(size, "size")
    center = size // 2
    mat = np.zeros((size, size), dtype=FLOAT_DTYPE)

    for dy in range(center + 1):
        for dx in range(dy, center + 1):
            weight = gaussian(distance(0, 0, dx, dy), sigma)
            for off_y, off_x in ((dy, dx), (dx, dy)):
                for y in (center - off_y, center + off_y):
                    for x in (center - off_x, center + off_x):
                        mat[y, x] = weight

    return mat.reshape(-1)


def separate_kernel(kernel: Sequence[float],
                    tolerance: Optional[float] = None) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """
    Split a square 2D kernel into vertical and horizontal 1D factors.

    The kernel is separable when its top singular value is non-zero and every
    other singular value is at most ``tolerance * s[0]``.

    Args:
        kernel: Flat row-major kernel of perfect-square length
        tolerance: Relative singular-value tolerance; defaults to
            ``ProcessingConfig.separability_tolerance``

    Returns:
        ``(vertical, horizontal)`` with ``outer(vertical, horizontal) == kernel``,
        or None when the kernel is not separable

    Raises:
        InvalidArgError: If the kernel length is not a perfect square
        NumericError: If the singular value decomposition fails
    """
    kernel = np.asarray(kernel, dtype=FLOAT_DTYPE).reshape(-1)
    size = check_square(kernel.size, "kernel length")
    if tolerance is None:
        tolerance = get_processing_config().separability_tolerance

    try:
        u, s, vt = scipy.linalg.svd(kernel.reshape(size, size))
    except (scipy.linalg.LinAlgError, ValueError) as e:
        raise NumericError(f"singular value decomposition failed: {e}") from e

    if s[0] == 0.0 or np.any(s[1:] > tolerance * s[0]):
        return None

    scalar = np.sqrt(s[0])
    return u[:, 0] * scalar, vt[0] * scalar


def generate_lookup_table(f: Callable[[int], float], dtype=None) -> np.ndarray:
    """Evaluate ``f`` at every 8-bit value, returning a 256-entry table."""
    return np.array([f(i) for i in range(256)], dtype=dtype)


def generate_histogram_percentiles(input, precision: float) -> Dict[int, float]:
    """
    Cumulative distribution of the first channel quantised by ``precision``.

    Args:
        input: Floating image; only channel 0 is read
        precision: Values are binned as ``round(value * precision)``

    Returns:
        Mapping from bin to the fraction of pixels whose bin is at most that bin
    """
    check_positive(precision, "precision")
    keys = np.rint(input.as_pixels()[:, 0] * precision).astype(np.int64)
    bins, counts = np.unique(keys, return_counts=True)
    percentiles = np.cumsum(counts) / keys.shape[0]
    return dict(zip(bins.tolist(), percentiles.tolist()))
