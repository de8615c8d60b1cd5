"""
Linear filtering over clamp-to-edge neighborhoods.

Every filter works on floating images and is evaluated for the whole image at
once: for each kernel tap the image substrate supplies the index of the
neighbor at that tap for every pixel, and the tap's weighted pixels are
accumulated into the output. Taps are summed in kernel order, so results are
deterministic.
"""

import logging
from typing import Iterable, Sequence

import numpy as np

from imgproc.constants import Thresh
from imgproc.constants.constants import K_SHARPEN, K_UNSHARP_MASKING
from imgproc.core.image import Image
from imgproc.core.validation import (
    check_equal,
    check_float,
    check_grayscale,
    check_non_neg,
    check_odd,
    check_square,
)
from imgproc.processing.kernels import generate_gaussian_kernel, separate_kernel

logger = logging.getLogger(__name__)


def _as_kernel(kernel: Sequence[float]) -> np.ndarray:
    return np.asarray(kernel, dtype=np.float64).reshape(-1)


def _accumulate(input: Image, taps: Iterable[np.ndarray], kernel: np.ndarray) -> Image:
    pixels = input.as_pixels()
    out = np.zeros(pixels.shape, dtype=np.float64)
    for weight, index in zip(kernel, taps):
        out += weight * pixels[index]
    return Image(input.info, out.astype(input.dtype, copy=False).reshape(-1))


def filter_1d(input: Image, kernel: Sequence[float], vert: bool) -> Image:
    """
    Convolve every pixel with a 1D kernel along one axis.

    Args:
        input: Floating image
        kernel: Odd-length weights, applied top-to-bottom or left-to-right
        vert: Filter along columns when True, along rows otherwise

    Returns:
        Image with the same info and element type as ``input``

    Raises:
        InvalidArgError: If the kernel length is even or ``input`` is not floating
    """
    check_float(input)
    kernel = _as_kernel(kernel)
    check_odd(kernel.size, "kernel length")
    return _accumulate(input, input.neighborhood_1d_taps(kernel.size, vert), kernel)


def separable_filter(input: Image, vert_kernel: Sequence[float],
                     horz_kernel: Sequence[float]) -> Image:
    """Apply ``vert_kernel`` along columns, then ``horz_kernel`` along rows."""
    vert_kernel = _as_kernel(vert_kernel)
    horz_kernel = _as_kernel(horz_kernel)
    check_odd(vert_kernel.size, "vertical kernel length")
    check_odd(horz_kernel.size, "horizontal kernel length")
    check_equal(vert_kernel.size, horz_kernel.size, "kernel lengths")

    vertical = filter_1d(input, vert_kernel, True)
    return filter_1d(vertical, horz_kernel, False)


def unseparable_filter(input: Image, kernel: Sequence[float]) -> Image:
    """
    Convolve every pixel with a square 2D kernel.

    Raises:
        InvalidArgError: If the kernel length is not the square of an odd number
    """
    check_float(input)
    kernel = _as_kernel(kernel)
    size = check_square(kernel.size, "kernel length")
    check_odd(size, "kernel size")
    return _accumulate(input, input.neighborhood_2d_taps(size), kernel)


def linear_filter(input: Image, kernel: Sequence[float]) -> Image:
    """Apply a square 2D kernel, as two 1D passes when it is separable."""
    check_float(input)
    kernel = _as_kernel(kernel)
    size = check_square(kernel.size, "kernel length")
    check_odd(size, "kernel size")

    factors = separate_kernel(kernel)
    if factors is not None:
        logger.debug(f"{size}x{size} kernel is separable, filtering in two passes")
        return separable_filter(input, *factors)

    logger.debug(f"{size}x{size} kernel is not separable")
    return unseparable_filter(input, kernel)


def box_filter(input: Image, size: int) -> Image:
    """Sum each ``size x size`` neighborhood (unnormalised box filter)."""
    kernel = np.ones(size)
    return separable_filter(input, kernel, kernel)


def box_filter_normalized(input: Image, size: int) -> Image:
    """Box filter with weight ``1 / size^2`` in each of its two passes."""
    kernel = np.full(size, 1.0 / (size * size))
    return separable_filter(input, kernel, kernel)


def weighted_avg_filter(input: Image, size: int, weight: float) -> Image:
    """Average each neighborhood, giving the centre pixel ``weight`` times the weight of the others."""
    check_odd(size, "size")
    check_non_neg(weight, "weight")

    total = size * size - 1 + weight
    kernel = np.full(size * size, 1.0 / total)
    kernel[(size // 2) * size + size // 2] = weight / total
    return unseparable_filter(input, kernel)


def gaussian_blur(input: Image, size: int, sigma: float) -> Image:
    """Filter with a ``size x size`` Gaussian kernel."""
    return linear_filter(input, generate_gaussian_kernel(size, sigma))


def sharpen(input: Image) -> Image:
    return unseparable_filter(input, K_SHARPEN)


def unsharp_masking(input: Image) -> Image:
    return unseparable_filter(input, K_UNSHARP_MASKING)


def threshold(input: Image, threshold: float, max: float, method: Thresh) -> Image:
    """
    Threshold a grayscale floating image; alpha passes through.

    Values strictly greater than ``threshold`` count as above it.
    """
    check_grayscale(input)
    check_float(input)

    if method == Thresh.BINARY:
        f = lambda c: np.where(c > threshold, max, 0.0)
    elif method == Thresh.BINARY_INV:
        f = lambda c: np.where(c > threshold, 0.0, max)
    elif method == Thresh.TRUNC:
        f = lambda c: np.where(c > threshold, threshold, c)
    elif method == Thresh.TO_ZERO:
        f = lambda c: np.where(c > threshold, c, 0.0)
    elif method == Thresh.TO_ZERO_INV:
        f = lambda c: np.where(c > threshold, 0.0, c)
    else:
        raise ValueError(f"unknown threshold method: {method}")

    return input.map_channels_if_alpha(f, lambda a: a, vectorized=True, dtype=input.dtype)


def residual(original: Image, filtered: Image) -> Image:
    """
    Subtract ``filtered`` from ``original`` channel by channel.

    Integer images saturate at the limits of their element type.
    """
    check_equal(original.info, filtered.info, "image dimensions")
    check_equal(original.dtype, filtered.dtype, "element types")

    if original.dtype.kind == "f":
        return Image(original.info, original.data() - filtered.data())

    limits = np.iinfo(original.dtype)
    diff = original.data().astype(np.int64) - filtered.data().astype(np.int64)
    return Image(original.info, np.clip(diff, limits.min, limits.max).astype(original.dtype))
