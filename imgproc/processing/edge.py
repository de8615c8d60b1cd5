"""
Edge detection on grayscale floating images.
"""

import logging
from typing import Sequence

import numpy as np

from imgproc.constants.constants import (
    K_LAPLACIAN,
    K_PREWITT_1D_HORZ,
    K_PREWITT_1D_VERT,
    K_SOBEL_1D_HORZ,
    K_SOBEL_1D_VERT,
    U8_DTYPE,
)
from imgproc.core.image import Image
from imgproc.core.validation import check_grayscale, check_single_channel
from imgproc.processing.convert import scale_channels
from imgproc.processing.filters import separable_filter, unseparable_filter
from imgproc.processing.kernels import generate_log_kernel

logger = logging.getLogger(__name__)


def derivative_mask(input: Image, vert_kernel: Sequence[float],
                    horz_kernel: Sequence[float]) -> Image:
    """
    Gradient magnitude from a separable derivative mask.

    ``gx`` filters with (``vert_kernel``, ``horz_kernel``) and ``gy`` with the
    kernels swapped; the output is ``sqrt(gx^2 + gy^2)``.

    Raises:
        InvalidArgError: If ``input`` is not single-channel floating
    """
    check_single_channel(input)

    gx = separable_filter(input, vert_kernel, horz_kernel).data()
    gy = separable_filter(input, horz_kernel, vert_kernel).data()
    return Image(input.info, np.sqrt(gx * gx + gy * gy).astype(input.dtype, copy=False))


def prewitt(input: Image) -> Image:
    return derivative_mask(input, K_PREWITT_1D_VERT, K_PREWITT_1D_HORZ)


def sobel(input: Image) -> Image:
    return derivative_mask(input, K_SOBEL_1D_VERT, K_SOBEL_1D_HORZ)


def sobel_weighted(input: Image, weight: float) -> Image:
    """Sobel operator with centre weight ``weight`` in the smoothing kernel."""
    return derivative_mask(input, (1.0, float(weight), 1.0), K_SOBEL_1D_HORZ)


def laplacian(input: Image) -> Image:
    """
    Laplacian of a grayscale image.

    The kernel has a negative centre, so bright peaks give negative responses.
    Use normalize_laplacian to view the signed result.
    """
    check_grayscale(input)
    return unseparable_filter(input, K_LAPLACIAN)


def laplacian_of_gaussian(input: Image, size: int, sigma: float) -> Image:
    """Laplacian of Gaussian with a ``size x size`` kernel; output is signed."""
    check_grayscale(input)
    return unseparable_filter(input, generate_log_kernel(size, sigma))


def normalize_laplacian(input: Image) -> Image:
    """
    Stretch a signed single-channel response to 8-bit ``[0, 255]`` by its min and max.

    A constant input maps to all zeros.
    """
    check_single_channel(input)

    data = input.data()
    low, high = float(data.min()), float(data.max())
    if low == high:
        logger.debug("normalize_laplacian: constant input, returning zeros")
        return Image.blank(input.info, dtype=U8_DTYPE)

    return scale_channels(input, low, 0.0, high, 255.0).to_u8()
