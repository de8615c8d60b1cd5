"""
Binary morphology on single-channel 8-bit images holding only 0 and 255.

Every operator reads its ``(2r+1) x (2r+1)`` window sums from a summed-area
table built over the input padded by ``r`` edge-replicated pixels, so each
window holds exactly ``(2r+1)^2`` samples with clamp-to-edge borders.
"""

import logging

import numpy as np

from imgproc.constants.constants import U8_DTYPE
from imgproc.core.image import Image
from imgproc.core.validation import check_binary, check_non_neg, check_single_channel, check_u8
from imgproc.processing.sat import rectangular_sums, summed_area_table

logger = logging.getLogger(__name__)

WHITE = 255


def _check_binary_input(input: Image, radius: int) -> None:
    check_single_channel(input)
    check_u8(input)
    check_binary(input)
    check_non_neg(radius, "radius")


def _window_sums(input: Image, radius: int) -> np.ndarray:
    """Sum of every pixel's clamp-to-edge ``(2r+1) x (2r+1)`` window, one per pixel in row-major order."""
    width, height = input.wh()
    padded = np.pad(input.as_array(), ((radius, radius), (radius, radius), (0, 0)), mode="edge")
    table = summed_area_table(Image.from_array(padded))

    ys, xs = np.divmod(np.arange(width * height), width)
    size = 2 * radius + 1
    return rectangular_sums(table, xs, ys, xs + size - 1, ys + size - 1)[:, 0]


def _from_mask(input: Image, mask: np.ndarray) -> Image:
    return Image(input.info, np.where(mask, WHITE, 0).astype(U8_DTYPE))


def _erode_mask(sums: np.ndarray, radius: int) -> np.ndarray:
    size = 2 * radius + 1
    return sums == size * size * WHITE


def _dilate_mask(sums: np.ndarray) -> np.ndarray:
    return sums >= WHITE


def erode(input: Image, radius: int) -> Image:
    """White where the whole window is white."""
    _check_binary_input(input, radius)
    return _from_mask(input, _erode_mask(_window_sums(input, radius), radius))


def dilate(input: Image, radius: int) -> Image:
    """White where any pixel of the window is white."""
    _check_binary_input(input, radius)
    return _from_mask(input, _dilate_mask(_window_sums(input, radius)))


def majority(input: Image, radius: int) -> Image:
    """White where more than half of the window is white."""
    _check_binary_input(input, radius)
    size = 2 * radius + 1
    sums = _window_sums(input, radius)
    return _from_mask(input, sums * 2 > size * size * WHITE)


def open(input: Image, radius: int) -> Image:
    """Erosion followed by dilation."""
    return dilate(erode(input, radius), radius)


def close(input: Image, radius: int) -> Image:
    """Dilation followed by erosion."""
    return erode(dilate(input, radius), radius)


def gradient(input: Image, radius: int) -> Image:
    """White where the window holds both colours (dilation minus erosion)."""
    _check_binary_input(input, radius)
    sums = _window_sums(input, radius)
    return _from_mask(input, _dilate_mask(sums) != _erode_mask(sums, radius))


def invert_binary(input: Image) -> Image:
    """Swap 0 and 255."""
    check_single_channel(input)
    check_u8(input)
    check_binary(input)
    return input.map_channels(lambda c: WHITE - c, vectorized=True, dtype=U8_DTYPE)
