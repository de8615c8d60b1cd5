"""
Summed-area tables and constant-time rectangular sums.
"""

import numpy as np

from imgproc.constants.constants import FLOAT_DTYPE
from imgproc.core.image import Image
from imgproc.core.validation import check_xy


def summed_area_table(input: Image) -> Image:
    """
    Build the summed-area table of ``input``.

    ``T(x, y)`` is the sum of ``input`` over every pixel with ``i <= x`` and
    ``j <= y``, per channel. The table is a float64 image of the same
    dimensions.
    """
    table = input.as_array().astype(FLOAT_DTYPE)
    np.cumsum(table, axis=0, out=table)
    np.cumsum(table, axis=1, out=table)
    return Image(input.info, table.reshape(-1))


def rectangular_intensity_sum(table: Image, x_0: int, y_0: int, x_1: int, y_1: int) -> np.ndarray:
    """
    Sum of the source pixels in the rectangle with corners ``(x_0, y_0)`` and ``(x_1, y_1)``, inclusive.

    Args:
        table: A summed-area table from summed_area_table
        x_0, y_0: Top-left corner
        x_1, y_1: Bottom-right corner

    Returns:
        One sum per channel

    Raises:
        IndexError: If a corner lies outside the table
    """
    width, height = table.wh()
    check_xy(x_0, y_0, width, height)
    check_xy(x_1, y_1, width, height)

    total = table.get_pixel(x_1, y_1).copy()
    if x_0 > 0:
        total -= table.get_pixel(x_0 - 1, y_1)
    if y_0 > 0:
        total -= table.get_pixel(x_1, y_0 - 1)
    if x_0 > 0 and y_0 > 0:
        total += table.get_pixel(x_0 - 1, y_0 - 1)
    return total


def rectangular_sums(table: Image, x_0: np.ndarray, y_0: np.ndarray,
                     x_1: np.ndarray, y_1: np.ndarray) -> np.ndarray:
    """
    Vectorised rectangular_intensity_sum over arrays of corners.

    Returns:
        (n, channels) array of sums; corners must lie inside the table
    """
    grid = table.as_array()
    x_0 = np.asarray(x_0)
    y_0 = np.asarray(y_0)
    x_1 = np.asarray(x_1)
    y_1 = np.asarray(y_1)

    # Pad one zero row and column so index -1 reads as zero.
    padded = np.zeros((grid.shape[0] + 1, grid.shape[1] + 1, grid.shape[2]), dtype=grid.dtype)
    padded[1:, 1:] = grid

    return (padded[y_1 + 1, x_1 + 1]
            - padded[y_1 + 1, x_0]
            - padded[y_0, x_1 + 1]
            + padded[y_0, x_0])
