"""
Argument validation helpers shared by every operator.

Argument checks raise InvalidArgError with a short "<name> must ..." message.
Index and pixel-length checks guard programmer contracts and raise the
builtin IndexError / ValueError.
"""

import math
from typing import Any, TYPE_CHECKING

import numpy as np

from imgproc.core.exceptions import InvalidArgError

if TYPE_CHECKING:
    from imgproc.core.image import Image


def check_odd(val: int, name: str) -> None:
    if int(val) % 2 == 0:
        raise InvalidArgError(f"{name} must be odd, got {val}")


def check_even(val: int, name: str) -> None:
    if int(val) % 2 != 0:
        raise InvalidArgError(f"{name} must be even, got {val}")


def check_non_neg(val: float, name: str) -> None:
    if val < 0:
        raise InvalidArgError(f"{name} must be non-negative, got {val}")


def check_positive(val: float, name: str) -> None:
    if val <= 0:
        raise InvalidArgError(f"{name} must be positive, got {val}")


def check_equal(val_1: Any, val_2: Any, name: str) -> None:
    if val_1 != val_2:
        raise InvalidArgError(f"{name} must be equal: {val_1} != {val_2}")


def check_square(val: int, name: str) -> int:
    """
    Check that ``val`` is a perfect square.

    Returns:
        The integer square root of ``val``.
    """
    val = int(val)
    root = math.isqrt(val) if val >= 0 else -1
    if root < 0 or root * root != val:
        raise InvalidArgError(f"{name} must be a perfect square, got {val}")
    return root


def check_in_range(val: float, low: float, high: float, name: str) -> None:
    if val < low or val > high:
        raise InvalidArgError(f"{name} must be in range [{low}, {high}], got {val}")


def check_grayscale(image: "Image") -> None:
    """Grayscale means one colour channel, optionally followed by alpha."""
    if image.info.channels_non_alpha != 1:
        raise InvalidArgError(
            f"input must be grayscale, got {image.info.channels_non_alpha} colour channels"
        )


def check_single_channel(image: "Image") -> None:
    if image.info.channels != 1:
        raise InvalidArgError(f"input must be single-channel, got {image.info.channels} channels")


def check_rgb(image: "Image") -> None:
    if image.info.channels_non_alpha != 3:
        raise InvalidArgError(
            f"input must have 3 colour channels, got {image.info.channels_non_alpha}"
        )


def check_float(image: "Image", name: str = "input") -> None:
    if image.dtype.kind != "f":
        raise InvalidArgError(f"{name} must have a floating element type, got {image.dtype}")


def check_u8(image: "Image", name: str = "input") -> None:
    if image.dtype != np.uint8:
        raise InvalidArgError(f"{name} must have element type uint8, got {image.dtype}")


def check_binary(image: "Image") -> None:
    """Binary images hold only 0 and 255."""
    data = image.data()
    if not np.all((data == 0) | (data == 255)):
        raise InvalidArgError("input must be binary (pixel values 0 or 255)")


def check_xy(x: int, y: int, width: int, height: int) -> None:
    if x < 0 or x >= width:
        raise IndexError(f"index out of bounds: the width is {width}, but the x index is {x}")
    if y < 0 or y >= height:
        raise IndexError(f"index out of bounds: the height is {height}, but the y index is {y}")


def check_channels(channels: int, length: int) -> None:
    if channels != length:
        raise ValueError(
            f"invalid pixel length: the number of channels is {channels}, "
            f"but the pixel length is {length}"
        )
