"""
Helpers over a single pixel.

A pixel is a 1-D numpy view of ``channels`` values taken from an image buffer.
When an image carries alpha, the alpha value is the last channel.
"""

from typing import Callable

import numpy as np


def alpha(pixel: np.ndarray):
    """Return the last channel of the pixel."""
    return pixel[-1]


def channels_without_alpha(pixel: np.ndarray) -> np.ndarray:
    """Return every channel except the last."""
    return pixel[:-1]


def map_all(pixel: np.ndarray, f: Callable) -> np.ndarray:
    """Apply ``f`` to each channel, returning a new array."""
    return np.array([f(channel) for channel in pixel])


def map_alpha(pixel: np.ndarray, f: Callable, g: Callable) -> np.ndarray:
    """Apply ``f`` to each colour channel and ``g`` to the alpha channel."""
    channels_out = [f(channel) for channel in channels_without_alpha(pixel)]
    channels_out.append(g(alpha(pixel)))
    return np.array(channels_out)


def apply(pixel: np.ndarray, f: Callable) -> None:
    """Apply ``f`` to each channel in place."""
    for i in range(len(pixel)):
        pixel[i] = f(pixel[i])


def apply_alpha(pixel: np.ndarray, f: Callable, g: Callable) -> None:
    """Apply ``f`` to each colour channel and ``g`` to the alpha channel, in place."""
    for i in range(len(pixel) - 1):
        pixel[i] = f(pixel[i])
    pixel[-1] = g(pixel[-1])


def is_black(pixel: np.ndarray) -> bool:
    return not np.any(pixel)


def is_black_alpha(pixel: np.ndarray) -> bool:
    """True if every channel but alpha is zero."""
    return not np.any(channels_without_alpha(pixel))
