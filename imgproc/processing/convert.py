"""
Channel value-range conversions between 8-bit and floating images.
"""

import numpy as np

from imgproc.constants.constants import FLOAT_DTYPE, U8_DTYPE
from imgproc.core.exceptions import InvalidArgError
from imgproc.core.image import Image
from imgproc.core.validation import check_positive, check_u8


def u8_to_float_scale(input: Image, scale: float) -> Image:
    """Map 8-bit channels in ``[0, 255]`` to floats in ``[0, scale]``."""
    check_u8(input)
    check_positive(scale, "scale")
    return input.map_channels(lambda c: c.astype(FLOAT_DTYPE) / 255.0 * scale,
                              vectorized=True, dtype=FLOAT_DTYPE)


def float_to_u8_scale(input: Image, scale: float) -> Image:
    """Map float channels in ``[0, scale]`` to rounded 8-bit values; out-of-range values saturate."""
    check_positive(scale, "scale")
    return input.map_channels(lambda c: np.clip(np.rint(c / scale * 255.0), 0, 255),
                              vectorized=True, dtype=U8_DTYPE)


def scale_channels(input: Image, from_min: float, to_min: float,
                   from_max: float, to_max: float) -> Image:
    """
    Linearly map every channel value so that ``from_min -> to_min`` and ``from_max -> to_max``.

    Raises:
        InvalidArgError: If ``from_min == from_max``
    """
    if from_max == from_min:
        raise InvalidArgError(f"from_min and from_max must differ, both are {from_min}")

    factor = (to_max - to_min) / (from_max - from_min)
    return input.map_channels(lambda c: (c.astype(FLOAT_DTYPE) - from_min) * factor + to_min,
                              vectorized=True, dtype=FLOAT_DTYPE)
