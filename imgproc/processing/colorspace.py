"""
Colour-space conversions.

8-bit sRGB is the storage format; linear sRGB, CIE XYZ, CIELAB and HSV are
floating images. Every conversion leaves the alpha channel out of the colour
math: it passes through unchanged, except for HSV where it is scaled to
``[0, 1]`` alongside the other channels and back.

Value ranges:

* sRGB: ``[0, 255]``
* linear sRGB and XYZ: ``[0, 1]`` (XYZ of white is the matrix row sum)
* CIELAB: ``L* in [0, 100]``, ``a*`` and ``b*`` roughly ``[-128, 127]``
* HSV: all channels in ``[0, 1]``
"""

import numpy as np

from imgproc.constants import White
from imgproc.constants.constants import (
    FLOAT_DTYPE,
    GAMMA,
    REFERENCE_WHITES,
    SRGB_BREAK,
    SRGB_GAMMA_OFFSET,
    SRGB_GAMMA_SCALE,
    SRGB_LIN_BREAK,
    SRGB_LIN_SCALE,
    SRGB_TO_XYZ_MAT,
    U8_DTYPE,
    XYZ_TO_SRGB_MAT,
)
from imgproc.core.image import Image
from imgproc.core.validation import check_float, check_rgb, check_u8
from imgproc.processing.kernels import generate_lookup_table
from imgproc.processing.math import lab_to_xyz_fn, xyz_to_lab_fn

_SRGB_TO_XYZ = np.array(SRGB_TO_XYZ_MAT, dtype=FLOAT_DTYPE).reshape(3, 3)
_XYZ_TO_SRGB = np.array(XYZ_TO_SRGB_MAT, dtype=FLOAT_DTYPE).reshape(3, 3)


def _linearize_value(i: int) -> float:
    val = float(i)
    if val <= SRGB_BREAK:
        return val / SRGB_LIN_SCALE
    return ((val + SRGB_GAMMA_OFFSET) / SRGB_GAMMA_SCALE) ** GAMMA


_LINEARIZE_LUT = generate_lookup_table(_linearize_value, dtype=FLOAT_DTYPE)


def _to_u8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(U8_DTYPE)


def _identity(a):
    return a


def rgb_to_grayscale(input: Image) -> Image:
    """Average the colour channels of an 8-bit image, rounded; alpha passes through."""
    check_u8(input)
    return input.map_pixels_if_alpha(
        lambda colour: _to_u8(colour.mean(axis=1)),
        _identity,
        vectorized=True, dtype=U8_DTYPE,
    )


def rgb_to_grayscale_f(input: Image) -> Image:
    """Average the colour channels of a floating image; alpha passes through."""
    check_float(input)
    return input.map_pixels_if_alpha(
        lambda colour: colour.mean(axis=1),
        _identity,
        vectorized=True, dtype=input.dtype,
    )


def linearize_srgb(input: Image) -> Image:
    """Map 8-bit sRGB to linear sRGB in ``[0, 1]`` through a 256-entry lookup table."""
    check_u8(input)
    return input.map_channels_if_alpha(
        lambda c: _LINEARIZE_LUT[c],
        lambda a: a.astype(FLOAT_DTYPE),
        vectorized=True, dtype=FLOAT_DTYPE,
    )


def unlinearize_srgb(input: Image) -> Image:
    """Map linear sRGB in ``[0, 1]`` back to rounded 8-bit sRGB."""
    check_float(input)

    def gamma_encode(c):
        encoded = SRGB_GAMMA_SCALE * np.power(np.maximum(c, SRGB_LIN_BREAK), 1.0 / GAMMA) - SRGB_GAMMA_OFFSET
        return _to_u8(np.where(c <= SRGB_LIN_BREAK, c * SRGB_LIN_SCALE, encoded))

    return input.map_channels_if_alpha(gamma_encode, _to_u8, vectorized=True, dtype=U8_DTYPE)


def srgb_lin_to_xyz(input: Image) -> Image:
    check_rgb(input)
    return input.map_pixels_if_alpha(lambda rgb: rgb @ _SRGB_TO_XYZ.T, _identity,
                                     vectorized=True, dtype=FLOAT_DTYPE)


def xyz_to_srgb_lin(input: Image) -> Image:
    check_rgb(input)
    return input.map_pixels_if_alpha(lambda xyz: xyz @ _XYZ_TO_SRGB.T, _identity,
                                     vectorized=True, dtype=FLOAT_DTYPE)


def xyz_to_lab(input: Image, ref_white: White) -> Image:
    """
    Convert CIE XYZ to CIELAB relative to ``ref_white``.

    Args:
        input: XYZ image with tristimulus values in ``[0, 1]``
        ref_white: Reference white (D50 or D65)
    """
    check_rgb(input)
    x_n, y_n, z_n = REFERENCE_WHITES[ref_white]

    def convert(xyz):
        f_x = xyz_to_lab_fn(xyz[:, 0] * 100.0 / x_n)
        f_y = xyz_to_lab_fn(xyz[:, 1] * 100.0 / y_n)
        f_z = xyz_to_lab_fn(xyz[:, 2] * 100.0 / z_n)
        return np.stack([116.0 * f_y - 16.0,
                         500.0 * (f_x - f_y),
                         200.0 * (f_y - f_z)], axis=1)

    return input.map_pixels_if_alpha(convert, _identity, vectorized=True, dtype=FLOAT_DTYPE)


def lab_to_xyz(input: Image, ref_white: White) -> Image:
    """Convert CIELAB relative to ``ref_white`` back to CIE XYZ in ``[0, 1]``."""
    check_rgb(input)
    x_n, y_n, z_n = REFERENCE_WHITES[ref_white]

    def convert(lab):
        n = (lab[:, 0] + 16.0) / 116.0
        return np.stack([x_n * lab_to_xyz_fn(n + lab[:, 1] / 500.0) / 100.0,
                         y_n * lab_to_xyz_fn(n) / 100.0,
                         z_n * lab_to_xyz_fn(n - lab[:, 2] / 200.0) / 100.0], axis=1)

    return input.map_pixels_if_alpha(convert, _identity, vectorized=True, dtype=FLOAT_DTYPE)


def rgb_to_hsv(input: Image) -> Image:
    """
    Convert 8-bit RGB to HSV with every channel (alpha included) in ``[0, 1]``.

    Hue comes from the channel holding the maximum (red first, then green),
    divided by 6 and wrapped into ``[0, 1)``. Grey pixels get hue 0.
    """
    check_u8(input)
    check_rgb(input)

    def convert(colour):
        rgb = colour.astype(FLOAT_DTYPE) / 255.0
        r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
        c_max = rgb.max(axis=1)
        c_range = c_max - rgb.min(axis=1)
        safe_range = np.where(c_range == 0.0, 1.0, c_range)

        saturation = np.where(c_max != 0.0, c_range / np.where(c_max == 0.0, 1.0, c_max), 0.0)
        hue = np.where(c_max == r, (g - b) / safe_range,
                       np.where(c_max == g, (b - r) / safe_range + 2.0,
                                (r - g) / safe_range + 4.0))
        hue = np.where(c_range == 0.0, 0.0, hue) / 6.0
        hue = np.where(hue < 0.0, hue + 1.0, hue)
        return np.stack([hue, saturation, c_max], axis=1)

    return input.map_pixels_if_alpha(convert, lambda a: a / 255.0,
                                     vectorized=True, dtype=FLOAT_DTYPE)


def hsv_to_rgb(input: Image) -> Image:
    """Convert HSV in ``[0, 1]`` back to rounded 8-bit RGB."""
    check_float(input)
    check_rgb(input)

    def convert(hsv):
        h, s, v = hsv[:, 0], hsv[:, 1], hsv[:, 2]
        hue = h * 6.0
        sector = np.floor(hue)
        f = hue - sector
        sector = np.mod(sector, 6).astype(np.int64)

        p = v * (1.0 - s)
        q = v * (1.0 - s * f)
        t = v * (1.0 - s * (1.0 - f))
        choices = [(v, t, p), (q, v, p), (p, v, t), (p, q, v), (t, p, v), (v, p, q)]

        rgb = np.select([(sector == k)[:, np.newaxis] for k in range(6)],
                        [np.stack(choice, axis=1) for choice in choices])
        return _to_u8(rgb * 255.0)

    return input.map_pixels_if_alpha(convert, lambda a: _to_u8(a * 255.0),
                                     vectorized=True, dtype=U8_DTYPE)


def srgb_to_xyz(input: Image) -> Image:
    return srgb_lin_to_xyz(linearize_srgb(input))


def xyz_to_srgb(input: Image) -> Image:
    return unlinearize_srgb(xyz_to_srgb_lin(input))


def srgb_to_lab(input: Image, ref_white: White) -> Image:
    return xyz_to_lab(srgb_to_xyz(input), ref_white)


def lab_to_srgb(input: Image, ref_white: White) -> Image:
    return xyz_to_srgb(lab_to_xyz(input, ref_white))
