"""
Tone adjustments on 8-bit sRGB images.

RGB-mode operations go through a 256-entry lookup table applied to the colour
channels; LAB-mode operations edit the L* channel of a CIELAB (D50) copy.
Alpha always passes through unchanged.
"""

import logging
from typing import Optional

import numpy as np

from imgproc.constants import Tone, White
from imgproc.constants.constants import U8_DTYPE
from imgproc.core.config import get_processing_config
from imgproc.core.image import Image
from imgproc.core.validation import check_in_range, check_non_neg, check_positive, check_u8
from imgproc.processing.colorspace import hsv_to_rgb, lab_to_srgb, rgb_to_hsv, srgb_to_lab
from imgproc.processing.kernels import generate_histogram_percentiles, generate_lookup_table

logger = logging.getLogger(__name__)


def _apply_lut(input: Image, lut: np.ndarray) -> Image:
    return input.map_channels_if_alpha(lambda c: lut[c], lambda a: a,
                                       vectorized=True, dtype=U8_DTYPE)


def _edit_lightness(input: Image, f, ref_white: White = White.D50) -> Image:
    lab = srgb_to_lab(input, ref_white)
    lab.edit_channel(f, 0, vectorized=True)
    return lab_to_srgb(lab, ref_white)


def brightness(input: Image, bias: int, method: Tone = Tone.RGB) -> Image:
    """
    Shift brightness by ``bias``.

    Args:
        input: 8-bit image
        bias: Added to each colour channel (RGB) or, scaled to ``bias / 255 * 100``,
            to L* (LAB); in ``[-255, 255]``
        method: Tone.RGB or Tone.LAB

    Raises:
        InvalidArgError: If ``bias`` is out of range
    """
    check_u8(input)
    check_in_range(bias, -255, 255, "bias")

    if method == Tone.LAB:
        bias_lab = bias / 255.0 * 100.0
        return _edit_lightness(input, lambda l: l + bias_lab)

    lut = generate_lookup_table(lambda i: min(max(i + bias, 0), 255), dtype=U8_DTYPE)
    return _apply_lut(input, lut)


def contrast(input: Image, gain: float, method: Tone = Tone.RGB) -> Image:
    """
    Scale contrast by ``gain`` (non-negative).

    RGB mode multiplies every colour channel and saturates at 255; LAB mode
    multiplies L*.
    """
    check_u8(input)
    check_non_neg(gain, "gain")

    if method == Tone.LAB:
        return _edit_lightness(input, lambda l: l * gain)

    lut = generate_lookup_table(lambda i: min(max(round(i * gain), 0), 255), dtype=U8_DTYPE)
    return _apply_lut(input, lut)


def saturation(input: Image, saturation: int) -> Image:
    """Add ``saturation / 255`` to the HSV saturation of every pixel, clamped to ``[0, 1]``."""
    check_u8(input)
    check_in_range(saturation, -255, 255, "saturation")

    hsv = rgb_to_hsv(input)
    shift = saturation / 255.0
    hsv.edit_channel(lambda s: np.clip(s + shift, 0.0, 1.0), 1, vectorized=True)
    return hsv_to_rgb(hsv)


def gamma(input: Image, gamma: float, max: int = 255) -> Image:
    """Gamma-correct every colour channel: ``round((c / max)^gamma * max)``."""
    check_u8(input)
    check_non_neg(gamma, "gamma")
    check_positive(max, "max")

    lut = generate_lookup_table(
        lambda i: min(round((i / max) ** gamma * max), 255), dtype=U8_DTYPE
    )
    return _apply_lut(input, lut)


def histogram_equalization(input: Image, alpha: float, ref_white: White = White.D65,
                           precision: Optional[float] = None) -> Image:
    """
    Equalize the L* histogram of an 8-bit sRGB image.

    Each L* value is replaced by ``alpha * percentile(L*) * 100 + (1 - alpha) * L*``,
    where the percentile is the fraction of pixels whose L*, quantised to
    ``round(L* * precision)``, is at most its own.

    Args:
        input: 8-bit image with 3 colour channels
        alpha: Amount of equalization in ``[0, 1]``; 0 is the identity
        ref_white: Reference white of the CIELAB conversion
        precision: L* quantisation; defaults to ``ProcessingConfig.histogram_precision``
    """
    check_u8(input)
    check_in_range(alpha, 0.0, 1.0, "alpha")
    if precision is None:
        precision = get_processing_config().histogram_precision
    check_positive(precision, "precision")

    lab = srgb_to_lab(input, ref_white)
    percentiles = generate_histogram_percentiles(lab, precision)
    bins = np.fromiter(percentiles.keys(), dtype=np.int64, count=len(percentiles))
    values = np.fromiter(percentiles.values(), dtype=np.float64, count=len(percentiles))
    logger.debug(f"Histogram equalization over {len(bins)} L* bins")

    def equalize(lightness):
        keys = np.rint(lightness * precision).astype(np.int64)
        return alpha * values[np.searchsorted(bins, keys)] * 100.0 + (1.0 - alpha) * lightness

    lab.edit_channel(equalize, 0, vectorized=True)
    return lab_to_srgb(lab, ref_white)
