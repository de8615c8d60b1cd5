"""
Edge-preserving bilateral filter evaluated in CIELAB.
"""

import logging

import numpy as np

from imgproc.constants import Bilateral, White
from imgproc.constants.constants import FLOAT_DTYPE
from imgproc.core.image import Image
from imgproc.core.validation import check_non_neg, check_rgb, check_u8
from imgproc.processing.colorspace import lab_to_srgb, srgb_to_lab
from imgproc.processing.kernels import generate_spatial_mat
from imgproc.processing.math import gaussian

logger = logging.getLogger(__name__)


def spatial_size(spatial: float) -> int:
    """Side of the spatial window, ``int(4 * sigma + 1)`` bumped to the next odd number."""
    size = int(spatial * 4.0 + 1.0)
    if size % 2 == 0:
        size += 1
    return size


def _bilateral_direct(lab: Image, range: float, spatial: float) -> Image:
    size = spatial_size(spatial)
    spatial_mat = generate_spatial_mat(size, spatial)
    colour_channels = lab.channels_non_alpha()

    pixels = lab.as_pixels()
    colour = pixels[:, :colour_channels]
    weighted = np.zeros(colour.shape, dtype=FLOAT_DTYPE)
    total_weight = np.zeros(colour.shape, dtype=FLOAT_DTYPE)

    for spatial_weight, index in zip(spatial_mat, lab.neighborhood_2d_taps(size)):
        neighbors = colour[index]
        weight = spatial_weight * gaussian(np.abs(colour - neighbors), range)
        weighted += weight * neighbors
        total_weight += weight

    out = pixels.copy()
    out[:, :colour_channels] = weighted / total_weight
    return Image(lab.info, out.reshape(-1))


def bilateral_filter(input: Image, range: float, spatial: float,
                     algorithm: Bilateral = Bilateral.DIRECT) -> Image:
    """
    Smooth an 8-bit sRGB image while keeping edges.

    Each output channel is the average of its clamp-to-edge neighborhood
    weighted by ``spatial(p, q) * gaussian(|p_c - q_c|, range)``, computed in
    CIELAB (D65). Alpha passes through.

    Args:
        input: 8-bit image with 3 colour channels
        range: Standard deviation of the range (intensity) Gaussian
        spatial: Standard deviation of the spatial Gaussian; the window is
            ``spatial_size(spatial)`` pixels wide
        algorithm: Only ``Bilateral.DIRECT`` is implemented

    Raises:
        InvalidArgError: If a sigma is negative or zero, or the input is not 8-bit RGB
        NotImplementedError: For ``Bilateral.GRID`` and ``Bilateral.LOCAL_HISTOGRAM``
    """
    check_non_neg(range, "range")
    check_non_neg(spatial, "spatial")
    check_u8(input)
    check_rgb(input)

    if algorithm != Bilateral.DIRECT:
        raise NotImplementedError(f"bilateral algorithm {algorithm.name} is not implemented")

    logger.debug(f"Bilateral filter: range={range}, spatial={spatial}, "
                 f"window={spatial_size(spatial)}")

    lab = srgb_to_lab(input, White.D65)
    return lab_to_srgb(_bilateral_direct(lab, range, spatial), White.D65)
