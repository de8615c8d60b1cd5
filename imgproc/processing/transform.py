"""
Geometric transforms: cropping, compositing, translation, reflection,
scaling, shearing and rotation.

Resampling transforms compute, for every output pixel, the source location it
comes from (inverse mapping) and sample the source there. Pixels whose source
falls outside the input are left at zero.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from imgproc.constants import Refl, Scale
from imgproc.core.config import get_processing_config
from imgproc.core.exceptions import InvalidArgError
from imgproc.core.image import Image, ImageInfo
from imgproc.core.validation import (
    check_equal,
    check_float,
    check_in_range,
    check_non_neg,
    check_positive,
)
from imgproc.processing.math import cubic_weighting, lanczos_kernel, max_4, min_4, vector_mul

logger = logging.getLogger(__name__)


def _from_array(array: np.ndarray, info: ImageInfo) -> Image:
    height, width = array.shape[:2]
    return Image(ImageInfo(width, height, info.channels, info.alpha),
                 np.ascontiguousarray(array).reshape(-1))


def crop(input: Image, x: int, y: int, width: int, height: int) -> Image:
    """
    Copy the ``width x height`` rectangle whose upper left corner is ``(x, y)``.

    Raises:
        InvalidArgError: If the rectangle does not fit inside ``input``
    """
    check_non_neg(x, "x")
    check_non_neg(y, "y")
    check_positive(width, "width")
    check_positive(height, "height")
    w_in, h_in = input.wh()
    if x + width > w_in:
        raise InvalidArgError(f"x + width must be at most the input width {w_in}, got {x + width}")
    if y + height > h_in:
        raise InvalidArgError(f"y + height must be at most the input height {h_in}, got {y + height}")

    return _from_array(input.as_array()[y:y + height, x:x + width], input.info)


def _placement(back: Image, front: Image, x: int, y: int) -> Tuple[int, int]:
    check_equal(back.info.channels, front.info.channels, "image channels")
    check_non_neg(x, "x")
    check_non_neg(y, "y")
    w_back, h_back = back.wh()
    w_front, h_front = front.wh()
    return max(min(w_front, w_back - x), 0), max(min(h_front, h_back - y), 0)


def overlay(back: Image, front: Image, x: int, y: int) -> Image:
    """Place ``front`` onto ``back`` with its upper left corner at ``(x, y)``, clipped to ``back``."""
    width, height = _placement(back, front, x, y)
    output = back.copy()
    output.as_array()[y:y + height, x:x + width] = front.as_array()[:height, :width]
    return output


def superimpose(back: Image, front: Image, x: int, y: int, alpha: float) -> Image:
    """
    Blend ``front`` onto ``back`` at ``(x, y)`` as ``alpha * back + (1 - alpha) * front``.

    Both images must be floating; pixels of ``back`` outside the placed
    rectangle are unchanged.
    """
    check_float(back, "back")
    check_float(front, "front")
    check_in_range(alpha, 0.0, 1.0, "alpha")
    width, height = _placement(back, front, x, y)

    output = back.copy()
    region = output.as_array()[y:y + height, x:x + width]
    region[...] = alpha * region + (1.0 - alpha) * front.as_array()[:height, :width]
    return output


def translate(input: Image, x: int, y: int) -> Image:
    """Move the image content by ``(x, y)`` into a zero image of the same size."""
    width, height = input.wh()
    output = Image.blank(input.info, dtype=input.dtype)
    if abs(x) >= width or abs(y) >= height:
        return output

    src = input.as_array()
    dst = output.as_array()
    dst[max(y, 0):height + min(y, 0), max(x, 0):width + min(x, 0)] = \
        src[max(-y, 0):height - max(y, 0), max(-x, 0):width - max(x, 0)]
    return output


def reflect(input: Image, axis: Refl) -> Image:
    """Flip the rows (``Refl.HORIZONTAL``) or the columns (``Refl.VERTICAL``)."""
    array = input.as_array()
    if axis == Refl.HORIZONTAL:
        return _from_array(array[::-1], input.info)
    if axis == Refl.VERTICAL:
        return _from_array(array[:, ::-1], input.info)
    raise ValueError(f"unknown reflection axis: {axis}")


########################
# Scaling
########################

def _scaled_info(input: Image, x_factor: float, y_factor: float) -> ImageInfo:
    check_positive(x_factor, "x_factor")
    check_positive(y_factor, "y_factor")
    width, height, channels, alpha = input.whca()
    return ImageInfo(int(round(width * x_factor)), int(round(height * y_factor)), channels, alpha)


def _scale_nearest_neighbor(array, x_out, y_out, x_factor, y_factor):
    height, width = array.shape[:2]
    x_in = np.clip(np.ceil((x_out + 1) / x_factor) - 1, 0, width - 1).astype(np.intp)
    y_in = np.clip(np.ceil((y_out + 1) / y_factor) - 1, 0, height - 1).astype(np.intp)
    return array[y_in[:, np.newaxis], x_in[np.newaxis, :]]


def _scale_bilinear(array, x_out, y_out, x_factor, y_factor):
    height, width = array.shape[:2]
    x_f = x_out / x_factor
    y_f = y_out / y_factor
    x_1 = np.minimum(np.floor(x_f), width - 1)
    y_1 = np.minimum(np.floor(y_f), height - 1)
    x_2 = np.minimum(np.ceil(x_f), width - 1).astype(np.intp)
    y_2 = np.minimum(np.ceil(y_f), height - 1).astype(np.intp)
    x_w = (x_f - x_1)[np.newaxis, :, np.newaxis]
    y_w = (y_f - y_1)[:, np.newaxis, np.newaxis]
    x_1 = x_1.astype(np.intp)
    y_1 = y_1.astype(np.intp)

    top = (1.0 - x_w) * array[y_1][:, x_1] + x_w * array[y_1][:, x_2]
    bottom = (1.0 - x_w) * array[y_2][:, x_1] + x_w * array[y_2][:, x_2]
    return (1.0 - y_w) * top + y_w * bottom


def _resample_separable(array, x_out, y_out, x_factor, y_factor, taps, weight_fn, normalize):
    height, width = array.shape[:2]
    x_f = x_out / x_factor
    y_f = y_out / y_factor
    x_base = np.floor(x_f)
    y_base = np.floor(y_f)
    d_x = x_f - x_base
    d_y = y_f - y_base

    out = np.zeros((y_out.shape[0], x_out.shape[0], array.shape[2]), dtype=np.float64)
    x_total = np.zeros(x_out.shape[0])
    y_total = np.zeros(y_out.shape[0])
    for n in taps:
        y_idx = np.clip(y_base + n, 0, height - 1).astype(np.intp)
        y_weight = weight_fn(n - d_y)
        y_total += y_weight
        rows = array[y_idx] * y_weight[:, np.newaxis, np.newaxis]
        for m in taps:
            x_idx = np.clip(x_base + m, 0, width - 1).astype(np.intp)
            x_weight = weight_fn(m - d_x)
            if n == taps[0]:
                x_total += x_weight
            out += rows[:, x_idx] * x_weight[np.newaxis, :, np.newaxis]

    if normalize:
        out /= y_total[:, np.newaxis, np.newaxis] * x_total[np.newaxis, :, np.newaxis]
    return out


def _scale_bicubic(array, x_out, y_out, x_factor, y_factor):
    return _resample_separable(array, x_out, y_out, x_factor, y_factor,
                               (-1, 0, 1, 2), cubic_weighting, normalize=False)


def _scale_lanczos(array, x_out, y_out, x_factor, y_factor, size):
    taps = tuple(range(1 - size, size + 1))
    return _resample_separable(array, x_out, y_out, x_factor, y_factor,
                               taps, lambda t: lanczos_kernel(t, size), normalize=True)


def scale(input: Image, x_factor: float, y_factor: float, method: Scale) -> Image:
    """
    Resize by ``x_factor`` horizontally and ``y_factor`` vertically.

    The output is ``round(width * x_factor) x round(height * y_factor)``.
    Output pixel ``x`` samples the input at ``x / x_factor`` (nearest neighbor
    uses ``ceil((x + 1) / x_factor) - 1``). Bicubic uses cubic B-spline weights
    on a 4x4 clamped window; Lanczos uses a ``2 * lanczos_size`` window with
    weights normalised to sum to one.

    Raises:
        InvalidArgError: If a factor is not positive, the output would be empty
            or ``input`` is not floating
    """
    check_float(input)
    info = _scaled_info(input, x_factor, y_factor)
    array = input.as_array()
    x_out = np.arange(info.width, dtype=np.float64)
    y_out = np.arange(info.height, dtype=np.float64)
    logger.debug(f"Scaling {input.wh()} -> {info.wh()} with {method.name}")

    if method == Scale.NEAREST_NEIGHBOR:
        out = _scale_nearest_neighbor(array, x_out, y_out, x_factor, y_factor)
    elif method == Scale.BILINEAR:
        out = _scale_bilinear(array, x_out, y_out, x_factor, y_factor)
    elif method == Scale.BICUBIC:
        out = _scale_bicubic(array, x_out, y_out, x_factor, y_factor)
    elif method == Scale.LANCZOS:
        out = _scale_lanczos(array, x_out, y_out, x_factor, y_factor,
                             get_processing_config().lanczos_size)
    else:
        raise ValueError(f"unknown scaling method: {method}")

    return Image(info, out.astype(input.dtype, copy=False).reshape(-1))


def scale_lanczos(input: Image, x_factor: float, y_factor: float, size: Optional[int] = None) -> Image:
    """Lanczos resize with window half-width ``size`` (defaults to ``ProcessingConfig.lanczos_size``)."""
    check_float(input)
    if size is None:
        size = get_processing_config().lanczos_size
    check_positive(size, "size")
    info = _scaled_info(input, x_factor, y_factor)

    out = _scale_lanczos(input.as_array(),
                         np.arange(info.width, dtype=np.float64),
                         np.arange(info.height, dtype=np.float64),
                         x_factor, y_factor, int(size))
    return Image(info, out.astype(input.dtype, copy=False).reshape(-1))


########################
# Shear and rotation
########################

def _sample_nearest(input: Image, info: ImageInfo, x_src: np.ndarray, y_src: np.ndarray) -> Image:
    width, height = input.wh()
    x_idx = np.rint(x_src).astype(np.intp)
    y_idx = np.rint(y_src).astype(np.intp)
    inside = (x_idx >= 0) & (x_idx < width) & (y_idx >= 0) & (y_idx < height)

    array = input.as_array()
    out = np.zeros((info.height, info.width, info.channels), dtype=input.dtype)
    out[inside] = array[y_idx[inside], x_idx[inside]]
    return Image(info, out.reshape(-1))


def shear(input: Image, shear_x: float, shear_y: float) -> Image:
    """
    Shear by ``[[1, -shear_x], [-shear_y, 1]]``.

    The output grows by ``|height * shear_x|`` columns and ``|width * shear_y|``
    rows so the whole sheared image fits.

    Raises:
        InvalidArgError: If ``shear_x * shear_y == 1`` (the transform is singular)
    """
    width, height, channels, alpha = input.whca()
    det = 1.0 - shear_x * shear_y
    if det == 0.0:
        raise InvalidArgError("shear_x * shear_y must not equal 1")

    offset_x = abs(height * shear_x)
    offset_y = abs(width * shear_y)
    info = ImageInfo(width + int(offset_x), height + int(offset_y), channels, alpha)

    y_out, x_out = np.mgrid[0:info.height, 0:info.width].astype(np.float64)
    u = x_out - (offset_x if shear_x > 0 else 0.0)
    v = y_out - (offset_y if shear_y > 0 else 0.0)
    return _sample_nearest(input, info, (u + shear_x * v) / det, (shear_y * u + v) / det)


def rotate(input: Image, degrees: float) -> Image:
    """
    Rotate counterclockwise by ``degrees`` about the image centre.

    The output is sized to the bounding box of the rotated corners; every
    output pixel takes the nearest source pixel, and corners outside the
    source are zero.
    """
    width, height, channels, alpha = input.whca()
    theta = math.radians(degrees)
    sin, cos = math.sin(theta), math.cos(theta)
    mat = (cos, -sin, sin, cos)
    c_x, c_y = width // 2, height // 2

    corners = [vector_mul(mat, (-c_x, c_y)),
               vector_mul(mat, (width - c_x, c_y)),
               vector_mul(mat, (-c_x, c_y - height)),
               vector_mul(mat, (width - c_x, c_y - height))]
    x_max = max_4(*(corner[0] for corner in corners))
    x_min = min_4(*(corner[0] for corner in corners))
    y_max = max_4(*(corner[1] for corner in corners))
    y_min = min_4(*(corner[1] for corner in corners))

    info = ImageInfo(max(int(round(x_max - x_min)), 1), max(int(round(y_max - y_min)), 1),
                     channels, alpha)
    logger.debug(f"Rotating {width}x{height} by {degrees} degrees -> {info.width}x{info.height}")

    # Output pixel centres in the rotated frame
    y_out, x_out = np.mgrid[0:info.height, 0:info.width].astype(np.float64)
    u = x_out + 0.5 + x_min
    v = y_max - (y_out + 0.5)
    # Inverse rotation (transpose of mat) back into centred source coordinates
    x_src = cos * u + sin * v
    y_src = -sin * u + cos * v
    return _sample_nearest(input, info, x_src + c_x - 0.5, c_y - y_src - 0.5)
