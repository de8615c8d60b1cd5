"""
imgproc: a 2D raster image-processing library.

This module provides the public API for imgproc. It re-exports the image
types, the enumerations and the processing modules; operators are reached
through their module (``imgproc.median.median_filter`` etc.).
"""

import logging

__version__ = "0.3.0"


# Set up basic logging configuration if none exists
# This ensures INFO level logging works when used outside the CLI
def _ensure_basic_logging():
    """Ensure basic logging is configured if no configuration exists."""
    root_logger = logging.getLogger()

    # Only configure if no handlers exist and level is too high
    if not root_logger.handlers and root_logger.level > logging.INFO:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )


_ensure_basic_logging()

from imgproc.constants import Bilateral, Refl, Scale, Thresh, Tone, White
from imgproc.core.exceptions import ImgProcError, InvalidArgError, NumericError
from imgproc.core import pixel
from imgproc.core.image import Image, ImageInfo, SubImage
from imgproc.processing import (
    bilateral,
    colorspace,
    convert,
    edge,
    filters,
    kernels,
    math,
    median,
    morphology,
    sat,
    tone,
    transform,
)
from imgproc import io

__all__ = [
    # Core types
    "Image",
    "ImageInfo",
    "SubImage",
    "pixel",

    # Errors
    "ImgProcError",
    "InvalidArgError",
    "NumericError",

    # Enumerations
    "Bilateral",
    "Refl",
    "Scale",
    "Thresh",
    "Tone",
    "White",

    # Operator modules
    "bilateral",
    "colorspace",
    "convert",
    "edge",
    "filters",
    "kernels",
    "math",
    "median",
    "morphology",
    "sat",
    "tone",
    "transform",

    # File I/O
    "io",
]
