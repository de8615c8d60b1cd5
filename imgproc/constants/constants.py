"""
Consolidated constants for imgproc.

This module defines the operator enumerations, the colour-space constants and
the preset convolution kernels. All numeric constants are bit-exact copies of
the reference values; kernels are flat row-major tuples.
"""

from enum import Enum
from typing import Dict, Tuple

import numpy as np


class Tone(Enum):
    """Channel space a tone operation is carried out in."""
    RGB = "rgb"
    LAB = "lab"


class White(Enum):
    """Reference white used to normalise CIE XYZ tristimulus values."""
    D50 = "d50"
    D65 = "d65"


class Thresh(Enum):
    BINARY = "binary"            # > threshold -> max, else 0
    BINARY_INV = "binary_inv"    # > threshold -> 0, else max
    TRUNC = "trunc"              # > threshold -> threshold, else unchanged
    TO_ZERO = "to_zero"          # > threshold -> unchanged, else 0
    TO_ZERO_INV = "to_zero_inv"  # > threshold -> 0, else unchanged


class Scale(Enum):
    """Interpolation used when scaling."""
    NEAREST_NEIGHBOR = "nearest_neighbor"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS = "lanczos"


class Refl(Enum):
    """Reflection axis."""
    HORIZONTAL = "horizontal"  # flips rows
    VERTICAL = "vertical"      # flips columns


class Bilateral(Enum):
    """Bilateral filter algorithm."""
    DIRECT = "direct"
    GRID = "grid"
    LOCAL_HISTOGRAM = "local_histogram"


class FileFormat(Enum):
    PNG = [".png"]
    JPEG = [".jpg", ".jpeg"]
    TIFF = [".tif", ".tiff"]


# Element types
U8_DTYPE = np.uint8
FLOAT_DTYPE = np.float64

MIN_CHANNELS = 1
MAX_CHANNELS = 4

# Colour-space constants
GAMMA = 2.2
SRGB_LIN_BREAK = 0.0031308
SRGB_BREAK = 10.0
SRGB_LIN_SCALE = 3294.6
SRGB_GAMMA_SCALE = 269.025
SRGB_GAMMA_OFFSET = 14.025

SRGB_TO_XYZ_MAT: Tuple[float, ...] = (
    0.4124564, 0.3575761, 0.1804375,
    0.2126729, 0.7151522, 0.0721750,
    0.0193339, 0.1191920, 0.9503041,
)

XYZ_TO_SRGB_MAT: Tuple[float, ...] = (
    3.2404542, -1.5371385, -0.4985314,
    -0.9692660, 1.8760108, 0.0415560,
    0.0556434, -0.2040259, 1.0572252,
)

REFERENCE_WHITES: Dict[White, Tuple[float, float, float]] = {
    White.D50: (96.4212, 100.0, 82.5188),
    White.D65: (95.0489, 100.0, 108.8840),
}

LAB_DELTA = 6.0 / 29.0

# Kernels
K_SHARPEN: Tuple[float, ...] = (
    0.0, -1.0, 0.0,
    -1.0, 5.0, -1.0,
    0.0, -1.0, 0.0,
)

K_UNSHARP_MASKING: Tuple[float, ...] = (
    -1.0 / 256.0, -4.0 / 256.0, -6.0 / 256.0, -4.0 / 256.0, -1.0 / 256.0,
    -4.0 / 256.0, -16.0 / 256.0, -24.0 / 256.0, -16.0 / 256.0, -4.0 / 256.0,
    -6.0 / 256.0, -24.0 / 256.0, 476.0 / 256.0, -24.0 / 256.0, -6.0 / 256.0,
    -4.0 / 256.0, -16.0 / 256.0, -24.0 / 256.0, -16.0 / 256.0, -4.0 / 256.0,
    -1.0 / 256.0, -4.0 / 256.0, -6.0 / 256.0, -4.0 / 256.0, -1.0 / 256.0,
)

K_GAUSSIAN_BLUR_1D_3: Tuple[float, ...] = (1.0 / 4.0, 2.0 / 4.0, 1.0 / 4.0)

K_GAUSSIAN_BLUR_2D_3: Tuple[float, ...] = (
    1.0 / 16.0, 2.0 / 16.0, 1.0 / 16.0,
    2.0 / 16.0, 4.0 / 16.0, 2.0 / 16.0,
    1.0 / 16.0, 2.0 / 16.0, 1.0 / 16.0,
)

K_SOBEL_1D_VERT: Tuple[float, ...] = (1.0, 2.0, 1.0)
K_SOBEL_1D_HORZ: Tuple[float, ...] = (-1.0, 0.0, 1.0)

K_PREWITT_1D_VERT: Tuple[float, ...] = (1.0, 1.0, 1.0)
K_PREWITT_1D_HORZ: Tuple[float, ...] = (-1.0, 0.0, 1.0)

# Positive-centre convention: responses are negative on bright peaks
K_LAPLACIAN: Tuple[float, ...] = (
    0.0, 1.0, 0.0,
    1.0, -4.0, 1.0,
    0.0, 1.0, 0.0,
)

# Median / histogram constants
HISTOGRAM_BINS = 256

# Default values
DEFAULT_LANCZOS_SIZE = 3
DEFAULT_NUM_WORKERS = 1
DEFAULT_SEPARABILITY_TOLERANCE = 1e-6
DEFAULT_HISTOGRAM_PRECISION = 1.0
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
