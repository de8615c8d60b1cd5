"""Shared fixtures for the imgproc test suite."""
import numpy as np
import pytest

from imgproc.core.config import set_current_config
from imgproc.core.image import Image


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from the default configuration."""
    set_current_config(None)
    yield
    set_current_config(None)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def rgb_u8(rng):
    """A 13x9 random 8-bit RGB image."""
    return Image.from_array(rng.integers(0, 256, size=(9, 13, 3), dtype=np.uint8))


@pytest.fixture
def rgba_u8(rng):
    return Image.from_array(rng.integers(0, 256, size=(7, 6, 4), dtype=np.uint8), alpha=True)


@pytest.fixture
def gray_float(rng):
    """A 11x8 random single-channel float image in [0, 255]."""
    return Image.from_array(rng.uniform(0.0, 255.0, size=(8, 11)))


@pytest.fixture
def binary_u8(rng):
    """A 15x12 random binary image (0 / 255)."""
    mask = rng.random((12, 15)) > 0.5
    return Image.from_array(np.where(mask, 255, 0).astype(np.uint8))
