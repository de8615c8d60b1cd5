"""Tests for the per-pixel helpers."""
import numpy as np

from imgproc.core import pixel


class TestPixelHelpers:

    def setup_method(self):
        self.rgba = np.array([10, 20, 30, 200], dtype=np.uint8)

    def test_alpha_and_channels(self):
        assert pixel.alpha(self.rgba) == 200
        assert list(pixel.channels_without_alpha(self.rgba)) == [10, 20, 30]

    def test_map_all(self):
        assert list(pixel.map_all(self.rgba, lambda c: int(c) // 10)) == [1, 2, 3, 20]

    def test_map_alpha_leaves_alpha_to_g(self):
        out = pixel.map_alpha(self.rgba, lambda c: int(c) + 1, lambda a: int(a))
        assert list(out) == [11, 21, 31, 200]

    def test_apply_in_place(self):
        pixel.apply(self.rgba, lambda c: c // 2)
        assert list(self.rgba) == [5, 10, 15, 100]

    def test_apply_alpha_in_place(self):
        pixel.apply_alpha(self.rgba, lambda c: 0, lambda a: 255)
        assert list(self.rgba) == [0, 0, 0, 255]

    def test_is_black(self):
        assert pixel.is_black(np.zeros(3))
        assert not pixel.is_black(self.rgba)
        assert pixel.is_black_alpha(np.array([0, 0, 0, 255]))
