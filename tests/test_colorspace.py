"""Tests for colour-space conversions."""
import numpy as np
import pytest

from imgproc.constants import White
from imgproc.core.exceptions import InvalidArgError
from imgproc.core.image import Image
from imgproc.processing import colorspace


def _max_error(a: Image, b: Image) -> int:
    return int(np.abs(a.data().astype(int) - b.data().astype(int)).max())


class TestGrayscale:

    def test_average(self):
        image = Image.from_slice(2, 1, 3, False, [10, 20, 31, 0, 0, 255], dtype=np.uint8)
        output = colorspace.rgb_to_grayscale(image)
        assert output.info.channels == 1
        assert output.data().tolist() == [20, 85]

    def test_idempotent(self, rgb_u8):
        once = colorspace.rgb_to_grayscale(rgb_u8)
        assert colorspace.rgb_to_grayscale(once) == once

    def test_alpha_passes_through(self, rgba_u8):
        output = colorspace.rgb_to_grayscale(rgba_u8)
        assert output.info.whca()[2:] == (2, True)
        assert np.array_equal(output.as_array()[:, :, 1], rgba_u8.as_array()[:, :, 3])

    def test_float_variant(self):
        image = Image.from_slice(1, 1, 3, False, [0.0, 0.5, 1.0])
        assert colorspace.rgb_to_grayscale_f(image).data().tolist() == [0.5]


class TestLinearSrgb:

    def test_endpoints(self):
        image = Image.from_slice(2, 1, 3, False, [0, 0, 0, 255, 255, 255], dtype=np.uint8)
        linear = colorspace.linearize_srgb(image).data()
        assert linear[:3].tolist() == [0.0, 0.0, 0.0]
        assert linear[3:] == pytest.approx([1.0, 1.0, 1.0], abs=1e-3)

    def test_round_trip_is_exact(self):
        values = np.arange(256, dtype=np.uint8)
        image = Image.from_slice(256, 1, 1, False, values)
        assert colorspace.unlinearize_srgb(colorspace.linearize_srgb(image)) == image

    def test_alpha_not_linearized(self):
        image = Image.from_slice(1, 1, 4, True, [128, 128, 128, 77], dtype=np.uint8)
        assert colorspace.linearize_srgb(image).data()[3] == 77.0


class TestRoundTrips:

    def test_srgb_xyz(self, rgb_u8):
        output = colorspace.xyz_to_srgb(colorspace.srgb_to_xyz(rgb_u8))
        assert _max_error(output, rgb_u8) <= 2

    @pytest.mark.parametrize("white", [White.D50, White.D65])
    def test_srgb_lab(self, rgb_u8, white):
        output = colorspace.lab_to_srgb(colorspace.srgb_to_lab(rgb_u8, white), white)
        assert _max_error(output, rgb_u8) <= 2

    def test_xyz_lab(self, rgb_u8):
        xyz = colorspace.srgb_to_xyz(rgb_u8)
        back = colorspace.lab_to_xyz(colorspace.xyz_to_lab(xyz, White.D65), White.D65)
        assert np.allclose(back.data(), xyz.data(), atol=1e-9)

    def test_hsv(self, rgb_u8):
        output = colorspace.hsv_to_rgb(colorspace.rgb_to_hsv(rgb_u8))
        assert _max_error(output, rgb_u8) <= 2

    def test_hsv_keeps_alpha(self, rgba_u8):
        output = colorspace.hsv_to_rgb(colorspace.rgb_to_hsv(rgba_u8))
        assert np.array_equal(output.as_array()[:, :, 3], rgba_u8.as_array()[:, :, 3])


class TestKnownValues:

    def test_lab_of_white_and_black(self):
        image = Image.from_slice(2, 1, 3, False, [255, 255, 255, 0, 0, 0], dtype=np.uint8)
        lab = colorspace.srgb_to_lab(image, White.D65).data()
        assert lab[0] == pytest.approx(100.0, abs=0.5)
        assert lab[1:3] == pytest.approx([0.0, 0.0], abs=0.5)
        assert lab[3:].tolist() == pytest.approx([0.0, 0.0, 0.0], abs=1e-9)

    def test_hsv_primaries(self):
        image = Image.from_slice(3, 1, 3, False,
                                 [255, 0, 0, 0, 255, 0, 0, 0, 255], dtype=np.uint8)
        hsv = colorspace.rgb_to_hsv(image).as_pixels()
        assert hsv[:, 0] == pytest.approx([0.0, 1.0 / 3.0, 2.0 / 3.0])
        assert hsv[:, 1].tolist() == [1.0, 1.0, 1.0]
        assert hsv[:, 2].tolist() == [1.0, 1.0, 1.0]

    def test_hsv_grey(self):
        image = Image.from_slice(1, 1, 3, False, [51, 51, 51], dtype=np.uint8)
        assert colorspace.rgb_to_hsv(image).data().tolist() == pytest.approx([0.0, 0.0, 0.2])

    def test_requires_rgb(self, gray_float):
        with pytest.raises(InvalidArgError):
            colorspace.srgb_lin_to_xyz(gray_float)
        with pytest.raises(InvalidArgError):
            colorspace.rgb_to_hsv(gray_float.to_u8())
