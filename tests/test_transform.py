"""Tests for geometric transforms."""
import numpy as np
import pytest

from imgproc.constants import Refl, Scale
from imgproc.core.config import GlobalConfig, ProcessingConfig, set_current_config
from imgproc.core.exceptions import InvalidArgError
from imgproc.core.image import Image
from imgproc.processing import transform


def _grid(width: int, height: int, channels: int = 1, dtype=np.uint8) -> Image:
    return Image.from_slice(width, height, channels, False,
                            np.arange(width * height * channels), dtype=dtype)


class TestCrop:

    def test_values(self):
        output = transform.crop(_grid(4, 3), 1, 1, 2, 2)
        assert output.wh() == (2, 2)
        assert output.data().tolist() == [5, 6, 9, 10]

    def test_rectangle_touching_border(self):
        output = transform.crop(_grid(4, 3), 2, 0, 2, 3)
        assert output.data().tolist() == [2, 3, 6, 7, 10, 11]

    def test_out_of_bounds(self):
        with pytest.raises(InvalidArgError):
            transform.crop(_grid(4, 3), 3, 0, 2, 1)
        with pytest.raises(InvalidArgError):
            transform.crop(_grid(4, 3), 0, 2, 1, 2)


class TestCompositing:

    def test_overlay_is_clipped(self):
        back = Image.from_slice(4, 4, 1, False, [0] * 16, dtype=np.uint8)
        front = Image.from_slice(2, 2, 1, False, [9] * 4, dtype=np.uint8)
        output = transform.overlay(back, front, 3, 3).as_array()[:, :, 0]
        assert output[3, 3] == 9
        assert output.sum() == 9

    def test_overlay_channel_mismatch(self, rgb_u8):
        front = Image.from_slice(1, 1, 1, False, [0], dtype=np.uint8)
        with pytest.raises(InvalidArgError):
            transform.overlay(rgb_u8, front, 0, 0)

    def test_superimpose(self):
        back = Image.from_slice(2, 2, 1, False, [10.0] * 4)
        front = Image.from_slice(1, 1, 1, False, [20.0])
        output = transform.superimpose(back, front, 1, 1, 0.25)
        assert output.data().tolist() == [10.0, 10.0, 10.0, 17.5]

    def test_superimpose_alpha_range(self):
        back = Image.from_slice(1, 1, 1, False, [1.0])
        with pytest.raises(InvalidArgError):
            transform.superimpose(back, back, 0, 0, 1.5)


class TestTranslateReflect:

    def test_translate(self):
        image = Image.from_slice(3, 1, 1, False, [1, 2, 3], dtype=np.uint8)
        assert transform.translate(image, 1, 0).data().tolist() == [0, 1, 2]
        assert transform.translate(image, -1, 0).data().tolist() == [2, 3, 0]
        assert transform.translate(image, 5, 0).data().tolist() == [0, 0, 0]

    def test_translate_vertical(self):
        output = transform.translate(_grid(2, 3), 0, 1)
        assert output.data().tolist() == [0, 0, 0, 1, 2, 3]

    def test_reflect(self):
        image = _grid(2, 2)
        assert transform.reflect(image, Refl.HORIZONTAL).data().tolist() == [2, 3, 0, 1]
        assert transform.reflect(image, Refl.VERTICAL).data().tolist() == [1, 0, 3, 2]


class TestScale:

    def test_output_size(self):
        image = _grid(10, 4, dtype=np.float64)
        output = transform.scale(image, 0.5, 1.5, Scale.BILINEAR)
        assert output.wh() == (5, 6)

    def test_nearest_neighbor(self):
        image = Image.from_slice(2, 1, 1, False, [1.0, 2.0])
        output = transform.scale(image, 2.0, 1.0, Scale.NEAREST_NEIGHBOR)
        assert output.data().tolist() == [1.0, 1.0, 2.0, 2.0]

    @pytest.mark.parametrize("method", [Scale.NEAREST_NEIGHBOR, Scale.BILINEAR, Scale.LANCZOS])
    def test_unit_factor_is_identity(self, gray_float, method):
        output = transform.scale(gray_float, 1.0, 1.0, method)
        assert np.allclose(output.data(), gray_float.data())

    @pytest.mark.parametrize("method", list(Scale))
    def test_constant_image_stays_constant(self, method):
        image = Image.from_slice(5, 4, 3, False, [42.0] * 60)
        output = transform.scale(image, 1.7, 0.6, method)
        assert np.allclose(output.data(), 42.0)

    def test_bilinear_midpoint(self):
        image = Image.from_slice(2, 1, 1, False, [0.0, 10.0])
        output = transform.scale(image, 2.0, 1.0, Scale.BILINEAR)
        assert output.data().tolist() == pytest.approx([0.0, 5.0, 10.0, 10.0])

    def test_scale_lanczos_size(self, gray_float):
        set_current_config(GlobalConfig(processing=ProcessingConfig(lanczos_size=2)))
        configured = transform.scale(gray_float, 1.3, 1.3, Scale.LANCZOS)
        explicit = transform.scale_lanczos(gray_float, 1.3, 1.3, size=2)
        assert configured == explicit

    def test_validation(self, gray_float, rgb_u8):
        with pytest.raises(InvalidArgError):
            transform.scale(gray_float, 0.0, 1.0, Scale.BILINEAR)
        with pytest.raises(InvalidArgError):
            transform.scale(rgb_u8, 2.0, 2.0, Scale.BILINEAR)


class TestShearRotate:

    def test_shear_zero_is_identity(self, rgb_u8):
        assert transform.shear(rgb_u8, 0.0, 0.0) == rgb_u8

    def test_shear_output_size(self):
        output = transform.shear(_grid(4, 2), 0.5, 0.0)
        assert output.wh() == (5, 2)
        output = transform.shear(_grid(4, 2), 0.0, -0.5)
        assert output.wh() == (4, 4)

    def test_shear_first_row(self):
        output = transform.shear(_grid(4, 2), 0.5, 0.0)
        assert output.as_array()[0, :, 0].tolist() == [0, 0, 1, 2, 3]

    def test_singular_shear(self, rgb_u8):
        with pytest.raises(InvalidArgError):
            transform.shear(rgb_u8, 2.0, 0.5)

    def test_rotate_zero_is_identity(self, rgb_u8):
        assert transform.rotate(rgb_u8, 0.0) == rgb_u8

    def test_rotate_quarter_turn(self):
        image = _grid(4, 3, channels=2)
        output = transform.rotate(image, 90.0)
        assert output.wh() == (3, 4)
        assert np.array_equal(output.as_array(), np.rot90(image.as_array()))

    def test_rotate_half_turn(self, rgb_u8):
        output = transform.rotate(rgb_u8, 180.0)
        assert np.array_equal(output.as_array(), rgb_u8.as_array()[::-1, ::-1])

    def test_rotate_bounding_box(self):
        output = transform.rotate(_grid(10, 10), 45.0)
        assert output.wh() == (14, 14)
