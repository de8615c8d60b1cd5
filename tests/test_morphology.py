"""Tests for binary morphology."""
import numpy as np
import pytest

from imgproc.core.exceptions import InvalidArgError
from imgproc.core.image import Image
from imgproc.processing import morphology


def _binary(rows) -> Image:
    return Image.from_array(np.array(rows, dtype=np.uint8) * 255)


class TestMorphology:

    def setup_method(self):
        self.square = _binary([[0, 0, 0, 0, 0, 0],
                               [0, 1, 1, 1, 0, 0],
                               [0, 1, 1, 1, 0, 0],
                               [0, 1, 1, 1, 0, 0],
                               [0, 0, 0, 0, 0, 0]])

    def test_erode(self):
        output = morphology.erode(self.square, 1).as_array()[:, :, 0] // 255
        expected = np.zeros((5, 6), dtype=np.uint8)
        expected[2, 2] = 1
        assert np.array_equal(output, expected)

    def test_dilate(self):
        output = morphology.dilate(self.square, 1).as_array()[:, :, 0] // 255
        expected = np.zeros((5, 6), dtype=np.uint8)
        expected[0:5, 0:5] = 1
        assert np.array_equal(output, expected)

    def test_radius_zero_is_identity(self):
        assert morphology.erode(self.square, 0) == self.square
        assert morphology.dilate(self.square, 0) == self.square

    def test_majority(self):
        image = _binary([[1, 1, 0],
                         [1, 0, 0],
                         [0, 0, 0]])
        output = morphology.majority(image, 1).as_array()[:, :, 0] // 255
        # (0, 0) sees eight white samples with clamp-to-edge padding
        assert output.tolist() == [[1, 1, 0],
                                   [1, 0, 0],
                                   [0, 0, 0]]

    def test_open_removes_speck(self):
        image = _binary([[0, 0, 0, 0, 0],
                         [0, 0, 0, 0, 0],
                         [0, 0, 1, 0, 0],
                         [0, 0, 0, 0, 0],
                         [0, 0, 0, 0, 0]])
        assert not np.any(morphology.open(image, 1).data())

    def test_close_fills_hole(self):
        image = _binary([[1, 1, 1, 1, 1],
                         [1, 1, 1, 1, 1],
                         [1, 1, 0, 1, 1],
                         [1, 1, 1, 1, 1],
                         [1, 1, 1, 1, 1]])
        assert np.all(morphology.close(image, 1).data() == 255)

    def test_gradient_is_dilate_minus_erode(self, binary_u8):
        dilated = morphology.dilate(binary_u8, 1).data().astype(int)
        eroded = morphology.erode(binary_u8, 1).data().astype(int)
        assert np.array_equal(morphology.gradient(binary_u8, 1).data().astype(int), dilated - eroded)

    @pytest.mark.parametrize("radius", [0, 1, 2, 3])
    def test_duality(self, binary_u8, radius):
        inverted = morphology.invert_binary(binary_u8)
        left = morphology.dilate(inverted, radius)
        right = morphology.invert_binary(morphology.erode(binary_u8, radius))
        assert left == right

    def test_invert(self):
        assert morphology.invert_binary(self.square).data().tolist() == \
            (255 - self.square.data().astype(int)).tolist()

    def test_validation(self, rgb_u8, gray_float):
        with pytest.raises(InvalidArgError):
            morphology.erode(rgb_u8, 1)
        with pytest.raises(InvalidArgError):
            morphology.erode(gray_float, 1)
        with pytest.raises(InvalidArgError):
            morphology.dilate(_binary([[1, 0]]).map_channels(lambda c: c // 2, vectorized=True), 1)
        with pytest.raises(InvalidArgError):
            morphology.erode(self.square, -1)
