"""Tests for the Image / ImageInfo / SubImage substrate."""
import numpy as np
import pytest

from imgproc.core.exceptions import InvalidArgError
from imgproc.core.image import Image, ImageInfo, SubImage

NEIGHBORHOOD_DATA = [1, 2, 3, 4, 2, 3, 4, 5, 3, 4, 5, 6,
                     6, 5, 4, 3, 5, 4, 3, 2, 4, 3, 2, 1,
                     2, 4, 6, 8, 3, 5, 7, 9, 1, 3, 5, 7]


class TestImageInfo:

    def test_sizes(self):
        info = ImageInfo(4, 3, 4, True)
        assert info.wh() == (4, 3)
        assert info.whc() == (4, 3, 4)
        assert info.whca() == (4, 3, 4, True)
        assert info.channels_non_alpha == 3
        assert info.size == 12
        assert info.full_size == 48

    def test_rejects_invalid_dimensions(self):
        with pytest.raises(InvalidArgError):
            ImageInfo(0, 3, 1)
        with pytest.raises(InvalidArgError):
            ImageInfo(3, 3, 5)
        with pytest.raises(InvalidArgError):
            ImageInfo(3, 3, 1, True)

    def test_with_channels_drops_alpha_for_single_channel(self):
        info = ImageInfo(2, 2, 4, True)
        assert info.with_channels(1) == ImageInfo(2, 2, 1, False)
        assert info.with_channels(2) == ImageInfo(2, 2, 2, True)

    def test_str(self):
        assert str(ImageInfo(2, 3, 1)) == "width: 2\nheight: 3\nchannels: 1\nalpha: False"


class TestConstruction:

    def test_buffer_length_must_match(self):
        with pytest.raises(ValueError):
            Image.from_slice(2, 2, 3, False, [0] * 11)

    def test_from_slice_copies(self):
        source = np.arange(12, dtype=np.uint8)
        image = Image.from_slice(2, 2, 3, False, source)
        source[0] = 99
        assert image.data()[0] == 0

    def test_from_vec_of_vec(self):
        image = Image.from_vec_of_vec(2, 1, 3, False, [[1, 2, 3], [4, 5, 6]], dtype=np.uint8)
        assert list(image.data()) == [1, 2, 3, 4, 5, 6]
        assert image.dtype == np.uint8

    def test_from_vec_of_vec_rejects_pixel_length(self):
        with pytest.raises(ValueError):
            Image.from_vec_of_vec(2, 1, 3, False, [[1, 2, 3], [4, 5]])

    def test_from_vec_of_slice_borrows_pixels(self):
        source = Image.from_slice(2, 1, 2, False, [1, 2, 3, 4], dtype=np.uint8)
        pixels = [source.get_pixel(1, 0), source.get_pixel(0, 0)]
        image = Image.from_vec_of_slice(2, 1, 2, False, pixels)
        assert list(image.data()) == [3, 4, 1, 2]

    def test_from_array(self):
        image = Image.from_array(np.zeros((3, 5), dtype=np.uint8))
        assert image.whca() == (5, 3, 1, False)

    def test_blank(self):
        image = Image.blank(ImageInfo(3, 2, 2))
        assert image.dtype == np.float64
        assert not np.any(image.data())


class TestPixelAccess:

    def setup_method(self):
        self.image = Image.from_slice(3, 3, 4, False, NEIGHBORHOOD_DATA, dtype=np.uint8)

    def test_get_pixel(self):
        assert list(self.image.get_pixel(1, 1)) == [5, 4, 3, 2]
        assert list(self.image.get_pixel(2, 2)) == [1, 3, 5, 7]

    def test_get_pixel_out_of_bounds(self):
        with pytest.raises(IndexError):
            self.image.get_pixel(3, 0)
        with pytest.raises(IndexError):
            self.image.get_pixel(0, -1)

    def test_get_pixel_is_read_only(self):
        with pytest.raises(ValueError):
            self.image.get_pixel(0, 0)[0] = 7

    def test_get_pixel_mut_writes_through(self):
        self.image.get_pixel_mut(0, 0)[0] = 42
        assert self.image.get_pixel(0, 0)[0] == 42

    def test_get_pixel_clamped(self):
        assert list(self.image.get_pixel_clamped(-4, 10)) == [2, 4, 6, 8]

    def test_set_pixel(self):
        self.image.set_pixel(2, 0, [9, 9, 9, 9])
        assert list(self.image.get_pixel(2, 0)) == [9, 9, 9, 9]

    def test_set_pixel_wrong_length(self):
        with pytest.raises(ValueError):
            self.image.set_pixel(0, 0, [1, 2, 3])

    def test_set_pixel_indexed_and_getitem(self):
        self.image.set_pixel_indexed(4, [0, 0, 0, 0])
        assert list(self.image[4]) == [0, 0, 0, 0]
        with pytest.raises(IndexError):
            self.image[9]

    def test_iteration_order(self):
        coords = [(x, y) for x, y, _ in self.image]
        assert coords[:4] == [(0, 0), (1, 0), (2, 0), (0, 1)]
        assert len(coords) == 9


class TestNeighborhoods:

    def setup_method(self):
        self.image = Image.from_slice(3, 3, 4, False, NEIGHBORHOOD_DATA, dtype=np.uint8)

    def test_neighborhood_1d_horizontal(self):
        hood = self.image.get_neighborhood_1d(1, 2, 3, False)
        assert [list(p) for p in hood] == [[2, 4, 6, 8], [3, 5, 7, 9], [1, 3, 5, 7]]
        assert hood.info.wh() == (3, 1)

    def test_neighborhood_1d_vertical_clamps_to_centre(self):
        hood = self.image.get_neighborhood_1d(0, 0, 3, True)
        assert [list(p) for p in hood] == [[1, 2, 3, 4], [1, 2, 3, 4], [6, 5, 4, 3]]

    def test_neighborhood_requires_odd_size(self):
        with pytest.raises(InvalidArgError):
            self.image.get_neighborhood_1d(1, 1, 2, False)

    def test_neighborhood_2d_interior(self):
        hood = self.image.get_neighborhood_2d(1, 1, 3)
        assert hood.to_vec().tolist() == NEIGHBORHOOD_DATA

    def test_neighborhood_2d_edge_repeats_centre(self):
        hood = self.image.get_neighborhood_2d(0, 0, 3)
        centre = [1, 2, 3, 4]
        expected = [centre, centre, [2, 3, 4, 5],
                    centre, centre, [2, 3, 4, 5],
                    [6, 5, 4, 3], [6, 5, 4, 3], [5, 4, 3, 2]]
        assert [list(p) for p in hood] == expected

    def test_index_maps_match_extractors(self):
        indices_2d = self.image.neighborhood_2d_indices(3)
        indices_1d = self.image.neighborhood_1d_indices(3, True)
        pixels = self.image.as_pixels()
        for i in range(9):
            x, y = i % 3, i // 3
            hood_2d = self.image.get_neighborhood_2d(x, y, 3)
            hood_1d = self.image.get_neighborhood_1d(x, y, 3, True)
            assert np.array_equal(pixels[indices_2d[i]], np.stack(hood_2d.data()))
            assert np.array_equal(pixels[indices_1d[i]], np.stack(hood_1d.data()))

    def test_subimage(self):
        sub = self.image.get_subimage(1, 1, 2, 2)
        assert list(sub.get_pixel(1, 1)) == [1, 3, 5, 7]
        assert len(sub) == 4
        with pytest.raises(IndexError):
            self.image.get_subimage(2, 2, 2, 1)

    def test_subimage_pixel_count(self):
        with pytest.raises(ValueError):
            SubImage(ImageInfo(2, 2, 1), [np.zeros(1)] * 3)


class TestTraversal:

    def setup_method(self):
        self.rgba = Image.from_slice(2, 2, 4, True,
                                     [1, 2, 3, 4, 2, 3, 4, 5, 6, 5, 4, 3, 5, 4, 3, 2],
                                     dtype=np.uint8)
        self.expected = [6, 7, 8, 4, 7, 8, 9, 5, 11, 10, 9, 3, 10, 9, 8, 2]

    def test_map_channels_if_alpha(self):
        output = self.rgba.map_channels_if_alpha(lambda c: c + 5, lambda a: a)
        assert output.data().tolist() == self.expected

    def test_map_channels_if_alpha_vectorized(self):
        output = self.rgba.map_channels_if_alpha(lambda c: c + 5, lambda a: a, vectorized=True)
        assert output.data().tolist() == self.expected
        assert output.dtype == np.uint8

    def test_apply_channels_if_alpha(self):
        self.rgba.apply_channels_if_alpha(lambda c: c + 5, lambda a: a)
        assert self.rgba.data().tolist() == self.expected

    def test_map_channels(self):
        output = self.rgba.map_channels(lambda c: c * 2, vectorized=True)
        assert output.data().tolist() == [2 * v for v in [1, 2, 3, 4, 2, 3, 4, 5, 6, 5, 4, 3, 5, 4, 3, 2]]

    def test_map_pixels_changes_channel_count(self):
        output = self.rgba.map_pixels(lambda p: [int(p[:3].sum())])
        assert output.info.whca() == (2, 2, 1, False)
        assert output.data().tolist() == [6, 9, 15, 12]

    def test_map_pixels_rejects_inconsistent_channels(self):
        calls = iter([[1], [1, 2], [1], [1]])
        with pytest.raises(ValueError):
            self.rgba.map_pixels(lambda p: next(calls))

    def test_map_pixels_if_alpha(self):
        output = self.rgba.map_pixels_if_alpha(lambda p: [p.max()], lambda a: 255 - a)
        assert output.info.whca() == (2, 2, 2, True)
        assert output.data().tolist() == [3, 251, 4, 250, 6, 252, 5, 253]

    def test_apply_pixels_must_keep_layout(self):
        with pytest.raises(ValueError):
            self.rgba.apply_pixels(lambda p: p[:2])

    def test_edit_channel(self):
        self.rgba.edit_channel(lambda c: 0, 1)
        assert self.rgba.data().tolist()[1::4] == [0, 0, 0, 0]
        with pytest.raises(IndexError):
            self.rgba.edit_channel(lambda c: c, 4)

    def test_to_u8_rounds_and_saturates(self):
        image = Image.from_slice(4, 1, 1, False, [-3.0, 1.4, 1.6, 300.0])
        assert image.to_u8().data().tolist() == [0, 1, 2, 255]

    def test_equality(self):
        assert self.rgba == self.rgba.copy()
        assert self.rgba != self.rgba.to_float().map_channels(lambda c: c + 1, vectorized=True)
