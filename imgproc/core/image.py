"""
Image substrate for imgproc.

An Image owns a flat, dense, row-major interleaved numpy buffer: the pixel at
``(x, y)`` starts at offset ``(y * width + x) * channels``. Pixels are handed
out as numpy views into that buffer, never as owned per-pixel objects.

This module is the only place that knows the storage layout. Every operator
is written against the accessors, the neighborhood extractors and the
traversal primitives below (``map_*`` / ``apply_*`` / ``edit_channel``), or
against the ``as_pixels`` / ``as_array`` views and the neighborhood index maps
when it works on the whole image at once.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from imgproc.constants.constants import FLOAT_DTYPE, MAX_CHANNELS, MIN_CHANNELS, U8_DTYPE
from imgproc.core.exceptions import InvalidArgError
from imgproc.core.validation import check_channels, check_odd, check_xy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageInfo:
    """Dimensions and channel layout of an image."""
    width: int
    height: int
    channels: int
    alpha: bool = False

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise InvalidArgError(
                f"image dimensions must be positive, got {self.width}x{self.height}"
            )
        if not MIN_CHANNELS <= self.channels <= MAX_CHANNELS:
            raise InvalidArgError(
                f"channels must be in range [{MIN_CHANNELS}, {MAX_CHANNELS}], got {self.channels}"
            )
        if self.alpha and self.channels < 2:
            raise InvalidArgError("an image with alpha needs at least 2 channels")

    def wh(self) -> Tuple[int, int]:
        return self.width, self.height

    def whc(self) -> Tuple[int, int, int]:
        return self.width, self.height, self.channels

    def whca(self) -> Tuple[int, int, int, bool]:
        return self.width, self.height, self.channels, self.alpha

    @property
    def channels_non_alpha(self) -> int:
        return self.channels - 1 if self.alpha else self.channels

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def full_size(self) -> int:
        return self.width * self.height * self.channels

    def with_channels(self, channels: int, alpha: Optional[bool] = None) -> "ImageInfo":
        """Return a copy with a different channel count (alpha kept when still possible)."""
        if alpha is None:
            alpha = self.alpha and channels > 1
        return ImageInfo(self.width, self.height, channels, alpha)

    def __str__(self) -> str:
        return (f"width: {self.width}\nheight: {self.height}\n"
                f"channels: {self.channels}\nalpha: {self.alpha}")


class SubImage:
    """
    A non-owning view over a set of pixels of some Image.

    Used to carry neighborhoods and small rectangular patches. The pixel views
    borrow the backing buffer, so a SubImage reflects later writes to it.
    """

    __slots__ = ("_info", "_pixels")

    def __init__(self, info: ImageInfo, pixels: Sequence[np.ndarray]):
        if len(pixels) != info.size:
            raise ValueError(
                f"invalid number of pixels: expected {info.size}, got {len(pixels)}"
            )
        self._info = info
        self._pixels = list(pixels)

    @property
    def info(self) -> ImageInfo:
        return self._info

    def get_pixel(self, x: int, y: int) -> np.ndarray:
        check_xy(x, y, self._info.width, self._info.height)
        return self._pixels[y * self._info.width + x]

    def data(self) -> Tuple[np.ndarray, ...]:
        return tuple(self._pixels)

    def to_vec(self) -> np.ndarray:
        """Copy all channel values into one flat array."""
        return np.concatenate(self._pixels)

    def __getitem__(self, i: int) -> np.ndarray:
        return self._pixels[i]

    def __len__(self) -> int:
        return len(self._pixels)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._pixels)

    def __repr__(self) -> str:
        w, h, c, a = self._info.whca()
        return f"SubImage(width={w}, height={h}, channels={c}, alpha={a})"


def _collect_pixels(results: Iterable, size: int) -> np.ndarray:
    """Stack per-pixel results into a (size, channels) array; channel count must not change."""
    rows = []
    channels = None
    for result in results:
        row = np.atleast_1d(np.asarray(result))
        if channels is None:
            channels = row.shape[0]
        elif row.shape[0] != channels:
            raise ValueError(
                f"pixel function produced {row.shape[0]} channels, expected {channels}"
            )
        rows.append(row)

    if len(rows) != size:
        raise ValueError(f"expected {size} pixels, got {len(rows)}")
    return np.stack(rows)


def _as_column_block(values, size: int) -> np.ndarray:
    block = np.asarray(values)
    if block.ndim == 1:
        block = block.reshape(size, 1)
    if block.ndim != 2 or block.shape[0] != size:
        raise ValueError(f"pixel function must return {size} rows, got shape {block.shape}")
    return block


class Image:
    """
    Owner of a dense interleaved pixel buffer.

    The element type is the numpy dtype of the buffer: ``uint8`` for 8-bit
    images and ``float64`` (or ``float32``) for floating images.
    """

    __slots__ = ("_info", "_data")

    def __init__(self, info: ImageInfo, data):
        buffer = np.asarray(data)
        if buffer.ndim != 1:
            buffer = buffer.reshape(-1)
        if buffer.size != info.full_size:
            raise ValueError(
                f"invalid buffer length: expected {info.full_size}, got {buffer.size}"
            )
        self._info = info
        self._data = buffer

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_slice(cls, width: int, height: int, channels: int, alpha: bool,
                   data: Sequence, dtype=None) -> "Image":
        """Create an image from a flat sequence, copying it."""
        buffer = np.array(data, dtype=dtype, copy=True).reshape(-1)
        return cls(ImageInfo(width, height, channels, alpha), buffer)

    @classmethod
    def from_vec(cls, width: int, height: int, channels: int, alpha: bool,
                 data, dtype=None) -> "Image":
        """Create an image from a flat array, taking it over without a copy when possible."""
        return cls(ImageInfo(width, height, channels, alpha), np.asarray(data, dtype=dtype))

    @classmethod
    def from_vec_of_vec(cls, width: int, height: int, channels: int, alpha: bool,
                        data: Sequence[Sequence], dtype=None) -> "Image":
        """Create an image from one sequence of channel values per pixel."""
        info = ImageInfo(width, height, channels, alpha)
        for pixel in data:
            check_channels(channels, len(pixel))
        if len(data) != info.size:
            raise ValueError(f"invalid number of pixels: expected {info.size}, got {len(data)}")
        buffer = np.concatenate([np.asarray(pixel) for pixel in data])
        if dtype is not None:
            buffer = buffer.astype(dtype)
        return cls(info, buffer)

    @classmethod
    def from_vec_of_slice(cls, width: int, height: int, channels: int, alpha: bool,
                          data: Sequence[np.ndarray], dtype=None) -> "Image":
        """Create an image from a sequence of pixel views (e.g. borrowed from another image)."""
        return cls.from_vec_of_vec(width, height, channels, alpha, data, dtype)

    @classmethod
    def from_array(cls, array: np.ndarray, alpha: bool = False) -> "Image":
        """Create an image from an (H, W) or (H, W, C) array."""
        array = np.asarray(array)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise InvalidArgError(f"array must be 2D or 3D, got {array.ndim}D")
        height, width, channels = array.shape
        return cls(ImageInfo(width, height, channels, alpha), np.ascontiguousarray(array).reshape(-1))

    @classmethod
    def blank(cls, info: ImageInfo, dtype=FLOAT_DTYPE) -> "Image":
        """Create a zero-filled image."""
        return cls(info, np.zeros(info.full_size, dtype=dtype))

    @classmethod
    def empty(cls, info: ImageInfo, dtype=FLOAT_DTYPE) -> "Image":
        """Create an image with an allocated but uninitialised buffer."""
        return cls(info, np.empty(info.full_size, dtype=dtype))

    # ------------------------------------------------------------------
    # Info queries
    # ------------------------------------------------------------------

    @property
    def info(self) -> ImageInfo:
        return self._info

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def wh(self) -> Tuple[int, int]:
        return self._info.wh()

    def whc(self) -> Tuple[int, int, int]:
        return self._info.whc()

    def whca(self) -> Tuple[int, int, int, bool]:
        return self._info.whca()

    def channels_non_alpha(self) -> int:
        return self._info.channels_non_alpha

    def size(self) -> int:
        return self._info.size

    def full_size(self) -> int:
        return self._info.full_size

    # ------------------------------------------------------------------
    # Buffer access
    # ------------------------------------------------------------------

    def data(self) -> np.ndarray:
        """Read-only view of the flat buffer."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def data_mut(self) -> np.ndarray:
        """Writable flat buffer."""
        return self._data

    def as_pixels(self) -> np.ndarray:
        """Writable (size, channels) view of the buffer, one row per pixel in row-major order."""
        return self._data.reshape(self._info.size, self._info.channels)

    def as_array(self) -> np.ndarray:
        """Writable (height, width, channels) view of the buffer."""
        return self._data.reshape(self._info.height, self._info.width, self._info.channels)

    def index(self, x: int, y: int) -> int:
        """Offset of the first channel of pixel ``(x, y)`` in the flat buffer."""
        return (y * self._info.width + x) * self._info.channels

    # ------------------------------------------------------------------
    # Pixel access
    # ------------------------------------------------------------------

    def _pixel_view(self, start: int, writeable: bool) -> np.ndarray:
        view = self._data[start:start + self._info.channels]
        if not writeable:
            view.flags.writeable = False
        return view

    def get_pixel(self, x: int, y: int) -> np.ndarray:
        """
        Return the pixel at ``(x, y)`` as a read-only view.

        Raises:
            IndexError: If ``(x, y)`` lies outside the image
        """
        check_xy(x, y, self._info.width, self._info.height)
        return self._pixel_view(self.index(x, y), False)

    def get_pixel_unchecked(self, x: int, y: int) -> np.ndarray:
        """Like get_pixel without the bounds check; the caller guarantees x < width and y < height."""
        return self._pixel_view(self.index(x, y), False)

    def get_pixel_mut(self, x: int, y: int) -> np.ndarray:
        check_xy(x, y, self._info.width, self._info.height)
        return self._pixel_view(self.index(x, y), True)

    def get_pixel_mut_unchecked(self, x: int, y: int) -> np.ndarray:
        return self._pixel_view(self.index(x, y), True)

    def get_pixel_clamped(self, x: int, y: int) -> np.ndarray:
        """Return the pixel at ``(x, y)`` with both coordinates clamped into the image."""
        x_clamp = min(max(x, 0), self._info.width - 1)
        y_clamp = min(max(y, 0), self._info.height - 1)
        return self._pixel_view(self.index(x_clamp, y_clamp), False)

    def set_pixel(self, x: int, y: int, pixel: Sequence) -> None:
        """
        Replace the pixel at ``(x, y)``.

        Raises:
            IndexError: If ``(x, y)`` lies outside the image
            ValueError: If ``pixel`` does not have one value per channel
        """
        check_xy(x, y, self._info.width, self._info.height)
        check_channels(self._info.channels, len(pixel))
        start = self.index(x, y)
        self._data[start:start + self._info.channels] = pixel

    def set_pixel_indexed(self, i: int, pixel: Sequence) -> None:
        """Replace the ``i``-th pixel (row-major order)."""
        if i < 0 or i >= self._info.size:
            raise IndexError(f"index out of bounds: the len is {self._info.size}, but the index is {i}")
        check_channels(self._info.channels, len(pixel))
        start = i * self._info.channels
        self._data[start:start + self._info.channels] = pixel

    def __getitem__(self, i: int) -> np.ndarray:
        """Return the ``i``-th pixel (row-major order) as a read-only view."""
        if i < 0 or i >= self._info.size:
            raise IndexError(f"index out of bounds: the len is {self._info.size}, but the index is {i}")
        return self._pixel_view(i * self._info.channels, False)

    def __iter__(self) -> Iterator[Tuple[int, int, np.ndarray]]:
        """Yield ``(x, y, pixel)`` in row-major order."""
        width, height = self.wh()
        for y in range(height):
            for x in range(width):
                yield x, y, self.get_pixel_unchecked(x, y)

    # ------------------------------------------------------------------
    # Regions and neighborhoods
    # ------------------------------------------------------------------

    def get_subimage(self, x: int, y: int, width: int, height: int) -> SubImage:
        """Return the ``width x height`` region whose upper left corner is ``(x, y)``."""
        check_xy(x, y, self._info.width, self._info.height)
        check_xy(x + width - 1, y + height - 1, self._info.width, self._info.height)

        pixels = [self.get_pixel_unchecked(i, j)
                  for j in range(y, y + height)
                  for i in range(x, x + width)]
        return SubImage(ImageInfo(width, height, self._info.channels, self._info.alpha), pixels)

    def get_neighborhood_1d(self, x: int, y: int, size: int, vert: bool) -> SubImage:
        """
        Return the column (``vert``) or row of ``size`` pixels centred at ``(x, y)``.

        Coordinates outside the image are replaced by the centre coordinate, so
        the pixel at ``(x, y)`` stands in for every out-of-range position.
        """
        check_odd(size, "size")
        check_xy(x, y, self._info.width, self._info.height)
        width, height, channels, alpha = self.whca()
        half = size // 2

        pixels = []
        if vert:
            for i in range(size):
                curr_y = y - half + i
                if curr_y < 0 or curr_y >= height:
                    curr_y = y
                pixels.append(self.get_pixel_unchecked(x, curr_y))
            return SubImage(ImageInfo(1, size, channels, alpha), pixels)

        for i in range(size):
            curr_x = x - half + i
            if curr_x < 0 or curr_x >= width:
                curr_x = x
            pixels.append(self.get_pixel_unchecked(curr_x, y))
        return SubImage(ImageInfo(size, 1, channels, alpha), pixels)

    def get_neighborhood_2d(self, x: int, y: int, size: int) -> SubImage:
        """
        Return the ``size x size`` square centred at ``(x, y)``, top-left first.

        The out-of-range policy of get_neighborhood_1d is applied to each axis
        independently.
        """
        check_odd(size, "size")
        check_xy(x, y, self._info.width, self._info.height)
        width, height, channels, alpha = self.whca()
        half = size // 2

        pixels = []
        for i in range(size):
            curr_y = y - half + i
            if curr_y < 0 or curr_y >= height:
                curr_y = y
            for j in range(size):
                curr_x = x - half + j
                if curr_x < 0 or curr_x >= width:
                    curr_x = x
                pixels.append(self.get_pixel_unchecked(curr_x, curr_y))
        return SubImage(ImageInfo(size, size, channels, alpha), pixels)

    def _pixel_coords(self) -> Tuple[np.ndarray, np.ndarray]:
        ys, xs = np.divmod(np.arange(self._info.size), self._info.width)
        return xs, ys

    @staticmethod
    def _shift(coords: np.ndarray, offset: int, limit: int) -> np.ndarray:
        shifted = coords + offset
        return np.where((shifted < 0) | (shifted >= limit), coords, shifted)

    def neighborhood_1d_taps(self, size: int, vert: bool) -> Iterator[np.ndarray]:
        """
        Yield one index array per neighborhood position.

        The ``t``-th array holds, for every pixel ``i`` (row-major), the pixel
        index of the ``t``-th element of get_neighborhood_1d at pixel ``i``.
        Whole-image operators gather ``as_pixels()[taps]`` instead of walking
        pixel by pixel.
        """
        check_odd(size, "size")
        width, height = self.wh()
        xs, ys = self._pixel_coords()
        for offset in range(-(size // 2), size // 2 + 1):
            if vert:
                yield self._shift(ys, offset, height) * width + xs
            else:
                yield ys * width + self._shift(xs, offset, width)

    def neighborhood_2d_taps(self, size: int) -> Iterator[np.ndarray]:
        """Like neighborhood_1d_taps for the ``size x size`` square, in get_neighborhood_2d order."""
        check_odd(size, "size")
        width, height = self.wh()
        xs, ys = self._pixel_coords()
        offsets = range(-(size // 2), size // 2 + 1)
        for dy in offsets:
            rows = self._shift(ys, dy, height) * width
            for dx in offsets:
                yield rows + self._shift(xs, dx, width)

    def neighborhood_1d_indices(self, size: int, vert: bool) -> np.ndarray:
        """
        Pixel indices of every pixel's 1D neighborhood.

        Returns:
            (size_of_image, size) integer array; row ``i`` lists, in order, the
            row-major pixel indices that get_neighborhood_1d yields for pixel ``i``
        """
        return np.stack(list(self.neighborhood_1d_taps(size, vert)), axis=1)

    def neighborhood_2d_indices(self, size: int) -> np.ndarray:
        """
        Pixel indices of every pixel's 2D neighborhood.

        Returns:
            (size_of_image, size * size) integer array matching the order of
            get_neighborhood_2d
        """
        return np.stack(list(self.neighborhood_2d_taps(size)), axis=1)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def map_pixels(self, f: Callable, vectorized: bool = False, dtype=None) -> "Image":
        """
        Build a new image by applying ``f`` to every pixel.

        Args:
            f: Called with one pixel (1-D array) and returning its output
                channels; with ``vectorized`` it is called once with the
                (size, channels) pixel matrix and returns a (size, channels_out)
                matrix
            vectorized: Whether ``f`` works on the whole pixel matrix
            dtype: Element type of the output (inferred when None)

        Returns:
            New image; the output channel count comes from ``f``
        """
        pixels = self.as_pixels()
        size = self._info.size
        if vectorized:
            out = _as_column_block(f(pixels), size)
        else:
            out = _collect_pixels((f(pixels[i]) for i in range(size)), size)

        if dtype is not None:
            out = out.astype(dtype)
        return Image(self._info.with_channels(out.shape[1]), out.reshape(-1))

    def map_pixels_if_alpha(self, f: Callable, g: Callable, vectorized: bool = False,
                            dtype=None) -> "Image":
        """
        Apply ``f`` to the colour channels of each pixel and ``g`` to its alpha.

        Without an alpha channel this is ``map_pixels(f)``.
        """
        if not self._info.alpha:
            return self.map_pixels(f, vectorized, dtype)

        pixels = self.as_pixels()
        size = self._info.size
        colour, alpha = pixels[:, :-1], pixels[:, -1]
        if vectorized:
            colour_out = _as_column_block(f(colour), size)
            alpha_out = np.asarray(g(alpha)).reshape(size, 1)
        else:
            colour_out = _collect_pixels((f(colour[i]) for i in range(size)), size)
            alpha_out = np.array([g(a) for a in alpha]).reshape(size, 1)

        out = np.concatenate([colour_out, alpha_out], axis=1)
        if dtype is not None:
            out = out.astype(dtype)
        return Image(self._info.with_channels(out.shape[1], alpha=True), out.reshape(-1))

    def map_channels(self, f: Callable, vectorized: bool = False, dtype=None) -> "Image":
        """Build a new image by applying ``f`` to every channel value."""
        if vectorized:
            out = np.broadcast_to(np.asarray(f(self._data)), self._data.shape).copy()
        else:
            out = np.array([f(value) for value in self._data])

        if dtype is not None:
            out = out.astype(dtype)
        return Image(self._info, out)

    def map_channels_if_alpha(self, f: Callable, g: Callable, vectorized: bool = False,
                              dtype=None) -> "Image":
        """
        Apply ``f`` to every colour channel value and ``g`` to every alpha value.

        Without an alpha channel this is ``map_channels(f)``.
        """
        if not self._info.alpha:
            return self.map_channels(f, vectorized, dtype)

        pixels = self.as_pixels()
        colour, alpha = pixels[:, :-1], pixels[:, -1]
        if vectorized:
            colour_out = np.asarray(f(colour))
            alpha_out = np.asarray(g(alpha))
        else:
            colour_out = np.array([f(value) for value in colour.ravel()]).reshape(colour.shape)
            alpha_out = np.array([g(a) for a in alpha])

        out_dtype = dtype if dtype is not None else np.result_type(colour_out, alpha_out)
        out = np.empty(pixels.shape, dtype=out_dtype)
        out[:, :-1] = colour_out
        out[:, -1] = alpha_out
        return Image(self._info, out.reshape(-1))

    def _replace_buffer(self, other: "Image") -> None:
        if other.info != self._info:
            raise ValueError(
                f"in-place operation changed the image layout from {self._info.whca()} "
                f"to {other.info.whca()}"
            )
        np.copyto(self._data, other._data, casting="unsafe")

    def apply_pixels(self, f: Callable, vectorized: bool = False) -> None:
        """In-place form of map_pixels; ``f`` must keep the channel count."""
        self._replace_buffer(self.map_pixels(f, vectorized))

    def apply_pixels_if_alpha(self, f: Callable, g: Callable, vectorized: bool = False) -> None:
        """In-place form of map_pixels_if_alpha."""
        self._replace_buffer(self.map_pixels_if_alpha(f, g, vectorized))

    def apply_channels(self, f: Callable, vectorized: bool = False) -> None:
        """In-place form of map_channels."""
        self._replace_buffer(self.map_channels(f, vectorized))

    def apply_channels_if_alpha(self, f: Callable, g: Callable, vectorized: bool = False) -> None:
        """In-place form of map_channels_if_alpha."""
        self._replace_buffer(self.map_channels_if_alpha(f, g, vectorized))

    def edit_channel(self, f: Callable, index: int, vectorized: bool = False) -> None:
        """Apply ``f`` in place to channel ``index`` of every pixel."""
        channels = self._info.channels
        if index < 0 or index >= channels:
            raise IndexError(f"channel index out of bounds: channels is {channels}, index is {index}")

        view = self._data[index::channels]
        if vectorized:
            view[...] = f(view.copy())
        else:
            for k in range(view.shape[0]):
                view[k] = f(view[k])

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def copy(self) -> "Image":
        return Image(self._info, self._data.copy())

    def astype(self, dtype) -> "Image":
        """Copy with a different element type (plain numpy cast)."""
        return Image(self._info, self._data.astype(dtype))

    def to_float(self, dtype=FLOAT_DTYPE) -> "Image":
        return self.astype(dtype)

    def to_u8(self) -> "Image":
        """Round and saturate to 8-bit."""
        if self.dtype == U8_DTYPE:
            return self.copy()
        return Image(self._info, np.clip(np.rint(self._data), 0, 255).astype(U8_DTYPE))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self._info == other._info and np.array_equal(self._data, other._data)

    __hash__ = None

    def __repr__(self) -> str:
        w, h, c, a = self.whca()
        return f"Image(width={w}, height={h}, channels={c}, alpha={a}, dtype={self.dtype})"
