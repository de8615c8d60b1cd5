"""
Median and alpha-trimmed mean filters on 8-bit images.

Both filters use Ben Weiss' partial-histogram method with a tier radix of 2
("Fast Median and Bilateral Filtering", SIGGRAPH 2006). The image is cut into
vertical strips ``n_cols`` wide. Each strip keeps, per channel, one central
histogram covering the window of the strip's middle column plus ``n_cols``
partial histograms holding the difference between each column's window and
the central one. Moving down one row adds the incoming clamp-padded row and
removes the outgoing one.

The median of each column is found by walking from the previous row's median
(the pivot) using the stored count of values below it, so the usual cost per
pixel is a handful of bins. Strips are independent and can be evaluated on a
thread pool (``ProcessingConfig.num_workers``).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

import numpy as np

from imgproc.constants.constants import HISTOGRAM_BINS, U8_DTYPE
from imgproc.core.config import get_processing_config
from imgproc.core.exceptions import InvalidArgError
from imgproc.core.image import Image
from imgproc.core.validation import check_even, check_non_neg, check_u8

logger = logging.getLogger(__name__)


def strip_width(radius: int) -> int:
    """Number of columns per strip: ``floor(4 * r^(2/3))`` rounded up to odd."""
    n_cols = int(np.floor(4.0 * radius ** (2.0 / 3.0)))
    if n_cols % 2 == 0:
        n_cols += 1
    return n_cols


class PartialHistograms:
    """
    Central and partial histograms of one strip, for every channel.

    ``data[c, n_half]`` is the central histogram of channel ``c``; for any
    other ``n``, ``data[c, n]`` is the window histogram of strip column ``n``
    minus the central one. A row is passed as the ``n_cols + 2 * radius``
    clamp-padded pixels starting at strip column ``-radius``.
    """

    def __init__(self, radius: int, n_cols: int, channels: int):
        self.radius = radius
        self.size = 2 * radius + 1
        self.n_cols = n_cols
        self.n_half = n_cols // 2
        self.channels = channels
        self.data = np.zeros((channels, n_cols, HISTOGRAM_BINS), dtype=np.int32)
        self._build_update_plan()

    def _build_update_plan(self):
        hist_idx, row_pos, signs = [], [], []

        def entry(hist, pos, sign):
            hist_idx.append(hist)
            row_pos.append(pos)
            signs.append(sign)

        for n in range(self.n_half):
            n_upper = self.n_cols - n - 1
            for i in range(n, self.n_half):
                entry(n, i, 1)
                entry(n, i + self.size, -1)

                i_upper = self.n_cols + 2 * self.radius - i - 1
                i_lower = i_upper - self.size
                entry(n_upper, i_lower, -1)
                entry(n_upper, i_upper, 1)

        for i in range(self.n_half, self.n_half + self.size):
            entry(self.n_half, i, 1)

        self._hist_idx = np.array(hist_idx, dtype=np.intp)[:, np.newaxis]
        self._row_pos = np.array(row_pos, dtype=np.intp)
        self._signs = np.array(signs, dtype=np.int32)[:, np.newaxis]
        self._channel_idx = np.arange(self.channels)[np.newaxis, :]
        # windows[n] lists the row positions covered by strip column n
        self._windows = np.arange(self.n_cols)[:, np.newaxis] + np.arange(self.size)

    def update(self, row: np.ndarray, add: bool) -> None:
        """Add (or remove) one clamp-padded row of shape (n_cols + 2r, channels)."""
        inc = 1 if add else -1
        values = row[self._row_pos].astype(np.intp)
        np.add.at(self.data, (self._channel_idx, self._hist_idx, values), self._signs * inc)

    def get_count(self, key: int, index: int, channel: int = 0) -> int:
        """Count of ``key`` in the window of strip column ``index``."""
        count = self.data[channel, self.n_half, key]
        if index != self.n_half:
            count += self.data[channel, index, key]
        return int(count)

    def effective(self) -> np.ndarray:
        """Window histograms of every strip column, shape (channels, n_cols, 256)."""
        central = self.data[:, self.n_half:self.n_half + 1, :]
        eff = self.data + central
        eff[:, self.n_half] = central[:, 0]
        return eff

    def first_row(self) -> np.ndarray:
        raise NotImplementedError

    def next_row(self) -> np.ndarray:
        raise NotImplementedError


class MedianHistograms(PartialHistograms):
    """Partial histograms plus the per-column pivots and below-pivot counts."""

    def __init__(self, radius: int, n_cols: int, channels: int):
        super().__init__(radius, n_cols, channels)
        self.center = self.size * self.size // 2 + 1
        self.sums = np.zeros((channels, n_cols), dtype=np.int64)
        self.pivots = None

    def update(self, row: np.ndarray, add: bool) -> None:
        super().update(row, add)
        if self.pivots is None:
            return

        inc = 1 if add else -1
        windows = row[self._windows]  # (n_cols, size, channels)
        below = windows < self.pivots.T[:, np.newaxis, :]
        self.sums += inc * below.sum(axis=1).T

    def first_row(self) -> np.ndarray:
        """Scan every column from bin 0 and set the initial pivots."""
        eff = self.effective()
        cumulative = np.cumsum(eff, axis=2)
        keys = np.argmax(cumulative >= self.center, axis=2)
        at_key = np.take_along_axis(cumulative, keys[..., np.newaxis], axis=2)[..., 0]
        count = np.take_along_axis(eff, keys[..., np.newaxis], axis=2)[..., 0]

        self.sums = (at_key - count).astype(np.int64)
        self.pivots = keys.astype(np.int64)
        return self.pivots.copy()

    def next_row(self) -> np.ndarray:
        """Walk every column's pivot up or down to the new median."""
        eff = self.effective()
        for c in range(self.channels):
            for i in range(self.n_cols):
                self._walk(eff[c, i], c, i)
        return self.pivots.copy()

    def _walk(self, hist: np.ndarray, c: int, i: int) -> None:
        pivot = int(self.pivots[c, i])
        total = int(self.sums[c, i])

        if total < self.center:
            counts = hist[pivot:]
            reached = total + np.cumsum(counts)
            k = int(np.argmax(reached >= self.center))
            self.pivots[c, i] = pivot + k
            self.sums[c, i] = reached[k] - counts[k]
        else:
            counts = hist[:pivot][::-1]
            remaining = total - np.cumsum(counts)
            k = int(np.argmax(remaining < self.center))
            self.pivots[c, i] = pivot - 1 - k
            self.sums[c, i] = remaining[k]


class TrimmedMeanHistograms(PartialHistograms):
    """Partial histograms evaluated as alpha-trimmed means."""

    def __init__(self, radius: int, n_cols: int, channels: int, alpha: int):
        super().__init__(radius, n_cols, channels)
        self.lower = alpha // 2
        self.upper = self.size * self.size - alpha // 2
        self.length = self.size * self.size - alpha
        self._keys = np.arange(HISTOGRAM_BINS, dtype=np.int64)

    def _means(self) -> np.ndarray:
        eff = self.effective().astype(np.int64)
        cumulative = np.cumsum(eff, axis=2)
        before = cumulative - eff
        # Values ranked in [lower, upper) survive the trim.
        kept = np.clip(np.minimum(cumulative, self.upper) - np.maximum(before, self.lower), 0, None)
        sums = (kept * self._keys).sum(axis=2)
        return np.rint(sums / self.length).astype(np.int64)

    def first_row(self) -> np.ndarray:
        return self._means()

    def next_row(self) -> np.ndarray:
        return self._means()


def _filter_strip(array: np.ndarray, output: np.ndarray, radius: int, x_0: int,
                  histograms: PartialHistograms) -> None:
    height, width = array.shape[:2]
    n_cols = histograms.n_cols
    cols = np.clip(np.arange(x_0 - radius, x_0 + n_cols + radius), 0, width - 1)
    valid = min(n_cols, width - x_0)

    for j in range(-radius, radius + 1):
        histograms.update(array[min(max(j, 0), height - 1), cols], True)
    output[0, x_0:x_0 + valid] = histograms.first_row()[:, :valid].T

    for j in range(1, height):
        histograms.update(array[min(j + radius, height - 1), cols], True)
        histograms.update(array[max(j - radius - 1, 0), cols], False)
        output[j, x_0:x_0 + valid] = histograms.next_row()[:, :valid].T


def _run_strips(input: Image, radius: int,
                make_histograms: Callable[[int, int], PartialHistograms]) -> Image:
    width, height, channels = input.whc()
    n_cols = strip_width(radius)
    array = input.as_array()
    output = np.empty_like(array)
    starts = list(range(0, width, n_cols))
    num_workers = get_processing_config().num_workers

    logger.debug(f"Filtering {width}x{height} image, radius {radius}, "
                 f"{len(starts)} strips of {n_cols} columns, {num_workers} workers")

    def run(x_0):
        _filter_strip(array, output, radius, x_0, make_histograms(n_cols, channels))

    if num_workers > 1 and len(starts) > 1:
        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            for future in [executor.submit(run, x_0) for x_0 in starts]:
                future.result()
    else:
        for x_0 in starts:
            run(x_0)

    return Image(input.info, output.reshape(-1))


def median_filter(input: Image, radius: int) -> Image:
    """
    Median of every ``(2r+1) x (2r+1)`` clamp-to-edge neighborhood, per channel.

    Args:
        input: 8-bit image
        radius: Neighborhood radius ``r``

    Returns:
        8-bit image with the same info as ``input``

    Raises:
        InvalidArgError: If ``input`` is not 8-bit or ``radius`` is negative
    """
    check_u8(input)
    check_non_neg(radius, "radius")
    radius = int(radius)
    return _run_strips(input, radius, lambda n_cols, channels: MedianHistograms(radius, n_cols, channels))


def alpha_trimmed_mean(input: Image, radius: int, alpha: int) -> Image:
    """
    Mean of every ``(2r+1) x (2r+1)`` neighborhood after dropping its ``alpha/2`` lowest and highest values.

    Args:
        input: 8-bit image
        radius: Neighborhood radius ``r``
        alpha: Number of values trimmed; even and below ``(2r+1)^2``

    Returns:
        8-bit image of rounded means

    Raises:
        InvalidArgError: If ``alpha`` is odd or too large, or ``input`` is not 8-bit
    """
    check_u8(input)
    check_non_neg(radius, "radius")
    check_non_neg(alpha, "alpha")
    check_even(alpha, "alpha")
    radius = int(radius)
    size = 2 * radius + 1
    if alpha >= size * size:
        raise InvalidArgError(f"alpha must be less than {size * size}, got {alpha}")

    return _run_strips(
        input, radius,
        lambda n_cols, channels: TrimmedMeanHistograms(radius, n_cols, channels, int(alpha)),
    )
