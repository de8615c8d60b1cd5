"""
Disk reader and writer for 8-bit images.

Formats are looked up by file extension in a FileFormatRegistry: PNG and
JPEG go through imageio, TIFF through tifffile. Decoded pixel data must be
8-bit with 1 to 4 channels (gray, gray+alpha, RGB, RGBA); 2- and 4-channel
images are taken to carry alpha.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Union

import imageio.v3 as iio
import numpy as np
import tifffile

from imgproc.constants import FileFormat
from imgproc.constants.constants import MAX_CHANNELS, U8_DTYPE
from imgproc.core.image import Image
from imgproc.io.exceptions import (
    DecodeError,
    EncodeError,
    ImageIoOSError,
    UnsupportedColorTypeError,
    UnsupportedFileFormatError,
    WriteError,
)

logger = logging.getLogger(__name__)


class FileFormatRegistry:
    def __init__(self):
        self._writers: Dict[str, Callable[[Path, np.ndarray], None]] = {}
        self._readers: Dict[str, Callable[[Path], np.ndarray]] = {}

    def register(self, ext: str, writer: Callable, reader: Callable):
        ext = ext.lower()
        self._writers[ext] = writer
        self._readers[ext] = reader

    def get_writer(self, ext: str) -> Callable:
        return self._writers[ext.lower()]

    def get_reader(self, ext: str) -> Callable:
        return self._readers[ext.lower()]

    def is_registered(self, ext: str) -> bool:
        return ext.lower() in self._writers and ext.lower() in self._readers

    def extensions(self):
        return sorted(self._readers)


def _imageio_writer(path: Path, data: np.ndarray) -> None:
    iio.imwrite(path, data)


def _imageio_reader(path: Path) -> np.ndarray:
    return iio.imread(path)


def _tiff_writer(path: Path, data: np.ndarray) -> None:
    if data.ndim == 3:
        photometric = "rgb" if data.shape[2] >= 3 else "minisblack"
        tifffile.imwrite(path, data, photometric=photometric, planarconfig="contig")
    else:
        tifffile.imwrite(path, data, photometric="minisblack")


def _tiff_reader(path: Path) -> np.ndarray:
    return tifffile.imread(path)


def _build_registry() -> FileFormatRegistry:
    registry = FileFormatRegistry()
    formats = [
        (FileFormat.PNG.value, _imageio_writer, _imageio_reader),
        (FileFormat.JPEG.value, _imageio_writer, _imageio_reader),
        (FileFormat.TIFF.value, _tiff_writer, _tiff_reader),
    ]
    for extensions, writer, reader in formats:
        for ext in extensions:
            registry.register(ext, writer, reader)
    return registry


format_registry = _build_registry()


def _resolve_extension(path: Path) -> str:
    ext = path.suffix.lower()
    if not format_registry.is_registered(ext):
        raise UnsupportedFileFormatError(
            f"unsupported file format '{ext}' for {path}; "
            f"supported: {', '.join(format_registry.extensions())}"
        )
    return ext


def _to_image(array: np.ndarray, path: Path) -> Image:
    if array.dtype != U8_DTYPE:
        raise UnsupportedColorTypeError(f"{path}: pixel type {array.dtype} is not 8-bit")
    if array.ndim == 2:
        array = array[:, :, np.newaxis]
    if array.ndim != 3 or not 1 <= array.shape[2] <= MAX_CHANNELS:
        raise UnsupportedColorTypeError(f"{path}: cannot represent pixel data of shape {array.shape}")

    channels = array.shape[2]
    return Image.from_array(array, alpha=channels in (2, 4))


def read(path: Union[str, Path]) -> Image:
    """
    Read an 8-bit image from disk.

    Args:
        path: File path; the extension selects the codec

    Returns:
        uint8 Image with 1-4 channels

    Raises:
        UnsupportedFileFormatError: If the extension is not registered
        UnsupportedColorTypeError: If the pixel data is not 8-bit with 1-4 channels
        DecodeError: If the codec fails
        ImageIoOSError: If the file cannot be opened
    """
    path = Path(path)
    ext = _resolve_extension(path)
    reader = format_registry.get_reader(ext)

    try:
        array = np.asarray(reader(path))
    except OSError as e:
        if not path.is_file():
            raise ImageIoOSError(f"cannot read {path}: {e}") from e
        raise DecodeError(f"cannot decode {path}: {e}") from e
    except Exception as e:
        raise DecodeError(f"cannot decode {path}: {e}") from e

    image = _to_image(array, path)
    logger.info(f"Read {path} ({image.info.width}x{image.info.height}, {image.info.channels} channels)")
    return image


def write(image: Image, path: Union[str, Path]) -> None:
    """
    Write an 8-bit image to disk.

    Raises:
        UnsupportedFileFormatError: If the extension is not registered
        UnsupportedColorTypeError: If ``image`` is not 8-bit
        EncodeError: If the codec cannot encode the image (e.g. alpha in JPEG)
        WriteError: If the destination cannot be written
    """
    path = Path(path)
    ext = _resolve_extension(path)
    if image.dtype != U8_DTYPE:
        raise UnsupportedColorTypeError(f"only 8-bit images can be written, got {image.dtype}")

    array = image.as_array()
    if image.info.channels == 1:
        array = array[:, :, 0]

    writer = format_registry.get_writer(ext)
    try:
        writer(path, array)
    except OSError as e:
        raise WriteError(f"cannot write {path}: {e}") from e
    except Exception as e:
        raise EncodeError(f"cannot encode {path}: {e}") from e

    logger.info(f"Wrote {path} ({image.info.width}x{image.info.height}, {image.info.channels} channels)")
