"""Exceptions raised at the file I/O boundary.

Everything the reader and writer raise derives from ImgIoError, so callers
that only care about "the image could not be loaded/saved" can catch one
type.
"""

from imgproc.core.exceptions import ImgProcError


class ImgIoError(ImgProcError):
    """Base class for image file I/O failures."""
    pass


class UnsupportedFileFormatError(ImgIoError, ValueError):
    """Raised when the path extension does not name a supported format."""
    pass


class UnsupportedColorTypeError(ImgIoError, ValueError):
    """Raised when pixel data cannot be represented as 1-4 channels of 8 bits."""
    pass


class DecodeError(ImgIoError):
    """Raised when the codec fails to decode a file."""
    pass


class EncodeError(ImgIoError):
    """Raised when the codec fails to encode an image."""
    pass


class ImageIoOSError(ImgIoError, OSError):
    """Raised when the filesystem fails while reading an image."""
    pass


class WriteError(ImageIoOSError):
    """Raised when the encoded image cannot be written to its destination."""
    pass
