"""
File I/O for imgproc.

Reads and writes 8-bit images through the extension-keyed format registry.
"""

from imgproc.io.disk import FileFormatRegistry, format_registry, read, write
from imgproc.io.exceptions import (
    DecodeError,
    EncodeError,
    ImageIoOSError,
    ImgIoError,
    UnsupportedColorTypeError,
    UnsupportedFileFormatError,
    WriteError,
)

__all__ = [
    "read",
    "write",
    "FileFormatRegistry",
    "format_registry",
    "ImgIoError",
    "UnsupportedFileFormatError",
    "UnsupportedColorTypeError",
    "DecodeError",
    "EncodeError",
    "ImageIoOSError",
    "WriteError",
]
