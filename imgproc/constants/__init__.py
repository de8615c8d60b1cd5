"""Constants and enumerations for imgproc."""

from imgproc.constants.constants import Bilateral, FileFormat, Refl, Scale, Thresh, Tone, White

__all__ = [
    "Bilateral",
    "FileFormat",
    "Refl",
    "Scale",
    "Thresh",
    "Tone",
    "White",
]
