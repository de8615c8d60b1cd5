"""
Custom exceptions for the imgproc core.

Processing operators raise these when an argument is rejected; nothing in the
core catches them. Index and pixel-length violations are programmer errors and
surface as plain IndexError / ValueError instead.
"""


class ImgProcError(Exception):
    """Base class for all imgproc custom exceptions."""
    pass


class InvalidArgError(ImgProcError, ValueError):
    """Raised when an operator argument fails validation."""
    pass


class NumericError(ImgProcError, ArithmeticError):
    """Raised when a numerical decomposition fails (e.g. SVD in the separability test)."""
    pass
