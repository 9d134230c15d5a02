"""
Exception hierarchy for the visual field library.

Missing geometry is never an error (it propagates as None). These exceptions
signal misuse of viewing transforms, which cannot be recovered from locally.
"""


class VisualFieldError(Exception):
    """Base class for all library errors."""


class TransformError(VisualFieldError, ValueError):
    """A viewing transform was built or used incorrectly."""


class InvalidSamplingError(TransformError):
    """Raised when sampling an image through an inverted crop operation."""

    def __init__(self, x: int, y: int):
        self.x = x
        self.y = y
        super().__init__(
            f"Can't use an inverted crop operation at ({x}, {y}) for sampling"
        )


class SubmatTooLargeError(TransformError):
    """Raised when a submatrix cannot fit inside the current image bounds."""

    def __init__(self, width: int, height: int, bound_width: int, bound_height: int):
        self.width = width
        self.height = height
        self.bound_width = bound_width
        self.bound_height = bound_height
        super().__init__(
            f"Submatrix {width}x{height} cannot be larger than the "
            f"{bound_width}x{bound_height} matrix it is taken from"
        )
