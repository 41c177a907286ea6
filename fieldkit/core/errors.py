"""Exceptions raised by the drawing helpers."""


class ImageProcessingError(Exception):
    """Base class for image processing failures."""


class NoImageError(ImageProcessingError):
    """The drawing canvas produced no image."""

    def __init__(self, message: str = "no image produced") -> None:
        super().__init__(message)
