"""
Error types for the image editing workflow.

Every failure is raised as an ImageEditError carrying a human-readable
message. Subclasses exist so the origin can be told apart in tests and logs,
but callers only ever display the message.
"""


class ImageEditError(Exception):
    """An edit attempt failed. ``str(error)`` is shown to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ImageEditError):
    """The model credential is missing; no request was sent."""


class ImageReadError(ImageEditError):
    """The source image content could not be read or decoded."""


class InvalidImageError(ImageEditError):
    """The selected file does not declare an image content type."""
