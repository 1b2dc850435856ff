"""
Error taxonomy for the image edit flow.

Every failure on the request path derives from ImageEditError so the session
controller can turn it into a user-facing message in one place.
"""


class ImageEditError(Exception):
    """Base class for all image edit failures."""

    default_message = "Something went wrong during generation."

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidImageError(ImageEditError):
    """The selected file is not an accepted image."""

    default_message = "Please upload an image file"


class ImageConversionError(ImageEditError):
    """The selected file could not be read or encoded."""

    default_message = "Failed to convert file to base64"


class ConfigurationError(ImageEditError):
    """The service credential is missing."""

    default_message = "API_KEY environment variable is not set."


class EmptyResponseError(ImageEditError):
    """The model answered without anything usable."""


class NoContentError(EmptyResponseError):
    default_message = "No content generated from Gemini."


class NoImageError(EmptyResponseError):
    default_message = "The model did not return a valid image."


class TransportError(ImageEditError):
    """Network or service failure while calling the model."""

    default_message = "Failed to edit image with Gemini."
