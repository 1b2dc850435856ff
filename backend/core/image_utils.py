"""
Image ingestion helpers: turn an uploaded file into a data URI and back.
"""
import base64
import binascii
import time
import uuid
from typing import Optional

from fastapi import UploadFile

from core.errors import InvalidImageError, ImageConversionError
from models.image_edit import ImageSelection


def is_image_mime_type(mime_type: Optional[str]) -> bool:
    """True for any image/* content type"""
    return bool(mime_type) and mime_type.lower().startswith("image/")


def to_data_url(raw_bytes: bytes, mime_type: str) -> str:
    """Encode bytes as a self-describing data URI"""
    payload = base64.b64encode(raw_bytes).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def strip_base64_prefix(value: str) -> str:
    """
    Strip the data URI prefix (e.g. "data:image/png;base64,") from a base64 string.

    Strings without a prefix are returned unchanged.
    """
    if "," not in value:
        return value
    return value.split(",", 1)[1] or value


def decode_payload(encoded: str) -> bytes:
    """Decode base64 text (with or without data URI prefix) to bytes"""
    try:
        return base64.b64decode(strip_base64_prefix(encoded), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageConversionError(f"Invalid base64 image data: {e}")


def encode_image(raw_bytes: bytes, filename: str, mime_type: Optional[str], max_size: Optional[int] = None) -> ImageSelection:
    """
    Build an ImageSelection from raw file content.

    Args:
        raw_bytes: File content
        filename: Original filename, used for display only
        mime_type: Declared content type of the file
        max_size: Optional upper bound on the file size in bytes

    Returns:
        A new ImageSelection with a fresh preview token

    Raises:
        InvalidImageError: If the file is not an image or is too large
        ImageConversionError: If the content cannot be encoded
    """
    if not is_image_mime_type(mime_type):
        raise InvalidImageError()

    if max_size is not None and len(raw_bytes) > max_size:
        raise InvalidImageError(f"Image is too large (max {max_size // (1024 * 1024)}MB)")

    if not raw_bytes:
        raise ImageConversionError()

    data_url = to_data_url(raw_bytes, mime_type)
    return ImageSelection(
        raw_bytes=raw_bytes,
        filename=filename or "image",
        mime_type=mime_type,
        data_url=data_url,
        encoded_payload=strip_base64_prefix(data_url),
        preview_token=uuid.uuid4().hex,
    )


async def read_upload(upload: UploadFile, max_size: Optional[int] = None) -> ImageSelection:
    """Read an uploaded file and encode it"""
    # Non-image uploads are rejected before the body is read
    if not is_image_mime_type(upload.content_type):
        raise InvalidImageError()

    try:
        # Reads at most one byte past the limit
        raw_bytes = await upload.read(max_size + 1 if max_size is not None else -1)
    except Exception as e:
        raise ImageConversionError(f"Failed to read uploaded file: {e}") from e

    return encode_image(raw_bytes, upload.filename or "image", upload.content_type, max_size)


def build_download_filename(now_ms: Optional[int] = None) -> str:
    """Timestamped filename for a downloaded result"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"edited-image-{now_ms}.png"
