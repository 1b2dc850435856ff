"""
Shared pytest fixtures and configuration for all tests
"""
import pytest
import struct
import sys
import zlib
from pathlib import Path

from google.genai import types

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))


def make_png(width: int = 10, height: int = 10) -> bytes:
    """Build a solid red RGB PNG"""
    def chunk(tag: bytes, data: bytes) -> bytes:
        body = tag + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body) & 0xFFFFFFFF)

    row = b"\x00" + b"\xff\x00\x00" * width
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0))
        + chunk(b"IDAT", zlib.compress(row * height))
        + chunk(b"IEND", b"")
    )


def image_response(data: bytes, mime_type: str = "image/png", with_text: bool = False) -> types.GenerateContentResponse:
    """A model response carrying one inline image part"""
    parts = []
    if with_text:
        parts.append(types.Part(text="Here is your edited image"))
    parts.append(types.Part(inline_data=types.Blob(data=data, mime_type=mime_type)))
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def text_response(text: str = "I cannot edit this image") -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))]
    )


def empty_response() -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[]))]
    )


class FakeModels:
    """Stands in for client.aio.models, recording every generate_content call"""

    def __init__(self, response=None, error: Exception = None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeGenaiClient:
    def __init__(self, models: FakeModels):
        self.models = models
        self.aio = self


class FakeClientFactory:
    def __init__(self, models: FakeModels):
        self.models = models
        self.api_keys = []

    def __call__(self, api_key: str) -> FakeGenaiClient:
        self.api_keys.append(api_key)
        return FakeGenaiClient(self.models)


class FakeEditService:
    """Minimal GeminiService replacement for controller and API tests"""

    def __init__(self, result: str = None, error: Exception = None, gate=None):
        self.result = result
        self.error = error
        self.gate = gate
        self.calls = []
        self.model = "fake-image-model"

    def is_configured(self) -> bool:
        return True

    async def edit_image(self, encoded_payload: str, mime_type: str, instruction: str) -> str:
        self.calls.append((encoded_payload, mime_type, instruction))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def png_bytes():
    """10x10 PNG image"""
    return make_png(10, 10)


@pytest.fixture
def edited_png_bytes():
    return make_png(4, 4)


@pytest.fixture
def image_selection(png_bytes):
    from core.image_utils import encode_image
    return encode_image(png_bytes, "photo.png", "image/png")
