import base64
from typing import Any, Callable, List, Optional, Sequence

from google import genai
from google.genai import types

from config.settings import settings
from core.errors import (
    ImageEditError,
    ConfigurationError,
    NoContentError,
    NoImageError,
    TransportError,
)
from core.image_utils import decode_payload

ApiKeyProvider = Callable[[], Optional[str]]
ClientFactory = Callable[[str], Any]


def extract_response_parts(response: Any) -> List[Any]:
    """Content parts of the first candidate, or an empty list"""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    if content is None:
        return []
    return list(getattr(content, "parts", None) or [])


def find_inline_image(parts: Sequence[Any]) -> Optional[bytes]:
    """Return the payload of the first part carrying inline image data"""
    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None and getattr(inline_data, "data", None):
            return inline_data.data
    return None


def _default_client_factory(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


class GeminiService:
    """Edits images with Gemini 2.5 Flash Image based on a text prompt"""

    def __init__(
        self,
        api_key_provider: Optional[ApiKeyProvider] = None,
        client_factory: Optional[ClientFactory] = None,
        model: Optional[str] = None,
    ):
        self.api_key_provider = api_key_provider or (lambda: settings.API_KEY)
        self.client_factory = client_factory or _default_client_factory
        self.model = model or settings.GEMINI_MODEL

    def is_configured(self) -> bool:
        api_key = self.api_key_provider()
        return bool(api_key and api_key.strip())

    def _get_client(self) -> Any:
        api_key = self.api_key_provider()
        if not api_key or not api_key.strip():
            raise ConfigurationError()
        return self.client_factory(api_key)

    async def edit_image(self, encoded_payload: str, mime_type: str, instruction: str) -> str:
        """
        Edit an image according to an instruction.

        Args:
            encoded_payload: Base64 image data, with or without data URI prefix
            mime_type: MIME type of the source image (e.g. 'image/jpeg')
            instruction: Text instruction for the edit

        Returns:
            Base64 data of the generated image (without prefix)

        Raises:
            ConfigurationError: If no API key is available
            NoContentError: If the response has no content parts
            NoImageError: If no part carries image data
            TransportError: For any failure talking to the service
        """
        client = self._get_client()

        try:
            image_bytes = decode_payload(encoded_payload)

            print(f"🔍 Sending edit request to {self.model} ({mime_type}, {len(image_bytes)} bytes)")
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                    types.Part.from_text(text=instruction),
                ],
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"]
                ),
            )

            parts = extract_response_parts(response)
            if not parts:
                raise NoContentError()

            image_data = find_inline_image(parts)
            if image_data is None:
                raise NoImageError()

            print(f"✅ Received edited image from {self.model} ({len(image_data)} bytes)")
            return base64.b64encode(image_data).decode("ascii")

        except ImageEditError:
            raise
        except Exception as error:
            print(f"❌ Gemini API error: {error}")
            # SDK APIError carries the service message separately from its code and status
            raise TransportError(getattr(error, "message", None) or str(error)) from error
