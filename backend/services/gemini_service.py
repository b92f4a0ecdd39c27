import httpx
from typing import Any, Iterable, List, Optional, Union

from config.settings import settings
from core.exceptions import ConfigurationError, ImageEditError, ImageReadError
from models.image_edit import EditResult, EncodedImage, ImagePart, ResponsePart, TextPart
from services.image_encoder import decode_image

DEFAULT_MIME_TYPE = "image/png"
NO_CONTENT_ERROR = "No content generated from the model."
NO_IMAGE_ERROR = "Model did not return a valid image."
FALLBACK_ERROR = "Failed to process image with Gemini."

# Distinguishes "use the configured timeout" from an explicit None (no timeout)
_UNSET: Any = object()


def parse_response_parts(payload: Any) -> List[ResponsePart]:
    """
    Extract the first candidate's content parts from a generateContent reply.

    Any part with an inlineData block becomes an ImagePart, even when its data
    is empty. Parts that carry neither inline data nor text are dropped.
    Raises ImageEditError when there are no parts at all.
    """
    candidates = payload.get("candidates") if isinstance(payload, dict) else None
    if not candidates or not isinstance(candidates, list):
        raise ImageEditError(NO_CONTENT_ERROR)

    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    raw_parts = content.get("parts") if isinstance(content, dict) else None
    if not raw_parts or not isinstance(raw_parts, list):
        raise ImageEditError(NO_CONTENT_ERROR)

    parts: List[ResponsePart] = []
    for raw in raw_parts:
        if not isinstance(raw, dict):
            continue
        inline = raw["inlineData"] if "inlineData" in raw else raw.get("inline_data")
        if isinstance(inline, dict):
            parts.append(ImagePart(
                data=inline.get("data") or "",
                mime_type=inline.get("mimeType") or inline.get("mime_type"),
            ))
        elif raw.get("text"):
            parts.append(TextPart(text=raw["text"]))
    return parts


def select_edit_result(parts: Iterable[ResponsePart]) -> EditResult:
    """
    First image part wins; later images are ignored.

    The scan stops at the first image part even when its payload is empty or
    not valid base64. In that case, as when no image part exists, the first
    text part anywhere in the reply is surfaced as the error (usually a refusal).
    """
    parts = list(parts)
    image = next((part for part in parts if isinstance(part, ImagePart)), None)

    if image is not None and image.data:
        mime_type = image.mime_type or DEFAULT_MIME_TYPE
        try:
            decode_image(EncodedImage(data=image.data, mime_type=mime_type))
        except ImageReadError:
            print("⚠️ Model returned an image part that is not valid base64")
        else:
            return EditResult(data=image.data, mime_type=mime_type)

    first_text = next((part.text for part in parts if isinstance(part, TextPart)), None)
    if first_text is not None:
        raise ImageEditError(f"Model returned text instead of image: {first_text}")
    raise ImageEditError(NO_IMAGE_ERROR)


class GeminiImageService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Union[float, None] = _UNSET,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.timeout = settings.GEMINI_TIMEOUT_SECONDS if timeout is _UNSET else timeout
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def build_payload(self, image_data: str, mime_type: str, prompt: str) -> dict:
        """Image first, instruction second"""
        return {
            "contents": [{
                "parts": [
                    {
                        "inlineData": {
                            "data": image_data,
                            "mimeType": mime_type
                        }
                    },
                    {
                        "text": prompt
                    }
                ]
            }]
        }

    async def edit_image(self, image_data: str, mime_type: str, prompt: str) -> EditResult:
        """Edit an image with the Gemini image model. Raises ImageEditError on any failure."""
        if not self.is_configured:
            raise ConfigurationError(
                "API Key is missing. Please set the GEMINI_API_KEY environment variable."
            )

        try:
            headers = {
                "x-goog-api-key": self.api_key,
                "Content-Type": "application/json"
            }

            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    json=self.build_payload(image_data, mime_type, prompt),
                    headers=headers
                )

            if response.status_code != 200:
                raise ImageEditError(self._error_message(response))

            parts = parse_response_parts(response.json())
            result = select_edit_result(parts)
            print(f"✅ Gemini returned edited image ({result.mime_type}, {len(result.data)} base64 chars)")
            return result

        except ImageEditError as error:
            print(f"❌ Gemini API Error: {error}")
            raise
        except Exception as error:
            print(f"❌ Gemini API Error: {error!r}")
            raise ImageEditError(str(error) or FALLBACK_ERROR) from error

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            error_data = {}
        error = error_data.get("error") if isinstance(error_data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        return f"API request failed: {response.status_code}"
