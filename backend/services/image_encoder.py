import base64
import binascii
from typing import Optional

from core.exceptions import ImageReadError
from models.image_edit import EncodedImage, SourceImage


async def encode_image(source: SourceImage) -> EncodedImage:
    """Read the whole source image and return it as a plain base64 payload"""
    try:
        content = await source.read()
    except (OSError, ValueError) as e:
        raise ImageReadError(f"Could not read image file: {e}") from e

    if not content:
        raise ImageReadError("Image file is empty")

    return EncodedImage(
        data=base64.b64encode(content).decode("ascii"),
        mime_type=source.content_type,
    )


def decode_image(encoded: EncodedImage) -> bytes:
    try:
        return base64.b64decode(encoded.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageReadError(f"Invalid base64 image data: {e}") from e


def parse_data_url(value: str, default_mime_type: Optional[str] = None) -> EncodedImage:
    """
    Split a data:<mime>;base64,<payload> string into an EncodedImage.

    A bare base64 payload is accepted when default_mime_type is given.
    """
    value = value.strip()

    if value.startswith("data:"):
        header, sep, payload = value.partition(",")
        if not sep or ";base64" not in header:
            raise ImageReadError("Invalid data URL: expected data:<mime>;base64,<payload>")
        mime_type = header[len("data:"):].split(";")[0] or default_mime_type
    else:
        payload = value
        mime_type = default_mime_type

    if not mime_type:
        raise ImageReadError("Image content type is missing")
    if not payload:
        raise ImageReadError("Image data is empty")

    encoded = EncodedImage(data=payload, mime_type=mime_type)
    decode_image(encoded)
    return encoded
