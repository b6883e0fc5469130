"""Image payload validation via Pillow."""

from __future__ import annotations

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError
from .models import ImageInfo


def decode_image(data: bytes, locator: str = "<memory>") -> ImageInfo:
    if not data:
        raise DecodeError(locator, "Empty image payload")
    try:
        with Image.open(BytesIO(data)) as img:
            info = ImageInfo(format=str(img.format or "unknown"), width=img.width, height=img.height)
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(locator, f"Unreadable image payload: {exc}") from exc
    return info

