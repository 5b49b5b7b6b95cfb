from __future__ import annotations

import base64
import binascii
from typing import Annotated

from pydantic import AfterValidator, Field

from .common import CamelModel


def _check_base64(v: str) -> str:
    try:
        base64.b64decode(v, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("data must be base64 encoded") from exc
    return v


Base64Data = Annotated[str, Field(min_length=1, description="Base64 payload"), AfterValidator(_check_base64)]


class VoiceNoteStart(CamelModel):
    """Begin a voice note; the browser says which container it records in."""
    mime_type: str = Field("audio/webm", pattern=r"^audio/[\w.+-]+(;[\w.+-]+=[\w.+-]+)*$")


class MediaChunk(CamelModel):
    """A piece of recorded media, base64 encoded."""
    data: Base64Data

    def payload(self) -> bytes:
        return base64.b64decode(self.data)


class PhotoCapture(CamelModel):
    """A camera frame to attach to one answer."""
    data: Base64Data
    mime_type: str = Field("image/jpeg", pattern=r"^image/[\w.+-]+$")
    comment: str = Field("", description="Inspector's caption")

    def payload(self) -> bytes:
        return base64.b64decode(self.data)
