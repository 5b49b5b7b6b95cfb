"""
Client for the hosted language model.

Everything here is transport: requests go out as prompt text (plus optional
media), answers come back as raw JSON text or audio bytes. Prompt wording and
output validation live in inspection_api.services.summary.
"""
from __future__ import annotations

import io
import logging
import re
import wave
from dataclasses import dataclass
from typing import Optional, Protocol, Type

from google import genai
from google.genai import types
from pydantic import BaseModel

logger = logging.getLogger(__name__)

_PCM_RATE = re.compile(r"rate=(\d+)")


@dataclass(frozen=True)
class MediaPart:
    """Binary attachment sent alongside a prompt (e.g. a voice note)."""
    mime_type: str
    data: bytes


@dataclass(frozen=True)
class SpeechAudio:
    """Audio returned by the speech model."""
    mime_type: str
    data: bytes


class GenerationClient(Protocol):
    """The generation service as seen by the summary adapter."""

    async def generate_json(
        self,
        *,
        model: str,
        prompt: str,
        output_schema: Type[BaseModel],
        media: Optional[MediaPart] = None,
    ) -> Optional[str]:
        ...

    async def generate_speech(self, *, model: str, text: str, voice: str) -> Optional[SpeechAudio]:
        ...


class GeminiGenerationClient:
    """
    GenerationClient backed by the Google GenAI SDK.

    The SDK client is created on first use so the API can start without a key;
    a missing key then surfaces as an error on the first generation call.
    """

    def __init__(self, api_key: Optional[str] = None) -> None:
        self._api_key = api_key
        self._client: Optional[genai.Client] = None

    def _sdk(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate_json(
        self,
        *,
        model: str,
        prompt: str,
        output_schema: Type[BaseModel],
        media: Optional[MediaPart] = None,
    ) -> Optional[str]:
        contents: list = [prompt]
        if media is not None:
            contents.append(types.Part.from_bytes(data=media.data, mime_type=media.mime_type))
        response = await self._sdk().aio.models.generate_content(
            model=model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=output_schema,
                temperature=0.3,
            ),
        )
        return response.text

    async def generate_speech(self, *, model: str, text: str, voice: str) -> Optional[SpeechAudio]:
        response = await self._sdk().aio.models.generate_content(
            model=model,
            contents=text,
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice)
                    )
                ),
            ),
        )
        for candidate in response.candidates or []:
            for part in (candidate.content.parts if candidate.content else None) or []:
                if part.inline_data is not None and part.inline_data.data:
                    return SpeechAudio(
                        mime_type=part.inline_data.mime_type or "audio/L16;rate=24000",
                        data=part.inline_data.data,
                    )
        return None


# PUBLIC_INTERFACE
def pcm_to_wav(pcm: bytes, *, rate: int = 24000, channels: int = 1, sample_width: int = 2) -> bytes:
    """Wrap raw little-endian PCM samples in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(rate)
        wav.writeframes(pcm)
    return buffer.getvalue()


# PUBLIC_INTERFACE
def speech_to_wav(audio: SpeechAudio) -> bytes:
    """Return WAV bytes for speech output, converting raw PCM (audio/L16) when needed."""
    if audio.mime_type.startswith("audio/wav") or audio.mime_type.startswith("audio/x-wav"):
        return audio.data
    match = _PCM_RATE.search(audio.mime_type)
    rate = int(match.group(1)) if match else 24000
    return pcm_to_wav(audio.data, rate=rate)
