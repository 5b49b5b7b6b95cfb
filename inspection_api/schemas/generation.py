from __future__ import annotations

import re
from typing import List

from pydantic import Field, field_validator

from .common import CamelModel

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+(?:;[\w.+-]+=[\w.+-]+)*);base64,(?P<data>.+)$", re.S)


class InspectionSummaryInput(CamelModel):
    """Report content the summaries are written from."""
    checkpoints: List[str] = Field(..., description="The list of checkpoints from the inspection report.")
    general_comments: str = Field("", description="General comments from the inspection report.")
    conformance_statement: str = Field("", description="Conformance statement from the inspection report.")
    next_steps: str = Field("", description="Next steps from the inspection report.")
    tags: List[str] = Field(default_factory=list, description="List of tags associated with the inspection report.")


class InspectionSummaryOutput(CamelModel):
    short_summary: str = Field(
        ...,
        min_length=1,
        description=(
            "A short summary of the inspection report in point form. Each point must be on a new "
            'line, each point starts with the character "-" to indicate a point.'
        ),
    )
    long_summary: str = Field(
        ...,
        min_length=1,
        description=(
            "A long summary of the inspection report in point form. Each point must be on a new "
            'line, each point starts with the character "-" to indicate a point.'
        ),
    )


class ReportSummaryInput(InspectionSummaryInput):
    """Same report content as the short/long summary."""


class ReportSummaryOutput(CamelModel):
    summary: str = Field(..., min_length=1, description="A comprehensive summary of the inspection report.")


class SuggestTagsInput(CamelModel):
    non_conformance_text: str = Field(
        ...,
        min_length=1,
        description="The text describing the non-conformance issue noted during the QA inspection checkpoint.",
    )


class SuggestTagsOutput(CamelModel):
    suggested_tags: List[str] = Field(
        ..., description="An array of suggested tags relevant to the non-conformance issue."
    )

    @field_validator("suggested_tags")
    @classmethod
    def _clean_tags(cls, v: List[str]) -> List[str]:
        cleaned: List[str] = []
        for tag in v:
            tag = tag.strip()
            if tag and tag not in cleaned:
                cleaned.append(tag)
        return cleaned


class AudioTranscriptionInput(CamelModel):
    audio_data_uri: str = Field(
        ...,
        description=(
            "The audio recording as a data URI that must include a MIME type and use Base64 "
            "encoding. Expected format: 'data:<mimetype>;base64,<encoded_data>'."
        ),
    )

    @field_validator("audio_data_uri")
    @classmethod
    def _check_data_uri(cls, v: str) -> str:
        if not _DATA_URI.match(v) or not v.startswith("data:audio/"):
            raise ValueError("audioDataUri must be a base64 'data:audio/...' URI")
        return v


class AudioTranscriptionOutput(CamelModel):
    transcription: str = Field(
        ..., min_length=1, description="The transcribed text from the audio recording, translated into English."
    )


class TextToSpeechInput(CamelModel):
    text_to_synthesize: str = Field(..., min_length=1, description="Text to read aloud.")


class TextToSpeechOutput(CamelModel):
    audio_data_uri: str = Field(..., description="WAV audio as a base64 data URI.")


# PUBLIC_INTERFACE
def split_data_uri(uri: str) -> tuple[str, str]:
    """
    Split a base64 data URI into (mime_type, base64_payload).

    Raises:
        ValueError: when the value is not a base64 data URI.
    """
    match = _DATA_URI.match(uri)
    if not match:
        raise ValueError("Not a base64 data URI")
    return match.group("mime"), match.group("data")
