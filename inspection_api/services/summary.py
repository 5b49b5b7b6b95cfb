"""
Summary service adapter.

Turns report content into prompts for the generation client and validates the
structured answers with the pydantic models in inspection_api.schemas.generation.
Any failure (transport error, empty answer, answer that does not fit the
schema) becomes a GenerationFailure; nothing is retried.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from inspection_api.core.errors import GenerationFailure, ValidationError
from inspection_api.schemas.generation import (
    AudioTranscriptionInput,
    AudioTranscriptionOutput,
    InspectionSummaryInput,
    InspectionSummaryOutput,
    ReportSummaryInput,
    ReportSummaryOutput,
    SuggestTagsInput,
    SuggestTagsOutput,
    TextToSpeechInput,
    TextToSpeechOutput,
    split_data_uri,
)
from inspection_api.schemas.inspection import CatalogAnswer, CustomAnswer, Inspection
from inspection_api.services.generation import GenerationClient, MediaPart, speech_to_wav

logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT", bound=BaseModel)

INSPECTION_SUMMARY_PROMPT = """You are an AI assistant specializing in summarizing inspection reports for quality assurance. Analyze the following information from an inspection report and generate both a short and a long summary in point form. Each point must be on a new line.

Checkpoints: {checkpoints}
General Comments: {general_comments}
Conformance Statement: {conformance_statement}
Next Steps: {next_steps}
Tags: {tags}

Short Summary: Provide a concise summary of the key findings and overall conformance status in 2-3 bullet points.

Long Summary: Provide a detailed summary of the inspection report as a bulleted list, including all relevant information. Include insights gleaned from the tags and the relative frequency of the different tags.

Output the short summary and long summary as specified in point form, each point starts with the character "-" to indicate a point, with each point on a new line."""

REPORT_SUMMARY_PROMPT = """You are an AI assistant writing the executive summary of a quality assurance inspection report. Using the information below, write one comprehensive summary of about 300 words in plain prose. Cover the overall conformance status, the most significant non-conformances and recurring issues indicated by the tags, and the recommended next steps.

Checkpoints: {checkpoints}
General Comments: {general_comments}
Conformance Statement: {conformance_statement}
Next Steps: {next_steps}
Tags: {tags}"""

SUGGEST_TAGS_PROMPT = """You are an AI assistant specializing in QA inspections, particularly in tagging non-conformance issues.

Given the following text describing a non-conformance, suggest relevant tags that can be used to categorize and track the issue.
Return ONLY the tags. Do not return any explanation or conversational text. Return tags as a JSON array of strings. Here is the non-conformance text:

{non_conformance_text}"""

TRANSCRIPTION_PROMPT = (
    "You are an expert transcriber and translator. Transcribe the following audio recording to text. "
    "After transcribing, you MUST translate the entire transcription into English. The final output "
    "should ONLY be the English translation of the transcribed text. The audio is a voice note from a "
    "quality assurance inspector about a product defect."
)


def _format_list(values: List[str]) -> str:
    return ", ".join(values)


class SummaryService:
    """
    Adapter between inspection reports and the generation client.

    Parameters:
        client: GenerationClient implementation (GeminiGenerationClient in production).
        generation_model: model used for summaries and tag suggestions.
        transcription_model: model used for voice notes.
        tts_model: speech synthesis model.
        tts_voice: prebuilt voice name for speech synthesis.
    """

    def __init__(
        self,
        client: GenerationClient,
        *,
        generation_model: str,
        transcription_model: str,
        tts_model: str,
        tts_voice: str,
    ) -> None:
        self.client = client
        self.generation_model = generation_model
        self.transcription_model = transcription_model
        self.tts_model = tts_model
        self.tts_voice = tts_voice

    async def _structured(
        self,
        operation: str,
        prompt: str,
        output_model: Type[OutputT],
        *,
        model: Optional[str] = None,
        media: Optional[MediaPart] = None,
    ) -> OutputT:
        try:
            text = await self.client.generate_json(
                model=model or self.generation_model,
                prompt=prompt,
                output_schema=output_model,
                media=media,
            )
        except Exception as exc:
            logger.warning("%s: generation call failed", operation, exc_info=True)
            raise GenerationFailure(f"{operation} failed: {exc}") from exc

        if not text or not text.strip():
            logger.warning("%s: generation returned no output", operation)
            raise GenerationFailure(f"{operation} failed: the model did not return any output")

        try:
            return output_model.model_validate_json(text)
        except PydanticValidationError as exc:
            logger.warning("%s: output did not match %s", operation, output_model.__name__, exc_info=True)
            raise GenerationFailure(
                f"{operation} failed: the model returned malformed output",
                details=json.loads(exc.json(include_url=False)),
            ) from exc

    # PUBLIC_INTERFACE
    async def generate_inspection_summary(self, data: InspectionSummaryInput) -> InspectionSummaryOutput:
        """Short (2-3 points) and long point-form summaries of a report."""
        prompt = INSPECTION_SUMMARY_PROMPT.format(
            checkpoints=_format_list(data.checkpoints),
            general_comments=data.general_comments,
            conformance_statement=data.conformance_statement,
            next_steps=data.next_steps,
            tags=_format_list(data.tags),
        )
        return await self._structured("Inspection summary", prompt, InspectionSummaryOutput)

    # PUBLIC_INTERFACE
    async def generate_report_summary(self, data: ReportSummaryInput) -> ReportSummaryOutput:
        """One prose summary of roughly 300 words."""
        prompt = REPORT_SUMMARY_PROMPT.format(
            checkpoints=_format_list(data.checkpoints),
            general_comments=data.general_comments,
            conformance_statement=data.conformance_statement,
            next_steps=data.next_steps,
            tags=_format_list(data.tags),
        )
        return await self._structured("Report summary", prompt, ReportSummaryOutput)

    # PUBLIC_INTERFACE
    async def suggest_tags_for_non_conformance(self, data: SuggestTagsInput) -> SuggestTagsOutput:
        """Tags categorizing a non-conformance note."""
        prompt = SUGGEST_TAGS_PROMPT.format(non_conformance_text=data.non_conformance_text)
        return await self._structured("Tag suggestion", prompt, SuggestTagsOutput)

    # PUBLIC_INTERFACE
    async def transcribe_audio(self, data: AudioTranscriptionInput) -> AudioTranscriptionOutput:
        """Transcribe a voice note and translate it into English."""
        mime_type, payload = split_data_uri(data.audio_data_uri)
        try:
            audio = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(
                "audioDataUri is not valid base64", details={"field": "audioDataUri"}
            ) from exc
        return await self._structured(
            "Transcription",
            TRANSCRIPTION_PROMPT,
            AudioTranscriptionOutput,
            model=self.transcription_model,
            media=MediaPart(mime_type=mime_type, data=audio),
        )

    # PUBLIC_INTERFACE
    async def synthesize_speech(self, data: TextToSpeechInput) -> TextToSpeechOutput:
        """Read text aloud; returns a WAV data URI."""
        try:
            audio = await self.client.generate_speech(
                model=self.tts_model, text=data.text_to_synthesize, voice=self.tts_voice
            )
        except Exception as exc:
            logger.warning("Speech synthesis: generation call failed", exc_info=True)
            raise GenerationFailure(f"Speech synthesis failed: {exc}") from exc
        if audio is None or not audio.data:
            logger.warning("Speech synthesis: generation returned no audio")
            raise GenerationFailure("Speech synthesis failed: the model did not return any audio")
        wav = speech_to_wav(audio)
        return TextToSpeechOutput(
            audio_data_uri="data:audio/wav;base64," + base64.b64encode(wav).decode("ascii")
        )

    # Report write-back

    @staticmethod
    def build_summary_input(inspection: Inspection) -> InspectionSummaryInput:
        """Checkpoint lines and unique tags (first-seen order) for an inspection."""
        tags: List[str] = []
        for tag in inspection.all_tags():
            if tag not in tags:
                tags.append(tag)
        return InspectionSummaryInput(
            checkpoints=[
                f"Status: {answer.status.value}, Notes: {answer.notes}"
                for answer in inspection.checkpoints
            ],
            general_comments=inspection.general_comments,
            conformance_statement=inspection.conformance_statement,
            next_steps=inspection.next_steps,
            tags=tags,
        )

    # PUBLIC_INTERFACE
    async def summarize_inspection(self, inspection: Inspection) -> Inspection:
        """
        Generate and store the short/long summaries on the inspection.

        The inspection is modified in place only after the generation succeeds;
        on GenerationFailure both summary fields keep their previous values.
        """
        output = await self.generate_inspection_summary(self.build_summary_input(inspection))
        inspection.short_summary = output.short_summary
        inspection.long_summary = output.long_summary
        return inspection

    # PUBLIC_INTERFACE
    async def suggest_tags_for_answer(
        self, answer: Union[CatalogAnswer, CustomAnswer]
    ) -> List[str]:
        """
        Ask for tags from the answer's notes and append the ones it lacks.

        Returns:
            The tags that were added.
        Raises:
            ValidationError: the answer has no notes to work from.
        """
        notes = answer.notes.strip()
        if not notes:
            raise ValidationError(
                "Please enter some notes to suggest tags.", details={"field": "notes"}
            )
        output = await self.suggest_tags_for_non_conformance(
            SuggestTagsInput(non_conformance_text=notes)
        )
        added = [tag for tag in output.suggested_tags if tag not in answer.tags]
        answer.tags.extend(added)
        return added
