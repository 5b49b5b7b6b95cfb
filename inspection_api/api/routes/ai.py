from __future__ import annotations

from fastapi import APIRouter, Depends

from inspection_api.core.deps import get_summary_service
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
)
from inspection_api.services.summary import SummaryService

router = APIRouter(prefix="/ai", tags=["AI"])

_GENERATION_ERRORS = {502: {"description": "The generation service failed or returned unusable output"}}


# PUBLIC_INTERFACE
@router.post(
    "/audio-transcription",
    response_model=AudioTranscriptionOutput,
    summary="Transcribe voice note",
    description="Transcribe a base64 audio data URI and translate the text into English.",
    responses=_GENERATION_ERRORS,
)
async def audio_transcription(
    payload: AudioTranscriptionInput, summaries: SummaryService = Depends(get_summary_service)
) -> AudioTranscriptionOutput:
    return await summaries.transcribe_audio(payload)


# PUBLIC_INTERFACE
@router.post(
    "/generate-inspection-summary",
    response_model=InspectionSummaryOutput,
    summary="Short and long summary",
    description="Point-form short (2-3 points) and long summaries of report content.",
    responses=_GENERATION_ERRORS,
)
async def generate_inspection_summary(
    payload: InspectionSummaryInput, summaries: SummaryService = Depends(get_summary_service)
) -> InspectionSummaryOutput:
    return await summaries.generate_inspection_summary(payload)


# PUBLIC_INTERFACE
@router.post(
    "/generate-report-summary",
    response_model=ReportSummaryOutput,
    summary="Report summary",
    description="A single prose summary of about 300 words.",
    responses=_GENERATION_ERRORS,
)
async def generate_report_summary(
    payload: ReportSummaryInput, summaries: SummaryService = Depends(get_summary_service)
) -> ReportSummaryOutput:
    return await summaries.generate_report_summary(payload)


# PUBLIC_INTERFACE
@router.post(
    "/suggest-tags-for-non-conformance",
    response_model=SuggestTagsOutput,
    summary="Suggest tags",
    description="Tags to categorize a non-conformance note.",
    responses=_GENERATION_ERRORS,
)
async def suggest_tags_for_non_conformance(
    payload: SuggestTagsInput, summaries: SummaryService = Depends(get_summary_service)
) -> SuggestTagsOutput:
    return await summaries.suggest_tags_for_non_conformance(payload)


# PUBLIC_INTERFACE
@router.post(
    "/text-to-speech",
    response_model=TextToSpeechOutput,
    summary="Read text aloud",
    description="Synthesize speech and return it as a WAV data URI.",
    responses=_GENERATION_ERRORS,
)
async def text_to_speech(
    payload: TextToSpeechInput, summaries: SummaryService = Depends(get_summary_service)
) -> TextToSpeechOutput:
    return await summaries.synthesize_speech(payload)
