import base64
import io
import json
import wave

import pytest

from inspection_api.core.errors import GenerationFailure, ValidationError
from inspection_api.db.seed import demo_inspections
from inspection_api.schemas.generation import (
    AudioTranscriptionInput,
    InspectionSummaryInput,
    ReportSummaryInput,
    SuggestTagsInput,
    TextToSpeechInput,
)
from inspection_api.services.generation import SpeechAudio, speech_to_wav
from inspection_api.services.summary import SummaryService


def test_build_summary_input_from_inspection(summary_service: SummaryService) -> None:
    inspection = demo_inspections()[0]
    data = summary_service.build_summary_input(inspection)

    assert data.checkpoints[0] == "Status: Conform, Notes: Carton is in good condition, no visible damage."
    assert data.checkpoints[2].startswith("Status: Non-Conform, Notes: Minor scratch")
    assert data.tags == ["finish", "cosmetic", "scratch"]
    assert data.general_comments == inspection.general_comments


def test_build_summary_input_dedupes_tags(summary_service: SummaryService) -> None:
    inspection = demo_inspections()[1]
    inspection.checkpoints[0].tags = ["specification", "labels"]
    data = summary_service.build_summary_input(inspection)
    assert data.tags == ["specification", "labels", "measurement"]


@pytest.mark.asyncio
async def test_generate_inspection_summary_formats_prompt(summary_service, generation) -> None:
    out = await summary_service.generate_inspection_summary(
        InspectionSummaryInput(
            checkpoints=["Status: Conform, Notes: ok"],
            general_comments="Good batch.",
            conformance_statement="Conforms.",
            next_steps="Ship.",
            tags=["finish", "scratch"],
        )
    )
    assert out.short_summary == "- Short point"
    call = generation.calls[-1]
    assert call["model"] == "gen-model"
    assert "General Comments: Good batch." in call["prompt"]
    assert "Tags: finish, scratch" in call["prompt"]
    assert call["schema"] == "InspectionSummaryOutput"


@pytest.mark.asyncio
async def test_summarize_inspection_writes_summaries(summary_service) -> None:
    inspection = demo_inspections()[1]
    await summary_service.summarize_inspection(inspection)
    assert inspection.short_summary == "- Short point"
    assert inspection.long_summary == "- Long point one\n- Long point two"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    ["error", "empty", "malformed", "missing_field"],
)
async def test_generation_failure_leaves_summaries_unchanged(summary_service, generation, failure) -> None:
    if failure == "error":
        generation.error = RuntimeError("quota exceeded")
    elif failure == "empty":
        generation.responses["InspectionSummaryOutput"] = None
    elif failure == "malformed":
        generation.responses["InspectionSummaryOutput"] = "not json"
    else:
        generation.responses["InspectionSummaryOutput"] = json.dumps({"shortSummary": "- only short"})

    inspection = demo_inspections()[0]
    before = (inspection.short_summary, inspection.long_summary)

    with pytest.raises(GenerationFailure):
        await summary_service.summarize_inspection(inspection)

    assert (inspection.short_summary, inspection.long_summary) == before


@pytest.mark.asyncio
async def test_generate_report_summary(summary_service, generation) -> None:
    out = await summary_service.generate_report_summary(ReportSummaryInput(checkpoints=[], tags=[]))
    assert out.summary == "Overall the product conforms."
    assert "about 300 words" in generation.calls[-1]["prompt"]


@pytest.mark.asyncio
async def test_suggest_tags_for_non_conformance(summary_service, generation) -> None:
    generation.responses["SuggestTagsOutput"] = json.dumps({"suggestedTags": [" width ", "width", "", "tolerance"]})
    out = await summary_service.suggest_tags_for_non_conformance(
        SuggestTagsInput(non_conformance_text="Table width is 2cm over tolerance.")
    )
    assert out.suggested_tags == ["width", "tolerance"]
    assert "Table width is 2cm over tolerance." in generation.calls[-1]["prompt"]


@pytest.mark.asyncio
async def test_suggest_tags_for_answer_appends_new_tags_only(summary_service) -> None:
    answer = demo_inspections()[0].checkpoints[2]
    added = await summary_service.suggest_tags_for_answer(answer)
    assert added == ["handling"]
    assert answer.tags == ["finish", "cosmetic", "scratch", "handling"]


@pytest.mark.asyncio
async def test_suggest_tags_for_answer_requires_notes(summary_service, generation) -> None:
    answer = demo_inspections()[1].checkpoints[0]
    with pytest.raises(ValidationError):
        await summary_service.suggest_tags_for_answer(answer)
    assert generation.calls == []


@pytest.mark.asyncio
async def test_transcribe_audio_sends_media(summary_service, generation) -> None:
    audio = b"OggS-voice-note"
    uri = "data:audio/webm;codecs=opus;base64," + base64.b64encode(audio).decode()
    out = await summary_service.transcribe_audio(AudioTranscriptionInput(audio_data_uri=uri))

    assert out.transcription == "Scratch on the left leg."
    call = generation.calls[-1]
    assert call["model"] == "stt-model"
    assert call["media"].mime_type == "audio/webm;codecs=opus"
    assert call["media"].data == audio
    assert "translate" in call["prompt"]


def test_transcription_input_requires_audio_data_uri() -> None:
    with pytest.raises(ValueError):
        AudioTranscriptionInput(audio_data_uri="https://example.com/note.webm")
    with pytest.raises(ValueError):
        AudioTranscriptionInput(audio_data_uri="data:image/png;base64,AAAA")


@pytest.mark.asyncio
async def test_synthesize_speech_returns_wav(summary_service, generation) -> None:
    out = await summary_service.synthesize_speech(TextToSpeechInput(text_to_synthesize="Inspection complete."))

    assert out.audio_data_uri.startswith("data:audio/wav;base64,")
    wav_bytes = base64.b64decode(out.audio_data_uri.split(",", 1)[1])
    with wave.open(io.BytesIO(wav_bytes)) as wav:
        assert wav.getframerate() == 24000
        assert wav.getnchannels() == 1
        assert wav.getsampwidth() == 2
        assert wav.getnframes() == 480
    assert generation.calls[-1]["voice"] == "Algenib"


@pytest.mark.asyncio
async def test_synthesize_speech_without_audio_fails(summary_service, generation) -> None:
    generation.speech = None
    with pytest.raises(GenerationFailure):
        await summary_service.synthesize_speech(TextToSpeechInput(text_to_synthesize="Hello"))


def test_speech_to_wav_reads_rate_and_passes_wav_through() -> None:
    wav = speech_to_wav(SpeechAudio(mime_type="audio/L16;rate=16000", data=b"\x00\x00" * 10))
    with wave.open(io.BytesIO(wav)) as parsed:
        assert parsed.getframerate() == 16000
    assert speech_to_wav(SpeechAudio(mime_type="audio/wav", data=b"RIFF....")) == b"RIFF...."
