from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from inspection_api.core.deps import get_device_provider, get_summary_service, get_voice_recorder
from inspection_api.core.errors import DeviceAccessError
from inspection_api.schemas.capture import MediaChunk, VoiceNoteStart
from inspection_api.schemas.common import MessageResponse
from inspection_api.schemas.generation import AudioTranscriptionInput, AudioTranscriptionOutput
from inspection_api.services.capture import AudioRecorder, DeviceKind, StreamedDeviceProvider
from inspection_api.services.summary import SummaryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/capture", tags=["Capture"])

_DEVICE_ERRORS = {503: {"description": "The microphone is disabled, busy, or not recording"}}


# PUBLIC_INTERFACE
@router.post(
    "/voice-notes/start",
    response_model=MessageResponse,
    summary="Start voice note",
    description="Take the microphone and start collecting audio chunks posted by the browser.",
    responses=_DEVICE_ERRORS,
)
def start_voice_note(
    payload: VoiceNoteStart,
    devices: StreamedDeviceProvider = Depends(get_device_provider),
    recorder: AudioRecorder = Depends(get_voice_recorder),
) -> MessageResponse:
    if recorder.recording:
        raise DeviceAccessError(
            "A voice note is already being recorded",
            details={"device": DeviceKind.MICROPHONE.value, "reason": "busy"},
        )
    devices.set_format(DeviceKind.MICROPHONE, payload.mime_type)
    recorder.start()
    return MessageResponse(message="Recording", details={"mimeType": payload.mime_type})


# PUBLIC_INTERFACE
@router.post(
    "/voice-notes/chunks",
    response_model=MessageResponse,
    summary="Append audio",
    description="Add one chunk of recorded audio to the running voice note.",
    responses=_DEVICE_ERRORS,
)
def append_voice_note_chunk(
    payload: MediaChunk,
    devices: StreamedDeviceProvider = Depends(get_device_provider),
    recorder: AudioRecorder = Depends(get_voice_recorder),
) -> MessageResponse:
    if not recorder.recording:
        raise DeviceAccessError(
            "No voice note is being recorded",
            details={"device": DeviceKind.MICROPHONE.value, "reason": "not_recording"},
        )
    devices.push(DeviceKind.MICROPHONE, payload.payload())
    chunk = recorder.capture()
    return MessageResponse(message="Chunk received", details={"bytes": len(chunk)})


# PUBLIC_INTERFACE
@router.post(
    "/voice-notes/stop",
    response_model=AudioTranscriptionOutput,
    summary="Stop and transcribe",
    description=(
        "Release the microphone and transcribe the recording into English. "
        "The recording is gone afterwards, whether or not transcription succeeds."
    ),
    responses={**_DEVICE_ERRORS, 502: {"description": "Transcription failed"}},
)
async def stop_voice_note(
    recorder: AudioRecorder = Depends(get_voice_recorder),
    summaries: SummaryService = Depends(get_summary_service),
) -> AudioTranscriptionOutput:
    if not recorder.recording:
        raise DeviceAccessError(
            "No voice note is being recorded",
            details={"device": DeviceKind.MICROPHONE.value, "reason": "not_recording"},
        )
    audio_data_uri = recorder.stop()
    logger.info("Voice note recorded (%d characters encoded)", len(audio_data_uri))
    return await summaries.transcribe_audio(AudioTranscriptionInput(audio_data_uri=audio_data_uri))


# PUBLIC_INTERFACE
@router.post(
    "/voice-notes/cancel",
    response_model=MessageResponse,
    summary="Cancel voice note",
    description="Release the microphone and discard anything recorded.",
)
def cancel_voice_note(recorder: AudioRecorder = Depends(get_voice_recorder)) -> MessageResponse:
    recorder.cancel()
    return MessageResponse(message="Recording discarded")
