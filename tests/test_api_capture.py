import base64

from fastapi.testclient import TestClient

from inspection_api.api.main import create_app
from inspection_api.core.settings import AppSettings
from inspection_api.services.storage import MemoryBlobStorage


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def test_voice_note_is_transcribed(client: TestClient, auth_headers, generation) -> None:
    start = client.post(
        "/api/v1/capture/voice-notes/start", json={"mimeType": "audio/ogg"}, headers=auth_headers
    )
    assert start.status_code == 200
    for chunk in (b"voice-", b"note"):
        res = client.post("/api/v1/capture/voice-notes/chunks", json={"data": _b64(chunk)}, headers=auth_headers)
        assert res.json()["details"] == {"bytes": len(chunk)}

    res = client.post("/api/v1/capture/voice-notes/stop", headers=auth_headers)
    assert res.status_code == 200
    assert res.json() == {"transcription": "Scratch on the left leg."}

    media = generation.calls[-1]["media"]
    assert media.mime_type == "audio/ogg"
    assert media.data == b"voice-note"
    assert client.app.state.voice_recorder.recording is False


def test_second_start_is_busy(client: TestClient, auth_headers) -> None:
    assert client.post("/api/v1/capture/voice-notes/start", json={}, headers=auth_headers).status_code == 200
    res = client.post("/api/v1/capture/voice-notes/start", json={}, headers=auth_headers)
    assert res.status_code == 503
    assert res.json()["error"]["details"]["reason"] == "busy"

    assert client.post("/api/v1/capture/voice-notes/cancel", headers=auth_headers).status_code == 200
    assert client.post("/api/v1/capture/voice-notes/start", json={}, headers=auth_headers).status_code == 200


def test_chunks_need_a_running_voice_note(client: TestClient, auth_headers) -> None:
    res = client.post("/api/v1/capture/voice-notes/chunks", json={"data": _b64(b"x")}, headers=auth_headers)
    assert res.status_code == 503
    assert res.json()["error"]["type"] == "device_access_error"
    assert client.post("/api/v1/capture/voice-notes/stop", headers=auth_headers).status_code == 503


def test_empty_voice_note_releases_microphone(client: TestClient, auth_headers) -> None:
    client.post("/api/v1/capture/voice-notes/start", json={}, headers=auth_headers)
    res = client.post("/api/v1/capture/voice-notes/stop", headers=auth_headers)
    assert res.status_code == 503
    assert res.json()["error"]["message"] == "No audio was recorded"
    assert client.post("/api/v1/capture/voice-notes/start", json={}, headers=auth_headers).status_code == 200


def test_chunk_must_be_base64(client: TestClient, auth_headers) -> None:
    client.post("/api/v1/capture/voice-notes/start", json={}, headers=auth_headers)
    res = client.post("/api/v1/capture/voice-notes/chunks", json={"data": "not base64!"}, headers=auth_headers)
    assert res.status_code == 422


def test_attach_photo_to_answer(client: TestClient, auth_headers) -> None:
    res = client.post(
        "/api/v1/inspections/insp-002/checkpoints/chk-10/photos",
        json={"data": _b64(b"\x89PNG"), "mimeType": "image/png", "comment": "Tape measure"},
        headers=auth_headers,
    )
    assert res.status_code == 201
    answer = next(a for a in res.json()["checkpoints"] if a["checkpointId"] == "chk-10")
    assert answer["images"] == [{"src": "data:image/png;base64," + _b64(b"\x89PNG"), "comment": "Tape measure"}]

    locked = client.post(
        "/api/v1/inspections/insp-001/checkpoints/chk-5/photos", json={"data": _b64(b"x")}, headers=auth_headers
    )
    assert locked.status_code == 409


def test_disabled_camera_is_reported(generation) -> None:
    settings = AppSettings(
        _env_file=None,
        RUN_MIGRATIONS_ON_STARTUP=False,
        STORAGE_BACKEND="memory",
        CAPTURE_DEVICES=["microphone"],
    )
    app = create_app(settings, storage=MemoryBlobStorage(), generation_client=generation)
    with TestClient(app) as client:
        token = client.post(
            "/api/v1/auth/login", data={"username": "admin@inspectai.com", "password": "admin123"}
        ).json()["access_token"]
        res = client.post(
            "/api/v1/inspections/insp-002/checkpoints/chk-10/photos",
            json={"data": _b64(b"frame")},
            headers={"Authorization": f"Bearer {token}"},
        )
    assert res.status_code == 503
    assert res.json()["error"]["details"] == {"device": "camera", "reason": "permission_denied"}
