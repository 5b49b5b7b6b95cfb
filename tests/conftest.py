from __future__ import annotations

import asyncio
import datetime as dt
import json
from collections.abc import Generator
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from inspection_api.api.main import create_app
from inspection_api.core.settings import AppSettings
from inspection_api.db.seed import demo_catalog, demo_inspections, demo_products
from inspection_api.schemas.inspection import Inspector
from inspection_api.services.catalog_store import CatalogStore
from inspection_api.services.generation import MediaPart, SpeechAudio
from inspection_api.services.ids import SequentialIdGenerator
from inspection_api.services.inspection_store import InspectionStore
from inspection_api.services.products import ProductCatalog
from inspection_api.services.report_assembly import ReportAssembler
from inspection_api.services.storage import MemoryBlobStorage
from inspection_api.services.summary import SummaryService

FIXED_TODAY = dt.date(2024, 8, 10)


class FakeGenerationClient:
    """Stands in for the hosted model: answers are canned per output schema name."""

    def __init__(self) -> None:
        self.responses: Dict[str, Optional[str]] = {
            "InspectionSummaryOutput": json.dumps(
                {"shortSummary": "- Short point", "longSummary": "- Long point one\n- Long point two"}
            ),
            "ReportSummaryOutput": json.dumps({"summary": "Overall the product conforms."}),
            "SuggestTagsOutput": json.dumps({"suggestedTags": ["scratch", "finish", "handling"]}),
            "AudioTranscriptionOutput": json.dumps({"transcription": "Scratch on the left leg."}),
        }
        self.speech: Optional[SpeechAudio] = SpeechAudio(
            mime_type="audio/L16;codec=pcm;rate=24000", data=b"\x00\x01" * 480
        )
        self.error: Optional[Exception] = None
        self.calls: List[dict] = []
        # When set, calls wait on it so tests can act while a request is in flight.
        self.gate: Optional[asyncio.Event] = None
        self.waiting = asyncio.Event()

    async def _wait_for_gate(self) -> None:
        if self.gate is not None:
            self.waiting.set()
            await self.gate.wait()

    async def generate_json(self, *, model, prompt, output_schema, media: Optional[MediaPart] = None):
        self.calls.append({"model": model, "prompt": prompt, "schema": output_schema.__name__, "media": media})
        await self._wait_for_gate()
        if self.error is not None:
            raise self.error
        return self.responses.get(output_schema.__name__)

    async def generate_speech(self, *, model, text, voice):
        self.calls.append({"model": model, "text": text, "voice": voice})
        await self._wait_for_gate()
        if self.error is not None:
            raise self.error
        return self.speech


@pytest.fixture()
def generation() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture()
def summary_service(generation: FakeGenerationClient) -> SummaryService:
    return SummaryService(
        generation,
        generation_model="gen-model",
        transcription_model="stt-model",
        tts_model="tts-model",
        tts_voice="Algenib",
    )


@pytest.fixture()
def storage() -> MemoryBlobStorage:
    return MemoryBlobStorage()


@pytest.fixture()
def catalog(storage: MemoryBlobStorage) -> CatalogStore:
    return CatalogStore(storage, id_generator=SequentialIdGenerator(), seed=demo_catalog())


@pytest.fixture()
def inspection_store(storage: MemoryBlobStorage) -> InspectionStore:
    return InspectionStore(storage, seed=demo_inspections())


@pytest.fixture()
def assembler(catalog: CatalogStore) -> ReportAssembler:
    return ReportAssembler(
        catalog,
        ProductCatalog(demo_products()),
        id_generator=SequentialIdGenerator(),
        inspector=Inspector(name="Jane Doe", avatar="user-avatar-1"),
        today=lambda: FIXED_TODAY,
    )


@pytest.fixture()
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        RUN_MIGRATIONS_ON_STARTUP=False,
        STORAGE_BACKEND="memory",
        SEED_DEMO_DATA=True,
    )


@pytest.fixture()
def app(settings: AppSettings, storage: MemoryBlobStorage, generation: FakeGenerationClient):
    return create_app(
        settings,
        storage=storage,
        generation_client=generation,
        id_generator=SequentialIdGenerator(),
        today=lambda: FIXED_TODAY,
    )


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(client: TestClient) -> Dict[str, str]:
    res = client.post(
        "/api/v1/auth/login",
        data={"username": "admin@inspectai.com", "password": "admin123"},
    )
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['access_token']}"}
