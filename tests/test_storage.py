import json

import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inspection_api.db.base import Base
from inspection_api.db import models  # noqa: F401
from inspection_api.db.run_migrations import main as run_alembic
from inspection_api.db.seed import demo_catalog, demo_inspections, seed_all
from inspection_api.services.catalog_store import CatalogStore
from inspection_api.services.ids import SequentialIdGenerator
from inspection_api.services.inspection_store import InspectionStore
from inspection_api.services.storage import DatabaseBlobStorage, MemoryBlobStorage


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    engine.dispose()


def test_database_storage_put_and_overwrite(session_factory) -> None:
    storage = DatabaseBlobStorage(session_factory)
    assert storage.load("inspection-store") is None

    storage.save("inspection-store", '{"a": 1}')
    storage.save("inspection-store", '{"a": 2}')
    assert storage.load("inspection-store") == '{"a": 2}'


def test_stores_survive_reconstruction_on_database(session_factory) -> None:
    storage = DatabaseBlobStorage(session_factory)
    inspections = InspectionStore(storage, seed=demo_inspections())
    inspections.finalize_inspection("insp-002")
    catalog = CatalogStore(storage, id_generator=SequentialIdGenerator(), seed=demo_catalog())
    catalog.delete_checkpoint("chk-1")

    fresh = DatabaseBlobStorage(session_factory)
    reloaded = InspectionStore(fresh)
    assert reloaded.get_inspection("insp-002").is_completed
    assert [i.id for i in reloaded.list_inspections()] == ["insp-001", "insp-002", "insp-003"]
    assert CatalogStore(fresh, id_generator=SequentialIdGenerator()).get_checkpoint("chk-1") is None


def test_seed_all_writes_missing_keys_only(monkeypatch) -> None:
    monkeypatch.setenv("INSPECTION_STORAGE_KEY", "inspection-store")
    monkeypatch.setenv("CATALOG_STORAGE_KEY", "catalog-store")
    storage = MemoryBlobStorage({"catalog-store": json.dumps({"clients": ["Only One"]})})

    seed_all(storage)

    assert json.loads(storage.blobs["catalog-store"]) == {"clients": ["Only One"]}
    envelope = json.loads(storage.blobs["inspection-store"])
    assert [i["id"] for i in envelope["state"]["inspections"]] == ["insp-001", "insp-002", "insp-003"]


def test_migrations_create_state_table(tmp_path, monkeypatch) -> None:
    url = f"sqlite:///{tmp_path / 'state.db'}"
    monkeypatch.setenv("DATABASE_URL", url)

    run_alembic(["upgrade", "head"])

    engine = create_engine(url)
    try:
        assert "app_state" in inspect(engine).get_table_names()
        storage = DatabaseBlobStorage(sessionmaker(bind=engine))
        storage.save("catalog-store", "{}")
        assert storage.load("catalog-store") == "{}"
    finally:
        engine.dispose()
