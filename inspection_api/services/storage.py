from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

from sqlalchemy.orm import Session, sessionmaker

from inspection_api.db.session import session_scope
from inspection_api.repositories.state import StateRepository

logger = logging.getLogger(__name__)


class BlobStorage(Protocol):
    """Durable keyed storage for one serialized blob per store."""

    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, value: str) -> None:
        ...


class DatabaseBlobStorage:
    """
    BlobStorage backed by the app_state table.

    Each call runs in its own short transaction so a store mutation is durable
    as soon as save() returns.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def load(self, key: str) -> Optional[str]:
        with session_scope(self._session_factory) as session:
            return StateRepository(session).get_value(key)

    def save(self, key: str, value: str) -> None:
        with session_scope(self._session_factory) as session:
            StateRepository(session).put_value(key, value)
        logger.debug("Persisted %s (%d bytes)", key, len(value))


class MemoryBlobStorage:
    """BlobStorage kept in a dict; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.blobs: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def save(self, key: str, value: str) -> None:
        self.blobs[key] = value
