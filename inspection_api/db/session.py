from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings


_ENGINE: Engine | None = None
_SESSION_MAKER: sessionmaker[Session] | None = None


def _ensure_engine_initialized() -> None:
    """
    Lazily initialize the Engine and session maker.
    """
    global _ENGINE, _SESSION_MAKER
    settings = get_settings()
    if _ENGINE is None:
        connect_args = {"check_same_thread": False} if settings.is_sqlite else {}
        _ENGINE = create_engine(
            settings.database_url,
            echo=settings.SQL_ECHO,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
    if _SESSION_MAKER is None:
        _SESSION_MAKER = sessionmaker(
            bind=_ENGINE, expire_on_commit=False, autoflush=False
        )


# PUBLIC_INTERFACE
def get_engine() -> Engine:
    """Return the global Engine instance."""
    _ensure_engine_initialized()
    assert _ENGINE is not None
    return _ENGINE


# PUBLIC_INTERFACE
def get_session_factory() -> sessionmaker[Session]:
    """Return the global session factory."""
    _ensure_engine_initialized()
    assert _SESSION_MAKER is not None
    return _SESSION_MAKER


# PUBLIC_INTERFACE
@contextmanager
def session_scope(factory: sessionmaker[Session] | None = None) -> Iterator[Session]:
    """
    Provide a transactional scope around a series of operations.

    Commits on success and rolls back on any exception, which is re-raised.
    """
    maker = factory or get_session_factory()
    session = maker()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
