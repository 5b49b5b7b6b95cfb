from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Executable
from sqlalchemy.orm import Session


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Note:
      Transactions are owned by the caller (see inspection_api.db.session.session_scope);
      repositories only flush.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return self.session.execute(statement, params or {})

    def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = self.execute(statement, params)
        return result.scalar_one_or_none()

    def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)

    def flush(self) -> None:
        self.session.flush()
