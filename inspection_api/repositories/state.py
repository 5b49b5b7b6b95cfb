from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from inspection_api.db.models.state import AppState
from .base import BaseRepository


class StateRepository(BaseRepository):
    """Repository for keyed store snapshots."""

    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_value(self, key: str) -> Optional[str]:
        stmt = select(AppState.value).where(AppState.key == key)
        return self.scalar_one_or_none(stmt)

    def put_value(self, key: str, value: str) -> None:
        row = self.session.get(AppState, key)
        if row is None:
            self.add(AppState(key=key, value=value))
        else:
            row.value = value
        self.flush()
