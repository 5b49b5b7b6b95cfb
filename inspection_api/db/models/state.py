from __future__ import annotations

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from inspection_api.db.base import Base, UpdatedAtMixin


class AppState(UpdatedAtMixin, Base):
    """Keyed blob holding one store's serialized state (e.g. 'inspection-store')."""
    __tablename__ = "app_state"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
