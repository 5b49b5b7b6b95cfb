"""
ORM models for persisted application state.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .state import AppState  # noqa: F401
