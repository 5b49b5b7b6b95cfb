"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for persisted application state.
They assume the caller owns the Session and its transaction
(e.g., using inspection_api.db.session.session_scope).
"""
