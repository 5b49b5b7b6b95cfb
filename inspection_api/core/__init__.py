"""
Core application utilities for settings, errors, logging and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- The domain error taxonomy rendered by the API error handlers
- Dependency helpers (store access, current user)
"""
