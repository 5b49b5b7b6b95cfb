"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by domain module (catalog, inspection, generation, auth) and
also include common reusable models such as standard responses.
"""

from .common import MessageResponse  # noqa: F401
