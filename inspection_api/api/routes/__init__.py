"""
API route modules for the QA inspection tracker.

This package contains subrouters for:
- Auth: login, refresh, logout, and current user
- Checkpoints: checkpoint catalog CRUD and applicability lookup
- Catalog: products and the client / category / purpose value lists
- Inspections: report creation, editing, finalization, and summaries
- AI: transcription, summaries, tag suggestions, and speech
- Capture: voice notes streamed from the browser
- Reports: CSV/XLSX/PDF exports

Routers are included from inspection_api.api.main (under the /api/v1 prefix).
"""
