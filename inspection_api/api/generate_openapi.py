"""
Write the OpenAPI schema to interfaces/openapi.json.

Usage:
  python -m inspection_api.api.generate_openapi
"""
import json
import os

from inspection_api.api.main import app

# Get the OpenAPI schema (note: all REST routes are under /api/v1)
openapi_schema = app.openapi()

# Ensure Reports tag metadata is present
tags = openapi_schema.get("tags", [])
if not any(t.get("name") == "Reports" for t in tags):
    tags.append({"name": "Reports", "description": "Exportable inspection reports (CSV/Excel/PDF)."})
openapi_schema["tags"] = tags

# Document the persisted layout of the browser-compatible inspection store
openapi_schema["x-persisted-stores"] = [
    {
        "key": "inspection-store",
        "layout": '{"state": {"inspections": [Inspection, ...]}, "version": 0}',
    },
    {
        "key": "catalog-store",
        "layout": '{"checkpoints": [...], "clients": [...], "productCategories": [...], "samplePurposes": [...]}',
    },
]

# Write to file
output_dir = "interfaces"
os.makedirs(output_dir, exist_ok=True)
output_path = os.path.join(output_dir, "openapi.json")

with open(output_path, "w") as f:
    json.dump(openapi_schema, f, indent=2)
