from __future__ import annotations

import io
import re
from datetime import datetime, timezone
from typing import Optional
from xml.sax.saxutils import escape

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from inspection_api.core.deps import get_catalog_store, get_inspection_store
from inspection_api.schemas.inspection import ConformanceStatus, CustomAnswer, InspectionStatus
from inspection_api.services.catalog_store import CatalogStore
from inspection_api.services.inspection_store import InspectionStore

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)

_INSPECTION_COLUMNS = [
    "id",
    "title",
    "product",
    "product_type",
    "product_category",
    "client",
    "sample_purpose",
    "date",
    "status",
    "inspector",
    "checkpoints",
    "non_conformances",
    "tags",
    "short_summary",
]

_ANSWER_COLUMNS = [
    "checkpoint_id",
    "category",
    "title",
    "custom",
    "status",
    "pcs_checked",
    "pcs_conform",
    "pcs_non_conform",
    "notes",
    "tags",
    "images",
]


def _export_dataframe(
    df: pd.DataFrame,
    filename_base: str,
    export_format: str,
    title: Optional[str] = None,
) -> StreamingResponse:
    """
    Convert DataFrame to the requested format and return a StreamingResponse.

    Supported formats:
      - csv: text/csv
      - xlsx: application/vnd.openxmlformats-officedocument.spreadsheetml.sheet
      - pdf: application/pdf (simple tabular rendering)
    Anything else falls back to CSV.
    """
    export_format = (export_format or "csv").lower()

    if export_format in ("xlsx", "excel", "xls"):
        # Use openpyxl engine
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        buffer.seek(0)
        headers = {
            "Content-Disposition": f'attachment; filename="{filename_base}.xlsx"'
        }
        return StreamingResponse(
            buffer,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers=headers,
        )

    if export_format == "pdf":
        # Render a very simple table using reportlab
        from reportlab.lib import colors
        from reportlab.lib.pagesizes import landscape, letter
        from reportlab.lib.styles import getSampleStyleSheet
        from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
        )
        styles = getSampleStyleSheet()
        generated = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        heading = title or filename_base.replace("_", " ").title()
        elements: list = [Paragraph(escape(f"{heading} ({generated})"), styles["Title"])]

        # Wrap long cells (notes, summaries) so the table fits the page width
        cell_style = styles["BodyText"]
        cell_style.fontSize = 7
        cell_style.leading = 9
        data = [list(df.columns)] + [
            [Paragraph(escape(value), cell_style) for value in row] for row in df.astype(str).values.tolist()
        ]
        table = Table(data, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
                    ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 7),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ]
            )
        )
        elements.append(table)
        doc.build(elements)
        buffer.seek(0)
        headers = {
            "Content-Disposition": f'attachment; filename="{filename_base}.pdf"'
        }
        return StreamingResponse(buffer, media_type="application/pdf", headers=headers)

    # Default: CSV
    buffer = io.StringIO()
    df.to_csv(buffer, index=False)
    buffer.seek(0)
    headers = {
        "Content-Disposition": f'attachment; filename="{filename_base}.csv"'
    }
    return StreamingResponse(buffer, media_type="text/csv", headers=headers)


def _safe_filename(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", value).strip("_") or "inspection"


# PUBLIC_INTERFACE
@router.get(
    "/inspections",
    summary="Inspections report",
    description="Exports one row per inspection with answer and non-conformance counts.",
    response_description="File stream (CSV/XLSX/PDF)",
)
def inspections_report(
    store: InspectionStore = Depends(get_inspection_store),
    status: Optional[InspectionStatus] = Query(None, description="Filter by inspection status"),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    """
    Generate the inspections overview report.

    Rows follow the store order (newest first). Tags are unique per inspection
    and joined with ', '.
    """
    data = []
    for inspection in store.list_inspections():
        if status is not None and inspection.status != status:
            continue
        tags = list(dict.fromkeys(inspection.all_tags()))
        data.append(
            {
                "id": inspection.id,
                "title": inspection.title,
                "product": inspection.product.name,
                "product_type": inspection.product.type,
                "product_category": inspection.product.category,
                "client": inspection.client,
                "sample_purpose": inspection.sample_purpose,
                "date": inspection.date.isoformat(),
                "status": inspection.status.value,
                "inspector": inspection.inspector.name,
                "checkpoints": len(inspection.checkpoints),
                "non_conformances": sum(
                    1 for a in inspection.checkpoints if a.status == ConformanceStatus.NON_CONFORM
                ),
                "tags": ", ".join(tags),
                "short_summary": inspection.short_summary,
            }
        )
    df = pd.DataFrame(data, columns=_INSPECTION_COLUMNS)
    return _export_dataframe(df, "inspections", format)


# PUBLIC_INTERFACE
@router.get(
    "/inspections/{inspection_id}",
    summary="Inspection detail report",
    description="Exports the answers of one inspection, with checkpoint titles resolved from the catalog.",
    response_description="File stream (CSV/XLSX/PDF)",
)
def inspection_detail_report(
    inspection_id: str,
    store: InspectionStore = Depends(get_inspection_store),
    catalog: CatalogStore = Depends(get_catalog_store),
    format: str = Query("csv", description="Export format: csv | xlsx | pdf"),
):
    """
    Generate the report for a single inspection.

    Catalog answers show the checkpoint's current category and title; an answer
    whose checkpoint has since been deleted keeps its row with blank title and
    category.
    """
    inspection = store.require_inspection(inspection_id)
    data = []
    for answer in inspection.checkpoints:
        if isinstance(answer, CustomAnswer):
            category, title = answer.category, answer.title
        else:
            checkpoint = catalog.get_checkpoint(answer.checkpoint_id)
            category = checkpoint.category if checkpoint else ""
            title = checkpoint.title if checkpoint else ""
        data.append(
            {
                "checkpoint_id": answer.checkpoint_id,
                "category": category,
                "title": title,
                "custom": isinstance(answer, CustomAnswer),
                "status": answer.status.value,
                "pcs_checked": answer.pcs_checked,
                "pcs_conform": answer.pcs_conform,
                "pcs_non_conform": answer.pcs_non_conform,
                "notes": answer.notes,
                "tags": ", ".join(answer.tags),
                "images": len(answer.images),
            }
        )
    df = pd.DataFrame(data, columns=_ANSWER_COLUMNS)
    return _export_dataframe(
        df,
        _safe_filename(inspection.id),
        format,
        title=f"{inspection.title} - {inspection.client} - {inspection.status.value}",
    )
