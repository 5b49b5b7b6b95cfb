from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from inspection_api.core.deps import (
    get_device_provider,
    get_inspection_store,
    get_report_assembler,
    get_summary_service,
)
from inspection_api.core.errors import InspectionLockedError, NotFoundError
from inspection_api.schemas.capture import PhotoCapture
from inspection_api.schemas.inspection import (
    CustomCheckpointCreate,
    Inspection,
    InspectionStatus,
    InspectionUpdate,
    NewInspectionRequest,
    ReportImage,
    TagCount,
)
from inspection_api.services.capture import DeviceKind, StreamedDeviceProvider, capture_photo
from inspection_api.services.inspection_store import InspectionStore
from inspection_api.services.report_assembly import ReportAssembler, tag_cloud
from inspection_api.services.summary import SummaryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inspections", tags=["Inspections"])


def _editable(store: InspectionStore, inspection_id: str) -> Inspection:
    """Load an inspection that may still be edited."""
    inspection = store.require_inspection(inspection_id)
    if inspection.is_completed:
        raise InspectionLockedError(
            f"Inspection '{inspection_id}' is completed and can no longer be edited",
            details={"id": inspection_id, "status": inspection.status.value},
        )
    return inspection


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[Inspection],
    summary="List inspections",
    description="Inspection reports, newest first.",
)
def list_inspections(
    store: InspectionStore = Depends(get_inspection_store),
    status_filter: Optional[InspectionStatus] = Query(None, alias="status", description="Filter by status"),
) -> List[Inspection]:
    rows = store.list_inspections()
    if status_filter is not None:
        rows = [i for i in rows if i.status == status_filter]
    return rows


# PUBLIC_INTERFACE
@router.get("/{inspection_id}", response_model=Inspection, summary="Get inspection")
def get_inspection(inspection_id: str, store: InspectionStore = Depends(get_inspection_store)) -> Inspection:
    return store.require_inspection(inspection_id)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=Inspection,
    status_code=status.HTTP_201_CREATED,
    summary="Create inspection",
    description=(
        "Build a new in-progress report for the selected product type, client and sample purpose, "
        "with one blank answer per applicable catalog checkpoint."
    ),
)
def create_inspection(
    payload: NewInspectionRequest,
    store: InspectionStore = Depends(get_inspection_store),
    assembler: ReportAssembler = Depends(get_report_assembler),
) -> Inspection:
    inspection = assembler.build_inspection(
        product_type=payload.product_type,
        client=payload.client,
        sample_purpose=payload.sample_purpose,
    )
    return store.add_inspection(inspection)


# PUBLIC_INTERFACE
@router.patch(
    "/{inspection_id}",
    response_model=Inspection,
    summary="Update inspection",
    description="Save report form edits. Completed inspections are read-only (409).",
)
def update_inspection(
    inspection_id: str,
    payload: InspectionUpdate,
    store: InspectionStore = Depends(get_inspection_store),
) -> Inspection:
    _editable(store, inspection_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return store.update_inspection(inspection_id, changes)


# PUBLIC_INTERFACE
@router.post(
    "/{inspection_id}/finalize",
    response_model=Inspection,
    summary="Finalize inspection",
    description="Mark the inspection Completed. Finalizing twice is harmless.",
)
def finalize_inspection(inspection_id: str, store: InspectionStore = Depends(get_inspection_store)) -> Inspection:
    inspection = store.finalize_inspection(inspection_id)
    if inspection is None:
        raise NotFoundError(f"Inspection '{inspection_id}' not found")
    return inspection


# PUBLIC_INTERFACE
@router.post(
    "/{inspection_id}/custom-checkpoints",
    response_model=Inspection,
    status_code=status.HTTP_201_CREATED,
    summary="Add custom checkpoint",
    description="Append a checkpoint that exists only on this report.",
)
def add_custom_checkpoint(
    inspection_id: str,
    payload: CustomCheckpointCreate,
    store: InspectionStore = Depends(get_inspection_store),
    assembler: ReportAssembler = Depends(get_report_assembler),
) -> Inspection:
    inspection = _editable(store, inspection_id)
    answer = assembler.new_custom_checkpoint(
        title=payload.title, category=payload.category, description=payload.description
    )
    inspection.checkpoints.append(answer)
    return store.save(inspection)


# PUBLIC_INTERFACE
@router.get(
    "/{inspection_id}/tags",
    response_model=List[TagCount],
    summary="Tag cloud",
    description="Tag frequencies across the report's answers, most frequent first.",
)
def get_tag_cloud(inspection_id: str, store: InspectionStore = Depends(get_inspection_store)) -> List[TagCount]:
    inspection = store.require_inspection(inspection_id)
    return [TagCount(tag=tag, count=count) for tag, count in tag_cloud(inspection)]


# PUBLIC_INTERFACE
@router.post(
    "/{inspection_id}/summary",
    response_model=Inspection,
    summary="Generate summaries",
    description=(
        "Write AI-generated short and long summaries onto the report. On failure (502) the "
        "existing summaries are kept. If the report is finalized while generation runs, the "
        "result is discarded (409)."
    ),
)
async def generate_summary(
    inspection_id: str,
    store: InspectionStore = Depends(get_inspection_store),
    summaries: SummaryService = Depends(get_summary_service),
) -> Inspection:
    draft = _editable(store, inspection_id).model_copy(deep=True)
    await summaries.summarize_inspection(draft)

    # The report may have been finalized or edited while the model was running.
    inspection = _editable(store, inspection_id)
    inspection.short_summary = draft.short_summary
    inspection.long_summary = draft.long_summary
    return store.save(inspection)


# PUBLIC_INTERFACE
@router.post(
    "/{inspection_id}/checkpoints/{checkpoint_id}/suggest-tags",
    response_model=Inspection,
    summary="Suggest tags for an answer",
    description=(
        "Suggest tags from the answer's notes and append the ones it does not have yet. "
        "Suggestions arriving after the report was finalized are discarded (409)."
    ),
)
async def suggest_answer_tags(
    inspection_id: str,
    checkpoint_id: str,
    store: InspectionStore = Depends(get_inspection_store),
    summaries: SummaryService = Depends(get_summary_service),
) -> Inspection:
    answer = _editable(store, inspection_id).find_answer(checkpoint_id)
    if answer is None:
        raise NotFoundError(f"Checkpoint '{checkpoint_id}' is not part of inspection '{inspection_id}'")
    suggested = await summaries.suggest_tags_for_answer(answer.model_copy(deep=True))

    inspection = _editable(store, inspection_id)
    answer = inspection.find_answer(checkpoint_id)
    if answer is None:
        raise NotFoundError(f"Checkpoint '{checkpoint_id}' is not part of inspection '{inspection_id}'")
    added = [tag for tag in suggested if tag not in answer.tags]
    answer.tags.extend(added)
    logger.info("Added %d suggested tags to %s/%s", len(added), inspection_id, checkpoint_id)
    return store.save(inspection)


# PUBLIC_INTERFACE
@router.post(
    "/{inspection_id}/checkpoints/{checkpoint_id}/photos",
    response_model=Inspection,
    status_code=status.HTTP_201_CREATED,
    summary="Attach photo",
    description="Take a camera frame posted by the browser and attach it to the answer with a caption.",
    responses={503: {"description": "The camera is disabled or busy"}},
)
def attach_photo(
    inspection_id: str,
    checkpoint_id: str,
    payload: PhotoCapture,
    store: InspectionStore = Depends(get_inspection_store),
    devices: StreamedDeviceProvider = Depends(get_device_provider),
) -> Inspection:
    inspection = _editable(store, inspection_id)
    answer = inspection.find_answer(checkpoint_id)
    if answer is None:
        raise NotFoundError(f"Checkpoint '{checkpoint_id}' is not part of inspection '{inspection_id}'")
    devices.set_format(DeviceKind.CAMERA, payload.mime_type)
    devices.push(DeviceKind.CAMERA, payload.payload())
    answer.images.append(ReportImage(src=capture_photo(devices), comment=payload.comment))
    return store.save(inspection)
