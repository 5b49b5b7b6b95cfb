from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from inspection_api.core.deps import get_catalog_store, get_report_assembler
from inspection_api.schemas.catalog import Checkpoint, CheckpointCreate, CheckpointFields
from inspection_api.services.catalog_store import CatalogStore
from inspection_api.services.report_assembly import ReportAssembler

router = APIRouter(prefix="/checkpoints", tags=["Checkpoints"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[Checkpoint],
    summary="List checkpoints",
    description="All catalog checkpoints in catalog order.",
)
def list_checkpoints(catalog: CatalogStore = Depends(get_catalog_store)) -> List[Checkpoint]:
    return catalog.list_checkpoints()


# PUBLIC_INTERFACE
@router.get(
    "/applicable",
    response_model=List[Checkpoint],
    summary="Applicable checkpoints",
    description=(
        "Checkpoints whose client, product category and sample purpose filters admit the "
        "selection. An empty filter admits everything."
    ),
)
def list_applicable_checkpoints(
    client: str = Query(..., description="Client name"),
    product_category: str = Query(..., alias="productCategory", description="Product category"),
    sample_purpose: str = Query(..., alias="samplePurpose", description="Sample purpose"),
    assembler: ReportAssembler = Depends(get_report_assembler),
) -> List[Checkpoint]:
    return assembler.applicable_checkpoints(
        client=client, product_category=product_category, sample_purpose=sample_purpose
    )


# PUBLIC_INTERFACE
@router.get(
    "/{checkpoint_id}",
    response_model=Checkpoint,
    summary="Get checkpoint",
)
def get_checkpoint(checkpoint_id: str, catalog: CatalogStore = Depends(get_catalog_store)) -> Checkpoint:
    checkpoint = catalog.get_checkpoint(checkpoint_id)
    if checkpoint is None:
        raise HTTPException(status_code=404, detail="Checkpoint not found")
    return checkpoint


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=Checkpoint,
    status_code=status.HTTP_201_CREATED,
    summary="Create checkpoint",
    description="Add a checkpoint to the catalog; the id is generated.",
)
def create_checkpoint(
    payload: CheckpointCreate, catalog: CatalogStore = Depends(get_catalog_store)
) -> Checkpoint:
    return catalog.add_checkpoint(payload)


# PUBLIC_INTERFACE
@router.put(
    "/{checkpoint_id}",
    response_model=Checkpoint,
    summary="Update checkpoint",
    description="Replace every field of an existing checkpoint. Existing reports keep referring to it by id.",
)
def update_checkpoint(
    checkpoint_id: str,
    payload: CheckpointFields,
    catalog: CatalogStore = Depends(get_catalog_store),
) -> Checkpoint:
    return catalog.update_checkpoint(Checkpoint(id=checkpoint_id, **payload.model_dump()))


# PUBLIC_INTERFACE
@router.delete(
    "/{checkpoint_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete checkpoint",
    description="Remove a checkpoint from the catalog. Deleting an unknown id is a no-op.",
)
def delete_checkpoint(checkpoint_id: str, catalog: CatalogStore = Depends(get_catalog_store)) -> Response:
    catalog.delete_checkpoint(checkpoint_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
