from __future__ import annotations

import datetime as dt
import re
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import Field, field_validator

from .catalog import ProductDescriptor
from .common import CamelModel

_PLACEHOLDER_ID = re.compile(r"^[a-z0-9-]+$")


class InspectionStatus(str, Enum):
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class ConformanceStatus(str, Enum):
    CONFORM = "Conform"
    NON_CONFORM = "Non-Conform"


class Inspector(CamelModel):
    """Person performing the inspection."""
    name: str = Field(..., description="Inspector name")
    avatar: str = Field(..., description="Placeholder image id for the avatar")


class ReportImage(CamelModel):
    """Photo attached to one recorded answer."""
    src: str = Field(..., description="Placeholder image id or a data:image/... payload")
    comment: str = Field("", description="Inspector's caption")

    @field_validator("src")
    @classmethod
    def _check_src(cls, v: str) -> str:
        if v.startswith("data:image/") or _PLACEHOLDER_ID.match(v):
            return v
        raise ValueError("Image must be a data URL or a valid ID")


class _AnswerFields(CamelModel):
    checkpoint_id: str = Field(..., description="Catalog checkpoint id, or a local 'custom-' id")
    status: ConformanceStatus = Field(ConformanceStatus.CONFORM)
    pcs_checked: int = Field(0, ge=0, description="Pieces checked")
    pcs_conform: int = Field(0, ge=0, description="Pieces found conforming")
    pcs_non_conform: int = Field(0, ge=0, description="Pieces found non-conforming")
    notes: str = Field("")
    images: List[ReportImage] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class CatalogAnswer(_AnswerFields):
    """Recorded answer to a catalog checkpoint (referenced by id, never copied)."""
    kind: Literal["catalog"] = "catalog"


class CustomAnswer(_AnswerFields):
    """Self-contained checkpoint added by the inspector to one report."""
    kind: Literal["custom"] = "custom"
    title: str = Field("")
    category: str = Field("")
    description: str = Field("")


ReportCheckpoint = Annotated[Union[CatalogAnswer, CustomAnswer], Field(discriminator="kind")]


def _tag_legacy_answers(value: Any) -> Any:
    """Blobs written before answers carried 'kind' mark custom ones with 'isCustom'."""
    if not isinstance(value, list):
        return value
    tagged = []
    for item in value:
        if isinstance(item, dict) and "kind" not in item:
            is_custom = item.get("isCustom", item.get("is_custom", False))
            item = {**item, "kind": "custom" if is_custom else "catalog"}
        tagged.append(item)
    return tagged


class Inspection(CamelModel):
    """One QA report for a product/client/sample-purpose combination."""
    id: str = Field(..., description="Inspection id, e.g. 'insp-001'")
    title: str = Field(...)
    product: ProductDescriptor
    client: str
    sample_purpose: str
    date: dt.date
    status: InspectionStatus = Field(InspectionStatus.IN_PROGRESS)
    inspector: Inspector
    checkpoints: List[ReportCheckpoint] = Field(default_factory=list)
    general_comments: str = ""
    conformance_statement: str = ""
    next_steps: str = ""
    short_summary: str = ""
    long_summary: str = ""

    @field_validator("checkpoints", mode="before")
    @classmethod
    def _tag_answers(cls, v):
        return _tag_legacy_answers(v)

    @property
    def is_completed(self) -> bool:
        return self.status == InspectionStatus.COMPLETED

    def find_answer(self, checkpoint_id: str) -> Optional[Union[CatalogAnswer, CustomAnswer]]:
        return next((a for a in self.checkpoints if a.checkpoint_id == checkpoint_id), None)

    def all_tags(self) -> List[str]:
        """Every tag across all answers, in order, duplicates kept."""
        return [tag for answer in self.checkpoints for tag in answer.tags if tag]


class NewInspectionRequest(CamelModel):
    """Selection a new report is built from."""
    product_type: str = Field(..., min_length=1, description="Product type is required")
    client: str = Field(..., min_length=1, description="Client is required")
    sample_purpose: str = Field(..., min_length=1, description="Sample purpose is required")


class InspectionUpdate(CamelModel):
    """
    Field edits from the report form. Omitted fields are left unchanged;
    'checkpoints' replaces the whole answer list.
    """
    checkpoints: Optional[List[ReportCheckpoint]] = None
    general_comments: Optional[str] = None
    conformance_statement: Optional[str] = None
    next_steps: Optional[str] = None
    short_summary: Optional[str] = None
    long_summary: Optional[str] = None

    @field_validator("checkpoints", mode="before")
    @classmethod
    def _tag_answers(cls, v):
        return _tag_legacy_answers(v)


class CustomCheckpointCreate(CamelModel):
    """Add a custom checkpoint to an inspection; fields may be filled in later."""
    title: str = ""
    category: str = ""
    description: str = ""


class TagCount(CamelModel):
    tag: str
    count: int


class PersistedInspections(CamelModel):
    inspections: List[Inspection] = Field(default_factory=list)


class InspectionStoreState(CamelModel):
    """Persisted envelope; mirrors the browser's persist middleware layout."""
    state: PersistedInspections = Field(default_factory=PersistedInspections)
    version: int = 0
