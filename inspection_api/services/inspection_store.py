from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from inspection_api.core.errors import NotFoundError, ValidationError
from inspection_api.schemas.inspection import (
    Inspection,
    InspectionStatus,
    InspectionStoreState,
    PersistedInspections,
)
from inspection_api.services.storage import BlobStorage

logger = logging.getLogger(__name__)

# Fields the report form may edit; identity, product and status are not among them.
EDITABLE_FIELDS = frozenset(
    {
        "checkpoints",
        "general_comments",
        "conformance_statement",
        "next_steps",
        "short_summary",
        "long_summary",
    }
)


# PUBLIC_INTERFACE
def encode_inspections(inspections: Iterable[Inspection]) -> str:
    """Serialize inspections into the persisted JSON envelope."""
    state = InspectionStoreState(state=PersistedInspections(inspections=list(inspections)))
    return state.model_dump_json(by_alias=True)


# PUBLIC_INTERFACE
def decode_inspections(blob: str) -> List[Inspection]:
    """Parse the persisted JSON envelope; unknown fields are ignored."""
    return InspectionStoreState.model_validate_json(blob).state.inspections


class InspectionStore:
    """
    List of inspection reports, newest first.

    Every mutation writes the whole list back to storage under one key. Whether
    a completed inspection may still be edited is decided by callers; the store
    applies whatever it is given.
    """

    def __init__(
        self,
        storage: BlobStorage,
        *,
        storage_key: str = "inspection-store",
        seed: Iterable[Inspection] = (),
    ) -> None:
        self._storage = storage
        self._key = storage_key
        blob = storage.load(storage_key)
        if blob:
            self._inspections = decode_inspections(blob)
            logger.info("Rehydrated %d inspections from '%s'", len(self._inspections), storage_key)
        else:
            self._inspections = [i.model_copy(deep=True) for i in seed]
            logger.info("No persisted inspections; starting with %d seeded", len(self._inspections))

    def _persist(self) -> None:
        self._storage.save(self._key, encode_inspections(self._inspections))

    def serialize(self) -> str:
        return encode_inspections(self._inspections)

    def list_inspections(self) -> List[Inspection]:
        return list(self._inspections)

    def get_inspection(self, inspection_id: str) -> Optional[Inspection]:
        return next((i for i in self._inspections if i.id == inspection_id), None)

    def require_inspection(self, inspection_id: str) -> Inspection:
        inspection = self.get_inspection(inspection_id)
        if inspection is None:
            raise NotFoundError(f"Inspection '{inspection_id}' not found")
        return inspection

    # PUBLIC_INTERFACE
    def add_inspection(self, inspection: Inspection) -> Inspection:
        """
        Prepend a fully formed inspection.

        Raises:
            ValidationError: the inspection is not in progress, or its id is taken.
        """
        if inspection.status != InspectionStatus.IN_PROGRESS:
            raise ValidationError(
                "New inspections must be in progress", details={"field": "status"}
            )
        if self.get_inspection(inspection.id) is not None:
            raise ValidationError(
                f"Inspection '{inspection.id}' already exists", details={"field": "id"}
            )
        self._inspections.insert(0, inspection)
        self._persist()
        logger.info("Added inspection %s (%s)", inspection.id, inspection.title)
        return inspection

    # PUBLIC_INTERFACE
    def finalize_inspection(self, inspection_id: str) -> Optional[Inspection]:
        """
        Mark an inspection Completed.

        No-op (returns None) when the id is unknown; calling it again on a
        completed inspection changes nothing.
        """
        inspection = self.get_inspection(inspection_id)
        if inspection is None:
            return None
        if inspection.status != InspectionStatus.COMPLETED:
            inspection.status = InspectionStatus.COMPLETED
            self._persist()
            logger.info("Finalized inspection %s", inspection_id)
        return inspection

    # PUBLIC_INTERFACE
    def update_inspection(self, inspection_id: str, changes: Mapping[str, Any]) -> Inspection:
        """
        Apply form field edits and persist.

        Parameters:
            changes: mapping of snake_case field name to new value; only
                EDITABLE_FIELDS are accepted.
        Raises:
            NotFoundError: unknown id.
            ValidationError: a field outside EDITABLE_FIELDS was given.
        """
        inspection = self.require_inspection(inspection_id)
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                "These fields cannot be edited", details={"fields": sorted(unknown)}
            )
        updated = Inspection.model_validate({**inspection.model_dump(), **changes})
        self._replace(updated)
        return updated

    def save(self, inspection: Inspection) -> Inspection:
        """Write back an inspection edited in place (or a replacement with the same id)."""
        self.require_inspection(inspection.id)
        self._replace(inspection)
        return inspection

    def _replace(self, inspection: Inspection) -> None:
        for index, existing in enumerate(self._inspections):
            if existing.id == inspection.id:
                self._inspections[index] = inspection
                break
        self._persist()
