from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from inspection_api.core.errors import NotFoundError, ValidationError
from inspection_api.schemas.catalog import CatalogSnapshot, Checkpoint, CheckpointCreate
from inspection_api.services.ids import IdGenerator
from inspection_api.services.storage import BlobStorage

logger = logging.getLogger(__name__)


class CatalogList(str, Enum):
    """The three value lists kept next to the checkpoints."""
    CLIENTS = "clients"
    PRODUCT_CATEGORIES = "product-categories"
    SAMPLE_PURPOSES = "sample-purposes"


_SNAPSHOT_FIELD = {
    CatalogList.CLIENTS: "clients",
    CatalogList.PRODUCT_CATEGORIES: "product_categories",
    CatalogList.SAMPLE_PURPOSES: "sample_purposes",
}


class CatalogStore:
    """
    Master lists of checkpoints, clients, product categories and sample purposes.

    One instance per application. State is loaded from storage on construction
    (falling back to the seed) and the full snapshot is written back after every
    mutation.
    """

    def __init__(
        self,
        storage: BlobStorage,
        *,
        id_generator: IdGenerator,
        storage_key: str = "catalog-store",
        seed: Optional[CatalogSnapshot] = None,
    ) -> None:
        self._storage = storage
        self._ids = id_generator
        self._key = storage_key
        blob = storage.load(storage_key)
        if blob:
            self._state = CatalogSnapshot.model_validate_json(blob)
            logger.info("Loaded catalog with %d checkpoints", len(self._state.checkpoints))
        else:
            self._state = seed.model_copy(deep=True) if seed is not None else CatalogSnapshot()

    def _persist(self) -> None:
        self._storage.save(self._key, self._state.model_dump_json(by_alias=True))

    # Checkpoints

    def list_checkpoints(self) -> List[Checkpoint]:
        return list(self._state.checkpoints)

    def get_checkpoint(self, checkpoint_id: str) -> Optional[Checkpoint]:
        return next((c for c in self._state.checkpoints if c.id == checkpoint_id), None)

    # PUBLIC_INTERFACE
    def add_checkpoint(self, fields: CheckpointCreate) -> Checkpoint:
        """
        Append a new checkpoint under a freshly generated id.

        Returns:
            The stored Checkpoint.
        """
        new_id = self._ids("chk")
        while self.get_checkpoint(new_id) is not None:
            new_id = self._ids("chk")
        checkpoint = Checkpoint(id=new_id, **fields.model_dump())
        self._state.checkpoints.append(checkpoint)
        self._persist()
        logger.info("Added checkpoint %s (%s)", checkpoint.id, checkpoint.title)
        return checkpoint

    # PUBLIC_INTERFACE
    def update_checkpoint(self, checkpoint: Checkpoint) -> Checkpoint:
        """
        Replace the checkpoint with the same id, keeping its position.

        Raises:
            NotFoundError: no checkpoint has that id.
        """
        for index, existing in enumerate(self._state.checkpoints):
            if existing.id == checkpoint.id:
                self._state.checkpoints[index] = checkpoint
                self._persist()
                logger.info("Updated checkpoint %s", checkpoint.id)
                return checkpoint
        raise NotFoundError(f"Checkpoint '{checkpoint.id}' not found")

    def delete_checkpoint(self, checkpoint_id: str) -> bool:
        """Remove the checkpoint; returns False (and changes nothing) when absent."""
        remaining = [c for c in self._state.checkpoints if c.id != checkpoint_id]
        if len(remaining) == len(self._state.checkpoints):
            return False
        self._state.checkpoints = remaining
        self._persist()
        logger.info("Deleted checkpoint %s", checkpoint_id)
        return True

    # Value lists

    def list_values(self, which: CatalogList) -> List[str]:
        return list(getattr(self._state, _SNAPSHOT_FIELD[which]))

    def add_value(self, which: CatalogList, value: str) -> List[str]:
        """Add a value unless it is already present. Returns the updated list."""
        value = (value or "").strip()
        if not value:
            raise ValidationError("Name is required", details={"field": "name"})
        values: List[str] = getattr(self._state, _SNAPSHOT_FIELD[which])
        if value not in values:
            values.append(value)
            self._persist()
            logger.info("Added %s value '%s'", which.value, value)
        return list(values)

    def delete_value(self, which: CatalogList, value: str) -> List[str]:
        """Remove every occurrence of a value. Returns the updated list."""
        field = _SNAPSHOT_FIELD[which]
        values: List[str] = getattr(self._state, field)
        remaining = [v for v in values if v != value]
        if len(remaining) != len(values):
            setattr(self._state, field, remaining)
            self._persist()
            logger.info("Deleted %s value '%s'", which.value, value)
        return list(remaining)

    def list_clients(self) -> List[str]:
        return self.list_values(CatalogList.CLIENTS)

    def add_client(self, client: str) -> List[str]:
        return self.add_value(CatalogList.CLIENTS, client)

    def delete_client(self, client: str) -> List[str]:
        return self.delete_value(CatalogList.CLIENTS, client)

    def list_product_categories(self) -> List[str]:
        return self.list_values(CatalogList.PRODUCT_CATEGORIES)

    def add_product_category(self, category: str) -> List[str]:
        return self.add_value(CatalogList.PRODUCT_CATEGORIES, category)

    def delete_product_category(self, category: str) -> List[str]:
        return self.delete_value(CatalogList.PRODUCT_CATEGORIES, category)

    def list_sample_purposes(self) -> List[str]:
        return self.list_values(CatalogList.SAMPLE_PURPOSES)

    def add_sample_purpose(self, purpose: str) -> List[str]:
        return self.add_value(CatalogList.SAMPLE_PURPOSES, purpose)

    def delete_sample_purpose(self, purpose: str) -> List[str]:
        return self.delete_value(CatalogList.SAMPLE_PURPOSES, purpose)
