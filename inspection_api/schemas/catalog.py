from __future__ import annotations

from typing import List

from pydantic import Field, field_validator

from .common import CamelModel


class CheckpointFields(CamelModel):
    """Editable checkpoint attributes, including the optional applicability filters."""
    category: str = Field(..., min_length=1, description="Free-text grouping, e.g. 'Packaging'")
    title: str = Field(..., min_length=1, description="Short checkpoint title")
    description: str = Field(..., min_length=1, description="What the inspector should verify")
    clients: List[str] = Field(
        default_factory=list, description="Clients this applies to; empty means all"
    )
    product_categories: List[str] = Field(
        default_factory=list, description="Product categories this applies to; empty means all"
    )
    sample_purposes: List[str] = Field(
        default_factory=list, description="Sample purposes this applies to; empty means all"
    )

    @field_validator("clients", "product_categories", "sample_purposes", mode="before")
    @classmethod
    def _absent_filter_is_empty(cls, v):
        return [] if v is None else v


class CheckpointCreate(CheckpointFields):
    """Create checkpoint payload; the id is generated by the catalog."""


class Checkpoint(CheckpointFields):
    """Catalog-level inspection question."""
    id: str = Field(..., description="Checkpoint id, e.g. 'chk-5'")

    def applies_to(self, *, client: str, product_category: str, sample_purpose: str) -> bool:
        """
        True when every filter dimension is either unrestricted or contains the selection.
        """
        return (
            (not self.clients or client in self.clients)
            and (not self.product_categories or product_category in self.product_categories)
            and (not self.sample_purposes or sample_purpose in self.sample_purposes)
        )


class ProductDescriptor(CamelModel):
    """Product an inspection is performed on."""
    name: str = Field(..., description="Display name")
    category: str = Field(..., description="Product category, matched against checkpoint filters")
    type: str = Field(..., description="Product type, used to pick the product when creating a report")
    image: str = Field(..., description="Placeholder image id")


class CatalogValueCreate(CamelModel):
    """Add a value to one of the catalog lists."""
    name: str = Field(..., min_length=1, description="Value to add")


class CatalogSnapshot(CamelModel):
    """Everything the catalog store persists."""
    checkpoints: List[Checkpoint] = Field(default_factory=list)
    clients: List[str] = Field(default_factory=list)
    product_categories: List[str] = Field(default_factory=list)
    sample_purposes: List[str] = Field(default_factory=list)
