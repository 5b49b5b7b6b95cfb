from __future__ import annotations

import datetime as dt
from collections import Counter
from typing import Callable, List, Tuple

from inspection_api.core.errors import NotFoundError
from inspection_api.schemas.catalog import Checkpoint
from inspection_api.schemas.inspection import (
    CatalogAnswer,
    CustomAnswer,
    Inspection,
    InspectionStatus,
    Inspector,
)
from inspection_api.services.catalog_store import CatalogStore
from inspection_api.services.ids import IdGenerator
from inspection_api.services.products import ProductCatalog


class ReportAssembler:
    """
    Builds new inspections from a product/client/sample-purpose selection.

    Construction only: nothing is stored here, the caller hands the result to
    the InspectionStore.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        products: ProductCatalog,
        *,
        id_generator: IdGenerator,
        inspector: Inspector,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self.catalog = catalog
        self.products = products
        self._ids = id_generator
        self._inspector = inspector
        self._today = today

    def applicable_checkpoints(
        self, *, client: str, product_category: str, sample_purpose: str
    ) -> List[Checkpoint]:
        """Catalog checkpoints whose filters admit the selection, in catalog order."""
        return [
            c
            for c in self.catalog.list_checkpoints()
            if c.applies_to(
                client=client,
                product_category=product_category,
                sample_purpose=sample_purpose,
            )
        ]

    # PUBLIC_INTERFACE
    def build_inspection(self, product_type: str, client: str, sample_purpose: str) -> Inspection:
        """
        Create a new in-progress inspection with one blank answer per applicable checkpoint.

        Raises:
            NotFoundError: no product has the given type.
        """
        product = self.products.find_by_type(product_type)
        if product is None:
            raise NotFoundError(f"Product type '{product_type}' not found")

        checkpoints = self.applicable_checkpoints(
            client=client, product_category=product.category, sample_purpose=sample_purpose
        )
        return Inspection(
            id=self._ids("insp"),
            title=f"{product.name} - Initial Inspection",
            product=product.model_copy(),
            client=client,
            sample_purpose=sample_purpose,
            date=self._today(),
            status=InspectionStatus.IN_PROGRESS,
            inspector=self._inspector.model_copy(),
            checkpoints=[CatalogAnswer(checkpoint_id=c.id) for c in checkpoints],
        )

    def new_custom_checkpoint(
        self, title: str = "", category: str = "", description: str = ""
    ) -> CustomAnswer:
        """Blank custom answer with a locally generated id."""
        return CustomAnswer(
            checkpoint_id=self._ids("custom"),
            title=title,
            category=category,
            description=description,
        )


# PUBLIC_INTERFACE
def tag_cloud(inspection: Inspection) -> List[Tuple[str, int]]:
    """
    Tag frequencies across an inspection's answers, most frequent first.

    Ties keep the order in which tags first appear.
    """
    # Counter preserves insertion order and sorted() is stable
    counts = Counter(inspection.all_tags())
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)
