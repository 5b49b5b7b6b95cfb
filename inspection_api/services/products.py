from __future__ import annotations

from typing import Iterable, List, Optional

from inspection_api.schemas.catalog import ProductDescriptor


class ProductCatalog:
    """Read-only list of products that can be inspected, looked up by type."""

    def __init__(self, products: Iterable[ProductDescriptor]) -> None:
        self._products: List[ProductDescriptor] = list(products)

    def list_products(self) -> List[ProductDescriptor]:
        return list(self._products)

    def find_by_type(self, product_type: str) -> Optional[ProductDescriptor]:
        return next((p for p in self._products if p.type == product_type), None)
