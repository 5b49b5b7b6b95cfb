from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from inspection_api.core.deps import get_catalog_store, get_product_catalog
from inspection_api.schemas.catalog import CatalogValueCreate, ProductDescriptor
from inspection_api.services.catalog_store import CatalogList, CatalogStore
from inspection_api.services.products import ProductCatalog

router = APIRouter(prefix="/catalog", tags=["Catalog"])


# PUBLIC_INTERFACE
@router.get(
    "/products",
    response_model=List[ProductDescriptor],
    summary="List products",
    description="Products a new inspection can be created for.",
)
def list_products(products: ProductCatalog = Depends(get_product_catalog)) -> List[ProductDescriptor]:
    return products.list_products()


# PUBLIC_INTERFACE
@router.get(
    "/{which}",
    response_model=List[str],
    summary="List catalog values",
    description="Values of one catalog list: clients, product-categories or sample-purposes.",
)
def list_values(which: CatalogList, catalog: CatalogStore = Depends(get_catalog_store)) -> List[str]:
    return catalog.list_values(which)


# PUBLIC_INTERFACE
@router.post(
    "/{which}",
    response_model=List[str],
    status_code=status.HTTP_201_CREATED,
    summary="Add catalog value",
    description="Add a value to a catalog list. Adding a value that is already present changes nothing.",
)
def add_value(
    which: CatalogList,
    payload: CatalogValueCreate,
    catalog: CatalogStore = Depends(get_catalog_store),
) -> List[str]:
    return catalog.add_value(which, payload.name)


# PUBLIC_INTERFACE
@router.delete(
    "/{which}/{value}",
    response_model=List[str],
    summary="Delete catalog value",
    description="Remove a value from a catalog list and return what remains.",
)
def delete_value(
    which: CatalogList,
    value: str,
    catalog: CatalogStore = Depends(get_catalog_store),
) -> List[str]:
    return catalog.delete_value(which, value)
