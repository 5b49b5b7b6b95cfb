"""
Demo data for a fresh installation.

Seeds:
- 11 catalog checkpoints (packaging, assembly, visual, functional, measurement)
- Clients, product categories and sample purposes
- Three inspections (one completed, two in progress)
- The product list new inspections are created from

The stores fall back to this data when nothing has been persisted yet
(SEED_DEMO_DATA). It can also be written to the database explicitly:

Usage:
  python -m inspection_api.db.run_migrations upgrade head
  python -m inspection_api.db.seed
"""

from __future__ import annotations

import logging
from typing import List, Optional

from inspection_api.core.settings import get_app_settings
from inspection_api.db.session import get_session_factory
from inspection_api.schemas.catalog import CatalogSnapshot, ProductDescriptor
from inspection_api.schemas.inspection import Inspection
from inspection_api.services.inspection_store import encode_inspections
from inspection_api.services.storage import BlobStorage, DatabaseBlobStorage

logger = logging.getLogger(__name__)

_CHECKPOINTS = [
    {"id": "chk-1", "category": "Packaging", "title": "Carton Condition",
     "description": "Inspect for any damage, punctures, or water marks on the outer carton."},
    {"id": "chk-2", "category": "Packaging", "title": "Labeling & Marking",
     "description": "Verify that all labels (shipping, product info, warnings) are correct, legible, and properly placed."},
    {"id": "chk-3", "category": "Assembly", "title": "Component Check",
     "description": "Ensure all parts, hardware, and instructions are included as per the manual."},
    {"id": "chk-4", "category": "Assembly", "title": "Ease of Assembly",
     "description": "Perform a trial assembly to check for alignment of holes, clarity of instructions, and overall ease.",
     "samplePurposes": ["Sample for testing"]},
    {"id": "chk-5", "category": "Visual", "title": "Surface Finish",
     "description": "Inspect for scratches, dents, chips, bubbles, or inconsistencies in paint, varnish or stain."},
    {"id": "chk-6", "category": "Visual", "title": "Color Consistency",
     "description": "Compare product color against the approved master sample under controlled lighting.",
     "productCategories": ["Seating"]},
    {"id": "chk-7", "category": "Visual", "title": "Upholstery & Fabric",
     "description": "Check for tears, loose threads, stains, and pattern alignment on all fabric/leather parts.",
     "productCategories": ["Seating"]},
    {"id": "chk-8", "category": "Functional", "title": "Stability & Levelness",
     "description": "Place on a level surface to check for wobbling. All feet/legs should be even."},
    {"id": "chk-9", "category": "Functional", "title": "Moving Parts",
     "description": "Test all drawers, doors, and reclining mechanisms for smooth and correct operation.",
     "productCategories": ["Storage"]},
    {"id": "chk-10", "category": "Measurement", "title": "Overall Dimensions",
     "description": "Verify that the product's height, width, and depth match the specifications within tolerance."},
    {"id": "chk-11", "category": "Visual", "title": "Glass Inspection",
     "description": "Check for chips, cracks, or scratches on any glass components.",
     "productCategories": ["Tables"], "clients": ["The Design Collective"]},
]

_CLIENTS = ["The Design Collective", "Scandi Living", "UrbanLoft", "Modernica"]
_PRODUCT_CATEGORIES = ["Seating", "Tables", "Storage"]
_SAMPLE_PURPOSES = ["Sample for testing", "Sample for client review", "Sample for mass production"]

_PRODUCTS = [
    {"name": '"Evelyn" Velvet Armchair', "category": "Seating", "type": "Armchair", "image": "furniture-chair"},
    {"name": '"Nordic" Oak Dining Table', "category": "Tables", "type": "Dining Table", "image": "wood-grain"},
    {"name": '"Connect" Modular Sofa', "category": "Seating", "type": "Sofa", "image": "furniture-sofa"},
    {"name": '"Loft" Coffee Table', "category": "Tables", "type": "Coffee Table", "image": "wood-grain"},
    {"name": '"Archive" Bookshelf', "category": "Storage", "type": "Bookshelf", "image": "wood-grain"},
]

_INSPECTOR = {"name": "Jane Doe", "avatar": "user-avatar-1"}


def _answer(checkpoint_id: str, status: str, checked: int, conform: int, non_conform: int,
            notes: str = "", images=None, tags=None) -> dict:
    return {
        "kind": "catalog",
        "checkpointId": checkpoint_id,
        "status": status,
        "pcsChecked": checked,
        "pcsConform": conform,
        "pcsNonConform": non_conform,
        "notes": notes,
        "images": images or [],
        "tags": tags or [],
    }


_INSPECTIONS = [
    {
        "id": "insp-001",
        "title": "Velvet Armchair - Pre-Shipment",
        "product": _PRODUCTS[0],
        "client": "The Design Collective",
        "samplePurpose": "Sample for client review",
        "date": "2024-07-28",
        "status": "Completed",
        "inspector": _INSPECTOR,
        "checkpoints": [
            _answer("chk-1", "Conform", 10, 10, 0, "Carton is in good condition, no visible damage."),
            _answer("chk-2", "Conform", 10, 10, 0, "All labels are correct and legible."),
            _answer(
                "chk-5", "Non-Conform", 10, 9, 1,
                "Minor scratch found on the back-left leg. Approximately 1cm long, does not affect "
                "structure but is visible on close inspection.",
                images=[{"src": "defect-scratch", "comment": "Close-up of the scratch."}],
                tags=["finish", "cosmetic", "scratch"],
            ),
            _answer("chk-6", "Conform", 10, 10, 0, "Color matches master sample."),
            _answer(
                "chk-7", "Conform", 10, 10, 0, "Upholstery is clean, no defects found.",
                images=[{"src": "fabric-texture", "comment": "Texture of the velvet."}],
            ),
            _answer("chk-8", "Conform", 10, 10, 0, "Chair is stable, no wobble."),
        ],
        "generalComments": (
            "Overall, the product quality is high. Only one minor cosmetic issue was found. "
            "Production seems to be following specifications accurately."
        ),
        "conformanceStatement": (
            "Product conforms to all critical standards. Minor non-conformance in cosmetic finish noted."
        ),
        "nextSteps": (
            "Recommend to accept shipment. Suggest reviewing handling procedures to prevent scratches on legs."
        ),
        "shortSummary": (
            'The "Evelyn" Velvet Armchair inspection is complete. The product meets all functional and '
            "packaging standards, with only a minor cosmetic scratch on one leg. The shipment is "
            "recommended for acceptance."
        ),
        "longSummary": (
            'The pre-shipment inspection for the "Evelyn" Velvet Armchair, ordered by The Design '
            "Collective, was conducted on 2024-07-28. The inspection covered packaging, visual, and "
            "functional checkpoints. Packaging and labeling were found to be compliant. Functionally, "
            "the chair is stable and well-constructed. A single non-conformance was identified: a minor "
            "1cm scratch on the back-left leg, which is cosmetic and does not impact the item's "
            "structural integrity. All other visual checks, including color and upholstery, conformed "
            'to the standards. Based on the tags, the issue is related to the "finish". Overall '
            "conformance is high, and the recommendation is to accept the shipment while advising the "
            "factory to improve handling processes to mitigate such cosmetic defects in the future."
        ),
    },
    {
        "id": "insp-002",
        "title": "Oak Dining Table - In-Production",
        "product": _PRODUCTS[1],
        "client": "Scandi Living",
        "samplePurpose": "Sample for testing",
        "date": "2024-08-02",
        "status": "In Progress",
        "inspector": _INSPECTOR,
        "checkpoints": [
            _answer("chk-3", "Conform", 5, 5, 0),
            _answer("chk-5", "Conform", 5, 5, 0),
            _answer("chk-8", "Conform", 5, 5, 0),
            _answer(
                "chk-10", "Non-Conform", 5, 4, 1,
                "Table width is 2cm over the maximum tolerance.",
                tags=["measurement", "specification"],
            ),
        ],
    },
    {
        "id": "insp-003",
        "title": "Modular Sofa - DUPRO",
        "product": _PRODUCTS[2],
        "client": "UrbanLoft",
        "samplePurpose": "Sample for mass production",
        "date": "2024-07-30",
        "status": "In Progress",
        "inspector": _INSPECTOR,
        "checkpoints": [],
    },
]


# PUBLIC_INTERFACE
def demo_catalog() -> CatalogSnapshot:
    """Checkpoints and value lists of the demo installation."""
    return CatalogSnapshot.model_validate(
        {
            "checkpoints": _CHECKPOINTS,
            "clients": _CLIENTS,
            "productCategories": _PRODUCT_CATEGORIES,
            "samplePurposes": _SAMPLE_PURPOSES,
        }
    )


# PUBLIC_INTERFACE
def demo_inspections() -> List[Inspection]:
    """The demo reports, newest first as the store keeps them."""
    return [Inspection.model_validate(item) for item in _INSPECTIONS]


# PUBLIC_INTERFACE
def demo_products() -> List[ProductDescriptor]:
    return [ProductDescriptor.model_validate(item) for item in _PRODUCTS]


# PUBLIC_INTERFACE
def seed_all(storage: Optional[BlobStorage] = None) -> None:
    """
    Write the demo catalog and inspections under their storage keys.

    Keys that already hold data are left alone, so running this twice is harmless.
    """
    settings = get_app_settings()
    storage = storage or DatabaseBlobStorage(get_session_factory())

    if storage.load(settings.CATALOG_STORAGE_KEY) is None:
        storage.save(settings.CATALOG_STORAGE_KEY, demo_catalog().model_dump_json(by_alias=True))
        logger.info("Seeded catalog under '%s'", settings.CATALOG_STORAGE_KEY)
    else:
        logger.info("Catalog already present under '%s'; skipping", settings.CATALOG_STORAGE_KEY)

    if storage.load(settings.INSPECTION_STORAGE_KEY) is None:
        storage.save(settings.INSPECTION_STORAGE_KEY, encode_inspections(demo_inspections()))
        logger.info("Seeded inspections under '%s'", settings.INSPECTION_STORAGE_KEY)
    else:
        logger.info("Inspections already present under '%s'; skipping", settings.INSPECTION_STORAGE_KEY)


if __name__ == "__main__":
    from inspection_api.core.logging import configure_logging

    configure_logging()
    seed_all()
