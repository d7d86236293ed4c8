#!/usr/bin/env python3
"""
Seed the default Apple product types

Creates iPhone, iPad, Mac, AirPods, Apple Watch and Accessory with their
specification fields. Types whose slug already exists are left untouched,
so the script can be run repeatedly.

Usage:
    cd backend
    python scripts/data_loading/seed_product_types.py [--actor seed-script]
"""
import sys
import argparse
from pathlib import Path

from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).parent.parent.parent
load_dotenv(BACKEND_DIR / '.env')

from unified_catalog.core.exceptions import NotFoundError
from unified_catalog.domain.product_type import ProductTypeCreate
from unified_catalog.services.product_type_service import ProductTypeService


def _text(name, label, required=False):
    return {"name": name, "label": label, "type": "text", "required": required}


def _textarea(name, label):
    return {"name": name, "label": label, "type": "textarea", "required": False}


HANDHELD_FIELDS = [
    _text("chip", "Chip", required=True),
    _text("ram", "RAM", required=True),
    _text("storage", "Storage", required=True),
    _text("front_camera", "Front Camera", required=True),
    _text("rear_camera", "Rear Camera", required=True),
    _text("screen_size", "Screen Size", required=True),
    _text("screen_tech", "Screen Tech"),
    _text("battery", "Battery"),
    _text("os", "OS"),
]

PRODUCT_TYPES = [
    {
        "name": "iPhone",
        "slug": "iphone",
        "description": "Apple Smartphones",
        "icon": "iphone",
        "specification_fields": HANDHELD_FIELDS,
    },
    {
        "name": "iPad",
        "slug": "ipad",
        "description": "Apple Tablets",
        "icon": "ipad",
        "specification_fields": HANDHELD_FIELDS,
    },
    {
        "name": "Mac",
        "slug": "mac",
        "description": "Apple Computers",
        "icon": "mac",
        "specification_fields": [
            _text("chip", "Chip", required=True),
            _text("gpu", "GPU"),
            _text("ram", "RAM", required=True),
            _text("storage", "Storage", required=True),
            _text("screen_size", "Screen Size", required=True),
            _text("screen_resolution", "Screen Resolution"),
            _text("battery", "Battery"),
            _text("os", "OS"),
        ],
    },
    {
        "name": "AirPods",
        "slug": "airpods",
        "description": "Apple Wireless Audio",
        "icon": "headphones",
        "specification_fields": [
            _text("chip", "Chip"),
            _text("battery_life", "Battery Life"),
            _text("water_resistance", "Water Resistance"),
            _text("bluetooth", "Bluetooth"),
        ],
    },
    {
        "name": "Apple Watch",
        "slug": "apple-watch",
        "description": "Apple Smartwatches",
        "icon": "watch",
        "specification_fields": [
            _text("screen_size", "Screen Size", required=True),
            _text("cpu", "Processor"),
            _text("os", "OS"),
            _text("storage", "Storage"),
            _text("battery_life", "Battery Life"),
            _textarea("features", "Features"),
            _textarea("health_features", "Health Features"),
        ],
    },
    {
        "name": "Accessory",
        "slug": "accessory",
        "description": "Apple Accessories",
        "icon": "accessory",
        "specification_fields": [
            _text("material", "Material"),
            _text("weight", "Weight"),
            _text("dimensions", "Dimensions"),
            _text("warranty", "Warranty"),
            _textarea("compatibility", "Compatibility"),
        ],
    },
]


def seed_product_types(service: ProductTypeService, actor_id: str) -> int:
    """
    Create every missing default product type

    Returns:
        Number of product types created
    """
    created = 0

    for display_order, definition in enumerate(PRODUCT_TYPES):
        try:
            service.get_product_type_by_slug(definition["slug"])
            print(f"  - Already exists: {definition['name']}")
            continue
        except NotFoundError:
            pass

        payload = ProductTypeCreate(display_order=display_order, **definition)
        product_type = service.create_product_type(payload, actor_id=actor_id)
        print(f"  + Created: {product_type.name} ({len(product_type.specification_fields)} fields)")
        created += 1

    return created


def main():
    parser = argparse.ArgumentParser(description='Seed the default product types')
    parser.add_argument('--actor', default='seed-script', help='User id recorded as created_by')
    args = parser.parse_args()

    print("Seeding product types...")
    try:
        created = seed_product_types(ProductTypeService(), args.actor)
    except Exception as e:
        print(f"ERROR: Seeding failed: {e}")
        sys.exit(1)

    print(f"\nSeeding complete: {created} created, {len(PRODUCT_TYPES) - created} already present")


if __name__ == '__main__':
    main()
