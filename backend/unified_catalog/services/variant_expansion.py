"""
Variant Expansion

Flattens the nested (color x version) payload of a product form into one
VariantRecord per option, each with its own SKU and composite slug.

    [{"color": "Black", "images": [...], "options": [
        {"version_name": "256GB", "original_price": 34990000, "price": 33990000, "stock": 50},
        {"version_name": "512GB", ...},
    ]}]
    -> [VariantRecord(Black 256GB, sku=00000201, slug=iphone-15-pro-max-256gb),
        VariantRecord(Black 512GB, sku=00000202, slug=iphone-15-pro-max-512gb)]
"""
import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from unified_catalog.core.config import settings
from unified_catalog.core.exceptions import ValidationError
from unified_catalog.domain.product import VariantGroup
from unified_catalog.domain.slug import variant_slug
from unified_catalog.domain.variant import VariantRecord
from unified_catalog.repositories.sku_allocator import SkuAllocator

logger = logging.getLogger(__name__)


def _clean(text: Optional[str]) -> str:
    return (text or "").strip()


def expand_variant_groups(
    groups: Sequence[VariantGroup],
    base_slug: str,
    sku_allocator: SkuAllocator,
    strict: Optional[bool] = None,
) -> List[VariantRecord]:
    """
    Expand variant groups into variant records

    Groups with a blank color or no options, and options with a blank
    version name, are skipped with a warning. With strict=True
    (default: settings.STRICT_VARIANT_GROUPS) they are rejected instead.

    Args:
        groups: Color groups in submission order
        base_slug: Base slug of the owning product
        sku_allocator: Source of new unique SKUs

    Returns:
        Records in group order, then option order

    Raises:
        ValidationError: price above original price, or malformed input in strict mode
    """
    strict = settings.STRICT_VARIANT_GROUPS if strict is None else strict
    records: List[VariantRecord] = []

    for group_index, group in enumerate(groups, start=1):
        color = _clean(group.color)

        if not color:
            if strict:
                raise ValidationError(f"Variant group #{group_index} has no color")
            logger.warning(f"Skipping variant group #{group_index}: missing color")
            continue

        if not group.options:
            if strict:
                raise ValidationError(f"Variant group '{color}' has no options")
            logger.warning(f"Skipping variant group '{color}': no options")
            continue

        images = [image.strip() for image in group.images if image and image.strip()]

        for option_index, option in enumerate(group.options, start=1):
            version_name = _clean(option.version_name)

            if not version_name:
                if strict:
                    raise ValidationError(f"Option #{option_index} of '{color}' has no version name")
                logger.warning(f"Skipping option #{option_index} of '{color}': missing version name")
                continue

            record = VariantRecord(
                color=color,
                version_name=version_name,
                original_price=option.original_price or Decimal("0"),
                price=option.price or Decimal("0"),
                stock=option.stock or 0,
                sku=sku_allocator.next_sku(),
                slug=variant_slug(base_slug, version_name),
                position=len(records),
                images=list(images),
            )
            records.append(record)
            logger.debug(f"Expanded variant {record.sku} -> {record.slug}")

    return records
