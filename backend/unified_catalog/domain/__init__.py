"""
Domain Layer - Business Entities

Pydantic models for product types, products and variants, plus the slug
helpers shared by all three.
"""
from unified_catalog.domain.product_type import ProductType, FieldType, ProductTypeStatus
from unified_catalog.domain.product import Product, ProductStatus, ProductCondition, InstallmentBadge
from unified_catalog.domain.variant import Variant, VariantRecord
from unified_catalog.domain.slug import slugify, variant_slug

__all__ = [
    'ProductType',
    'FieldType',
    'ProductTypeStatus',
    'Product',
    'ProductStatus',
    'ProductCondition',
    'InstallmentBadge',
    'Variant',
    'VariantRecord',
    'slugify',
    'variant_slug',
]
