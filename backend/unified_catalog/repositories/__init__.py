"""
Repository Layer - Data Access

Each repository wraps the SQL for one table and works on the psycopg2
connection passed to it, so a service can run several repositories inside
one transaction.
"""
from unified_catalog.repositories.product_type_repository import ProductTypeRepository
from unified_catalog.repositories.product_repository import ProductRepository
from unified_catalog.repositories.variant_repository import VariantRepository
from unified_catalog.repositories.sku_allocator import SequenceSkuAllocator

__all__ = [
    'ProductTypeRepository',
    'ProductRepository',
    'VariantRepository',
    'SequenceSkuAllocator',
]
