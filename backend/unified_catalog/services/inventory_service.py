"""
Service for variant stock and analytics counters.

Each counter change is one guarded UPDATE in its own transaction, so
concurrent orders can never push stock below zero.
"""
import logging
from typing import List, Optional

from unified_catalog.core.config import settings
from unified_catalog.core.database import read_connection, transaction
from unified_catalog.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from unified_catalog.domain.variant import Variant
from unified_catalog.repositories.variant_repository import VariantRepository

logger = logging.getLogger(__name__)


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError(f"Quantity must be a positive integer, got {quantity!r}")


class InventoryService:
    """Service for inventory business logic"""

    def decrement_stock(self, variant_id: int, quantity: int = 1) -> int:
        """
        Take `quantity` units from a variant

        Returns:
            Stock left after the decrement

        Raises:
            InsufficientStockError: fewer than `quantity` units on hand (nothing changed)
            NotFoundError: unknown variant
        """
        _check_quantity(quantity)

        with transaction() as conn:
            repo = VariantRepository(conn)
            stock = repo.decrement_stock(variant_id, quantity)

            if stock is None:
                variant = repo.find_by_id(variant_id)
                if not variant:
                    raise NotFoundError(f"Variant {variant_id} not found")
                raise InsufficientStockError(
                    f"Not enough stock for {variant.sku}: requested {quantity}, available {variant.stock}"
                )

        if 0 < stock <= settings.LOW_STOCK_THRESHOLD:
            logger.warning(f"Variant {variant_id} is low on stock: {stock} left")
        logger.info(f"Decremented stock of variant {variant_id} by {quantity} -> {stock}")
        return stock

    def increment_stock(self, variant_id: int, quantity: int = 1) -> int:
        _check_quantity(quantity)

        with transaction() as conn:
            stock = VariantRepository(conn).increment_stock(variant_id, quantity)
            if stock is None:
                raise NotFoundError(f"Variant {variant_id} not found")

        logger.info(f"Incremented stock of variant {variant_id} by {quantity} -> {stock}")
        return stock

    def increment_sales(self, variant_id: int, quantity: int = 1) -> int:
        _check_quantity(quantity)

        with transaction() as conn:
            sales_count = VariantRepository(conn).increment_sales(variant_id, quantity)
            if sales_count is None:
                raise NotFoundError(f"Variant {variant_id} not found")

        return sales_count

    def increment_views(self, variant_id: int) -> int:
        with transaction() as conn:
            view_count = VariantRepository(conn).increment_views(variant_id)
            if view_count is None:
                raise NotFoundError(f"Variant {variant_id} not found")

        return view_count

    # Queries

    def get_by_sku(self, sku: str) -> Variant:
        with read_connection() as conn:
            variant = VariantRepository(conn).find_by_sku(sku.strip())
        if not variant:
            raise NotFoundError(f"Variant with SKU {sku} not found")
        return variant

    def get_by_slug(self, slug: str) -> Variant:
        with read_connection() as conn:
            variant = VariantRepository(conn).find_by_slug(slug)
        if not variant:
            raise NotFoundError(f"Variant '{slug}' not found")
        return variant

    def find_low_stock(self, threshold: Optional[int] = None) -> List[Variant]:
        threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
        with read_connection() as conn:
            return VariantRepository(conn).find_low_stock(threshold)

    def find_out_of_stock(self) -> List[Variant]:
        with read_connection() as conn:
            return VariantRepository(conn).find_out_of_stock()

    def find_top_selling(self, limit: int = 10) -> List[Variant]:
        with read_connection() as conn:
            return VariantRepository(conn).find_top_selling(limit)
