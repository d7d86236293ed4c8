"""
SKU allocation

SKUs come from the PostgreSQL sequence `variant_sku_seq`, so two concurrent
transactions never receive the same value. A rolled back transaction leaves
a gap in the numbering; uniqueness is what matters.
"""
from typing import Protocol

from unified_catalog.core.config import settings

SKU_SEQUENCE = "variant_sku_seq"


class SkuAllocator(Protocol):
    def next_sku(self) -> str:
        ...


def format_sku(number: int, width: int = None) -> str:
    """Zero-padded numeric SKU: 201 -> "00000201" """
    width = settings.SKU_WIDTH if width is None else width
    return str(number).zfill(width)


class SequenceSkuAllocator:
    """Allocates SKUs from the database sequence on the caller's connection"""

    def __init__(self, conn, width: int = None):
        self.conn = conn
        self.width = width

    def next_sku(self) -> str:
        cursor = self.conn.cursor()
        try:
            cursor.execute("SELECT nextval(%s) AS value", (SKU_SEQUENCE,))
            row = cursor.fetchone()
            return format_sku(row['value'], self.width)
        finally:
            cursor.close()
