"""
Variant Repository - Data Access Layer for product variants

Handles all database queries for product_variants, including the
single-statement counter updates used for stock, sales and views.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from psycopg2.extras import Json

from unified_catalog.domain.variant import Variant, VariantRecord

VARIANT_COLUMNS = """
    v.id, v.product_id, v.position, v.color, v.version_name,
    v.original_price, v.price, v.stock, v.images, v.sku, v.slug,
    v.sales_count, v.view_count, v.legacy_fields,
    v.created_at, v.updated_at
"""


class VariantRepository:
    """
    Repository for Variant data access

    All SQL queries for product variants are centralized here.
    """

    def __init__(self, conn):
        self.conn = conn

    @staticmethod
    def _map_row_to_variant(row: dict) -> Variant:
        """Map database row to Variant domain model"""
        return Variant(
            id=row['id'],
            product_id=row['product_id'],
            position=row.get('position') or 0,
            color=row['color'],
            version_name=row['version_name'],
            original_price=row['original_price'],
            price=row['price'],
            stock=row['stock'],
            images=row.get('images') or [],
            sku=row['sku'],
            slug=row.get('slug'),
            sales_count=row.get('sales_count') or 0,
            view_count=row.get('view_count') or 0,
            legacy_fields=row.get('legacy_fields') or {},
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    def _fetch_one(self, sql: str, params: tuple) -> Optional[Variant]:
        cursor = self.conn.cursor()
        try:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            if not row:
                return None
            return self._map_row_to_variant(row)
        finally:
            cursor.close()

    def _fetch_all(self, sql: str, params) -> List[Variant]:
        cursor = self.conn.cursor()
        try:
            cursor.execute(sql, params)
            return [self._map_row_to_variant(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def _fetch_counter(self, sql: str, params: tuple, column: str) -> Optional[int]:
        cursor = self.conn.cursor()
        try:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            return row[column] if row else None
        finally:
            cursor.close()

    # Lookups

    def find_by_id(self, variant_id: int) -> Optional[Variant]:
        return self._fetch_one(f"""
            SELECT {VARIANT_COLUMNS}
            FROM product_variants v
            WHERE v.id = %s
        """, (variant_id,))

    def find_by_sku(self, sku: str) -> Optional[Variant]:
        return self._fetch_one(f"""
            SELECT {VARIANT_COLUMNS}
            FROM product_variants v
            WHERE v.sku = %s
        """, (sku,))

    def find_by_slug(self, slug: str) -> Optional[Variant]:
        """
        Find the first variant carrying a slug

        Variants of one product that share a version name share a slug,
        so the lowest position wins.
        """
        return self._fetch_one(f"""
            SELECT {VARIANT_COLUMNS}
            FROM product_variants v
            WHERE v.slug = %s
            ORDER BY v.product_id, v.position
            LIMIT 1
        """, (slug,))

    def find_by_product(self, product_id: int, order_by_name: bool = False) -> List[Variant]:
        """
        Find all variants of a product

        Args:
            product_id: Owning product
            order_by_name: Sort by color, version name instead of position
        """
        order = "v.color, v.version_name" if order_by_name else "v.position, v.id"
        return self._fetch_all(f"""
            SELECT {VARIANT_COLUMNS}
            FROM product_variants v
            WHERE v.product_id = %s
            ORDER BY {order}
        """, (product_id,))

    def find_by_products(self, product_ids: Sequence[int]) -> Dict[int, List[Variant]]:
        """
        Load variants for several products in one query

        Returns:
            product_id -> variants in position order
        """
        if not product_ids:
            return {}

        variants = self._fetch_all(f"""
            SELECT {VARIANT_COLUMNS}
            FROM product_variants v
            WHERE v.product_id = ANY(%s)
            ORDER BY v.product_id, v.position, v.id
        """, (list(product_ids),))

        grouped: Dict[int, List[Variant]] = defaultdict(list)
        for variant in variants:
            grouped[variant.product_id].append(variant)
        return dict(grouped)

    def find_low_stock(self, threshold: int) -> List[Variant]:
        return self._fetch_all(f"""
            SELECT {VARIANT_COLUMNS}
            FROM product_variants v
            WHERE v.stock > 0 AND v.stock <= %s
            ORDER BY v.stock, v.sku
        """, (threshold,))

    def find_out_of_stock(self) -> List[Variant]:
        return self._fetch_all(f"""
            SELECT {VARIANT_COLUMNS}
            FROM product_variants v
            WHERE v.stock = 0
            ORDER BY v.sku
        """, ())

    def find_top_selling(self, limit: int = 10) -> List[Variant]:
        return self._fetch_all(f"""
            SELECT {VARIANT_COLUMNS}
            FROM product_variants v
            ORDER BY v.sales_count DESC, v.id
            LIMIT %s
        """, (limit,))

    # Writes

    def insert_many(self, product_id: int, records: Sequence[VariantRecord]) -> List[Variant]:
        """
        Insert expanded variant records for a product

        Args:
            product_id: Owning product
            records: Output of variant expansion, already carrying sku/slug/position

        Returns:
            Inserted variants in record order
        """
        inserted = []
        cursor = self.conn.cursor()
        try:
            for record in records:
                cursor.execute(f"""
                    INSERT INTO product_variants AS v (
                        product_id, position, color, version_name,
                        original_price, price, stock, images, sku, slug,
                        legacy_fields
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {VARIANT_COLUMNS}
                """, (
                    product_id,
                    record.position,
                    record.color,
                    record.version_name,
                    record.original_price,
                    record.price,
                    record.stock,
                    Json(record.images),
                    record.sku,
                    record.slug,
                    Json(record.legacy_fields),
                ))
                inserted.append(self._map_row_to_variant(cursor.fetchone()))
            return inserted
        finally:
            cursor.close()

    def delete_by_product(self, product_id: int) -> int:
        """Delete every variant of a product, returning how many were removed"""
        cursor = self.conn.cursor()
        try:
            cursor.execute("DELETE FROM product_variants WHERE product_id = %s", (product_id,))
            return cursor.rowcount
        finally:
            cursor.close()

    def update_slug(self, variant_id: int, slug: str) -> None:
        cursor = self.conn.cursor()
        try:
            cursor.execute("""
                UPDATE product_variants
                SET slug = %s, updated_at = NOW()
                WHERE id = %s
            """, (slug, variant_id))
        finally:
            cursor.close()

    def decrement_stock(self, variant_id: int, quantity: int) -> Optional[int]:
        """
        Atomically take stock from a variant

        Returns:
            New stock, or None when the variant is missing or holds less
            than `quantity` (nothing is changed in that case)
        """
        return self._fetch_counter("""
            UPDATE product_variants
            SET stock = stock - %s, updated_at = NOW()
            WHERE id = %s AND stock >= %s
            RETURNING stock
        """, (quantity, variant_id, quantity), 'stock')

    def increment_stock(self, variant_id: int, quantity: int) -> Optional[int]:
        return self._fetch_counter("""
            UPDATE product_variants
            SET stock = stock + %s, updated_at = NOW()
            WHERE id = %s
            RETURNING stock
        """, (quantity, variant_id), 'stock')

    def increment_sales(self, variant_id: int, quantity: int) -> Optional[int]:
        return self._fetch_counter("""
            UPDATE product_variants
            SET sales_count = sales_count + %s
            WHERE id = %s
            RETURNING sales_count
        """, (quantity, variant_id), 'sales_count')

    def increment_views(self, variant_id: int) -> Optional[int]:
        return self._fetch_counter("""
            UPDATE product_variants
            SET view_count = view_count + 1
            WHERE id = %s
            RETURNING view_count
        """, (variant_id,), 'view_count')
