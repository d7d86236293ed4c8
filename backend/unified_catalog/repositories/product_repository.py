"""
Product Repository - Data Access Layer for products

Handles all database queries for the products table. Variants are loaded
separately through VariantRepository so list queries stay flat.
"""
from typing import Any, Dict, List, Optional, Tuple

from psycopg2.extras import Json

from unified_catalog.domain.product import Product

PRODUCT_COLUMNS = """
    p.id, p.name, p.model, p.slug, p.base_slug, p.description,
    p.product_type_id, p.specifications, p.condition, p.brand, p.status,
    p.installment_badge, p.featured_images, p.video_url,
    p.created_by, p.updated_by, p.created_at, p.updated_at
"""

JSON_COLUMNS = ("specifications", "featured_images")

UPDATABLE_COLUMNS = (
    "name", "model", "slug", "base_slug", "description", "specifications",
    "condition", "brand", "status", "installment_badge", "featured_images",
    "video_url", "updated_by",
)


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    """

    def __init__(self, conn):
        self.conn = conn

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        """Map database row to Product domain model"""
        return Product(
            id=row['id'],
            name=row['name'],
            model=row['model'],
            slug=row.get('slug'),
            base_slug=row['base_slug'],
            description=row.get('description') or "",
            product_type_id=row['product_type_id'],
            specifications=row.get('specifications') or {},
            condition=row['condition'],
            brand=row.get('brand') or "Apple",
            status=row['status'],
            installment_badge=row.get('installment_badge') or "NONE",
            featured_images=row.get('featured_images') or [],
            video_url=row.get('video_url') or "",
            created_by=row.get('created_by'),
            updated_by=row.get('updated_by'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
        )

    @staticmethod
    def _to_db_value(column: str, value: Any) -> Any:
        if column in JSON_COLUMNS:
            return Json(value)
        if hasattr(value, 'value'):
            return value.value
        return value

    def _fetch_one(self, sql: str, params: tuple) -> Optional[Product]:
        cursor = self.conn.cursor()
        try:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            if not row:
                return None
            return self._map_row_to_product(row)
        finally:
            cursor.close()

    def _fetch_all(self, sql: str, params) -> List[Product]:
        cursor = self.conn.cursor()
        try:
            cursor.execute(sql, params)
            return [self._map_row_to_product(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def find_by_id(self, product_id: int, for_update: bool = False) -> Optional[Product]:
        """
        Find product by ID

        Args:
            product_id: Internal product ID
            for_update: Lock the row until the surrounding transaction ends
        """
        lock = " FOR UPDATE" if for_update else ""
        return self._fetch_one(f"""
            SELECT {PRODUCT_COLUMNS}
            FROM products p
            WHERE p.id = %s{lock}
        """, (product_id,))

    def find_by_slug(self, slug: str) -> Optional[Product]:
        """Find product whose slug or base slug equals the given slug"""
        return self._fetch_one(f"""
            SELECT {PRODUCT_COLUMNS}
            FROM products p
            WHERE p.slug = %s OR p.base_slug = %s
            LIMIT 1
        """, (slug, slug))

    def slug_taken(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        """
        Check whether any product already uses the slug as slug or base slug

        Args:
            slug: Candidate slug
            exclude_id: Product to ignore (the one being updated)
        """
        conditions = ["(slug = %s OR base_slug = %s)"]
        params: List[Any] = [slug, slug]

        if exclude_id is not None:
            conditions.append("id <> %s")
            params.append(exclude_id)

        cursor = self.conn.cursor()
        try:
            cursor.execute(f"""
                SELECT 1 FROM products
                WHERE {" AND ".join(conditions)}
                LIMIT 1
            """, tuple(params))
            return cursor.fetchone() is not None
        finally:
            cursor.close()

    def find_all(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        product_type_id: Optional[int] = None,
        limit: int = 12,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters and pagination

        Args:
            search: Case-insensitive match on name or model
            status: Filter by product status
            product_type_id: Filter by product type
            limit: Max results per page
            offset: Offset for pagination

        Returns:
            Tuple of (products list, total count), newest first
        """
        conditions = []
        params: List[Any] = []

        if search:
            conditions.append("(p.name ILIKE %s OR p.model ILIKE %s)")
            search_pattern = f"%{search}%"
            params.extend([search_pattern, search_pattern])

        if status:
            conditions.append("p.status = %s")
            params.append(status)

        if product_type_id is not None:
            conditions.append("p.product_type_id = %s")
            params.append(product_type_id)

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        cursor = self.conn.cursor()
        try:
            cursor.execute(f"""
                SELECT COUNT(*) AS total
                FROM products p
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                WHERE {where_clause}
                ORDER BY p.created_at DESC, p.id DESC
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            products = [self._map_row_to_product(row) for row in cursor.fetchall()]
            return products, total
        finally:
            cursor.close()

    def find_low_stock(self, threshold: int) -> List[Product]:
        """Products owning at least one variant with 0 < stock <= threshold"""
        return self._fetch_all(f"""
            SELECT {PRODUCT_COLUMNS}
            FROM products p
            WHERE EXISTS (
                SELECT 1 FROM product_variants v
                WHERE v.product_id = p.id
                  AND v.stock > 0
                  AND v.stock <= %s
            )
            ORDER BY p.name
        """, (threshold,))

    def find_out_of_stock(self) -> List[Product]:
        """Products marked OUT_OF_STOCK or whose variants are all sold out"""
        return self._fetch_all(f"""
            SELECT {PRODUCT_COLUMNS}
            FROM products p
            WHERE p.status = 'OUT_OF_STOCK'
               OR NOT EXISTS (
                    SELECT 1 FROM product_variants v
                    WHERE v.product_id = p.id AND v.stock > 0
               )
            ORDER BY p.name
        """, ())

    def insert(self, values: Dict[str, Any]) -> Product:
        """
        Insert the product shell (without variants)

        Args:
            values: Column -> value
        """
        columns = list(values.keys())
        placeholders = ", ".join(["%s"] * len(columns))
        params = [self._to_db_value(column, values[column]) for column in columns]

        return self._fetch_one(f"""
            INSERT INTO products AS p ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING {PRODUCT_COLUMNS}
        """, tuple(params))

    def update(self, product_id: int, changes: Dict[str, Any]) -> Optional[Product]:
        """
        Update the given columns of a product

        Returns:
            The updated product, or None if it does not exist
        """
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Cannot update product columns: {', '.join(sorted(unknown))}")

        if not changes:
            return self.find_by_id(product_id)

        assignments = ", ".join(f"{column} = %s" for column in changes)
        params = [self._to_db_value(column, value) for column, value in changes.items()]
        params.append(product_id)

        return self._fetch_one(f"""
            UPDATE products AS p
            SET {assignments}, updated_at = NOW()
            WHERE p.id = %s
            RETURNING {PRODUCT_COLUMNS}
        """, tuple(params))

    def delete(self, product_id: int) -> bool:
        cursor = self.conn.cursor()
        try:
            cursor.execute("DELETE FROM products WHERE id = %s", (product_id,))
            return cursor.rowcount > 0
        finally:
            cursor.close()
