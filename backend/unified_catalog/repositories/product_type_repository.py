"""
ProductType Repository - Data Access Layer for product types

Handles all database queries for product_types and returns ProductType
domain models. Works on the connection it is given so callers decide the
transaction boundary.
"""
from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from unified_catalog.domain.product_type import ProductType, parse_specification_field

PRODUCT_TYPE_COLUMNS = """
    pt.id, pt.name, pt.slug, pt.description, pt.icon,
    pt.specification_fields, pt.status, pt.display_order,
    pt.created_by, pt.updated_by, pt.created_at, pt.updated_at
"""

UPDATABLE_COLUMNS = (
    "name", "slug", "description", "icon", "specification_fields",
    "status", "display_order", "updated_by",
)


class ProductTypeRepository:
    """
    Repository for ProductType data access

    All SQL queries for product types are centralized here.
    """

    def __init__(self, conn):
        self.conn = conn

    @staticmethod
    def _map_row_to_product_type(row: dict) -> ProductType:
        fields = row.get('specification_fields') or []
        return ProductType(
            id=row['id'],
            name=row['name'],
            slug=row['slug'],
            description=row.get('description') or "",
            icon=row.get('icon') or "",
            specification_fields=[parse_specification_field(field) for field in fields],
            status=row['status'],
            display_order=row.get('display_order') or 0,
            created_by=row.get('created_by'),
            updated_by=row.get('updated_by'),
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at'),
            product_count=row.get('product_count'),
        )

    @staticmethod
    def _to_db_value(column: str, value: Any) -> Any:
        if column == 'specification_fields':
            return Json([field.model_dump(mode="json") for field in value])
        if hasattr(value, 'value'):
            return value.value
        return value

    def _fetch_one(self, sql: str, params: tuple) -> Optional[ProductType]:
        cursor = self.conn.cursor()
        try:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            if not row:
                return None
            return self._map_row_to_product_type(row)
        finally:
            cursor.close()

    def find_by_id(self, product_type_id: int, for_update: bool = False) -> Optional[ProductType]:
        """
        Find product type by ID

        Args:
            product_type_id: Internal product type ID
            for_update: Lock the row until the surrounding transaction ends
        """
        lock = " FOR UPDATE" if for_update else ""
        return self._fetch_one(f"""
            SELECT {PRODUCT_TYPE_COLUMNS}
            FROM product_types pt
            WHERE pt.id = %s{lock}
        """, (product_type_id,))

    def find_by_slug(self, slug: str) -> Optional[ProductType]:
        return self._fetch_one(f"""
            SELECT {PRODUCT_TYPE_COLUMNS}
            FROM product_types pt
            WHERE pt.slug = %s
        """, (slug.lower(),))

    def find_by_name(self, name: str, exclude_id: Optional[int] = None) -> Optional[ProductType]:
        """Case-insensitive lookup by name, optionally ignoring one product type"""
        conditions = ["LOWER(pt.name) = LOWER(%s)"]
        params: List[Any] = [name.strip()]

        if exclude_id is not None:
            conditions.append("pt.id <> %s")
            params.append(exclude_id)

        return self._fetch_one(f"""
            SELECT {PRODUCT_TYPE_COLUMNS}
            FROM product_types pt
            WHERE {" AND ".join(conditions)}
        """, tuple(params))

    def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        cursor = self.conn.cursor()
        try:
            if exclude_id is None:
                cursor.execute("SELECT 1 FROM product_types WHERE slug = %s", (slug,))
            else:
                cursor.execute(
                    "SELECT 1 FROM product_types WHERE slug = %s AND id <> %s",
                    (slug, exclude_id)
                )
            return cursor.fetchone() is not None
        finally:
            cursor.close()

    def find_all(self, status: Optional[str] = None) -> List[ProductType]:
        """
        Find product types with their product counts

        Args:
            status: Filter by status (ACTIVE / INACTIVE); None returns all

        Returns:
            Product types ordered by display_order, then name
        """
        conditions = []
        params = []

        if status:
            conditions.append("pt.status = %s")
            params.append(status)

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        cursor = self.conn.cursor()
        try:
            cursor.execute(f"""
                SELECT
                    {PRODUCT_TYPE_COLUMNS},
                    COALESCE(pc.product_count, 0) AS product_count
                FROM product_types pt
                LEFT JOIN (
                    SELECT product_type_id, COUNT(*) AS product_count
                    FROM products
                    GROUP BY product_type_id
                ) pc ON pc.product_type_id = pt.id
                WHERE {where_clause}
                ORDER BY pt.display_order, pt.name
            """, params)

            return [self._map_row_to_product_type(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def count_products(self, product_type_id: int) -> int:
        """Number of products referencing the product type"""
        cursor = self.conn.cursor()
        try:
            cursor.execute(
                "SELECT COUNT(*) AS total FROM products WHERE product_type_id = %s",
                (product_type_id,)
            )
            return cursor.fetchone()['total']
        finally:
            cursor.close()

    def insert(self, values: Dict[str, Any]) -> ProductType:
        """
        Insert a product type

        Args:
            values: Column -> value; specification_fields as descriptor models
        """
        columns = list(values.keys())
        placeholders = ", ".join(["%s"] * len(columns))
        params = [self._to_db_value(column, values[column]) for column in columns]

        return self._fetch_one(f"""
            INSERT INTO product_types AS pt ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING {PRODUCT_TYPE_COLUMNS}
        """, tuple(params))

    def update(self, product_type_id: int, changes: Dict[str, Any]) -> Optional[ProductType]:
        """
        Update the given columns of a product type

        Returns:
            The updated product type, or None if it does not exist
        """
        unknown = set(changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Cannot update product type columns: {', '.join(sorted(unknown))}")

        if not changes:
            return self.find_by_id(product_type_id)

        assignments = ", ".join(f"{column} = %s" for column in changes)
        params = [self._to_db_value(column, value) for column, value in changes.items()]
        params.append(product_type_id)

        return self._fetch_one(f"""
            UPDATE product_types AS pt
            SET {assignments}, updated_at = NOW()
            WHERE pt.id = %s
            RETURNING {PRODUCT_TYPE_COLUMNS}
        """, tuple(params))

    def delete(self, product_type_id: int) -> bool:
        cursor = self.conn.cursor()
        try:
            cursor.execute("DELETE FROM product_types WHERE id = %s", (product_type_id,))
            return cursor.rowcount > 0
        finally:
            cursor.close()
