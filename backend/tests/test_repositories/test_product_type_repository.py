"""
Unit tests for ProductTypeRepository

These tests validate repository logic without requiring a database connection.
"""
import pytest
from psycopg2.extras import Json

from unified_catalog.domain.product_type import ProductType, SelectField
from unified_catalog.repositories.product_type_repository import ProductTypeRepository


class TestProductTypeRepository:
    """Test ProductTypeRepository methods"""

    def test_find_by_id_returns_product_type(self, mock_conn, mock_cursor, iphone_type_row):
        # Arrange: Mock database row
        mock_cursor.fetchone.return_value = iphone_type_row

        # Act
        product_type = ProductTypeRepository(mock_conn).find_by_id(1)

        # Assert
        assert isinstance(product_type, ProductType)
        assert product_type.slug == "iphone"
        assert isinstance(product_type.specification_fields[1], SelectField)
        assert product_type.product_count is None

        sql, params = mock_cursor.execute.call_args[0]
        assert "FOR UPDATE" not in sql
        assert params == (1,)
        mock_cursor.close.assert_called_once()
        mock_conn.close.assert_not_called()

    def test_find_by_id_for_update_locks_row(self, mock_conn, mock_cursor, iphone_type_row):
        mock_cursor.fetchone.return_value = iphone_type_row

        ProductTypeRepository(mock_conn).find_by_id(1, for_update=True)

        assert "FOR UPDATE" in mock_cursor.execute.call_args[0][0]

    def test_find_by_id_returns_none_when_not_found(self, mock_conn, mock_cursor):
        mock_cursor.fetchone.return_value = None

        assert ProductTypeRepository(mock_conn).find_by_id(999) is None
        mock_cursor.close.assert_called_once()

    def test_find_by_name_is_case_insensitive(self, mock_conn, mock_cursor):
        mock_cursor.fetchone.return_value = None

        ProductTypeRepository(mock_conn).find_by_name(" IPHONE ", exclude_id=3)

        sql, params = mock_cursor.execute.call_args[0]
        assert "LOWER(pt.name) = LOWER(%s)" in sql
        assert "pt.id <> %s" in sql
        assert params == ("IPHONE", 3)

    def test_find_all_filters_by_status_with_counts(self, mock_conn, mock_cursor, iphone_type_row):
        mock_cursor.fetchall.return_value = [dict(iphone_type_row, product_count=4)]

        product_types = ProductTypeRepository(mock_conn).find_all(status="ACTIVE")

        sql, params = mock_cursor.execute.call_args[0]
        assert "pt.status = %s" in sql
        assert "ORDER BY pt.display_order, pt.name" in sql
        assert params == ["ACTIVE"]
        assert product_types[0].product_count == 4

    def test_find_all_without_status(self, mock_conn, mock_cursor):
        mock_cursor.fetchall.return_value = []

        ProductTypeRepository(mock_conn).find_all()

        sql, params = mock_cursor.execute.call_args[0]
        assert "WHERE 1=1" in sql
        assert params == []

    def test_insert_serializes_fields_as_json(self, mock_conn, mock_cursor, iphone_type, iphone_type_row):
        mock_cursor.fetchone.return_value = iphone_type_row

        ProductTypeRepository(mock_conn).insert({
            "name": "iPhone",
            "slug": "iphone",
            "specification_fields": iphone_type.specification_fields,
            "status": iphone_type.status,
        })

        sql, params = mock_cursor.execute.call_args[0]
        assert sql.strip().startswith("INSERT INTO product_types")
        assert isinstance(params[2], Json)
        assert params[2].adapted[1]["options"] == ["128GB", "256GB", "512GB", "1TB"]
        assert params[3] == "ACTIVE"

    def test_update_rejects_unknown_columns(self, mock_conn):
        with pytest.raises(ValueError):
            ProductTypeRepository(mock_conn).update(1, {"id": 5})

    def test_update_sets_updated_at(self, mock_conn, mock_cursor, iphone_type_row):
        mock_cursor.fetchone.return_value = iphone_type_row

        ProductTypeRepository(mock_conn).update(1, {"name": "iPhone", "display_order": 1})

        sql, params = mock_cursor.execute.call_args[0]
        assert "name = %s, display_order = %s, updated_at = NOW()" in sql
        assert params == ("iPhone", 1, 1)

    def test_count_products(self, mock_conn, mock_cursor):
        mock_cursor.fetchone.return_value = {"total": 3}

        assert ProductTypeRepository(mock_conn).count_products(1) == 3

    def test_delete(self, mock_conn, mock_cursor):
        mock_cursor.rowcount = 1

        assert ProductTypeRepository(mock_conn).delete(1) is True
        mock_cursor.close.assert_called_once()
