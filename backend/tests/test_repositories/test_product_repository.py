"""
Unit tests for ProductRepository

These tests validate repository logic without requiring a database connection.
"""
import pytest
from psycopg2.extras import Json

from unified_catalog.domain.product import Product, ProductStatus
from unified_catalog.repositories.product_repository import ProductRepository


class TestProductRepository:
    """Test ProductRepository methods"""

    def test_find_by_id_returns_product(self, mock_conn, mock_cursor, product_row):
        # Arrange
        mock_cursor.fetchone.return_value = product_row

        # Act
        product = ProductRepository(mock_conn).find_by_id(10)

        # Assert
        assert isinstance(product, Product)
        assert product.base_slug == "iphone-15-pro-max"
        assert product.status == ProductStatus.AVAILABLE
        assert product.variants == []
        mock_cursor.execute.assert_called_once()
        mock_cursor.close.assert_called_once()

    def test_find_by_slug_matches_slug_or_base_slug(self, mock_conn, mock_cursor, product_row):
        mock_cursor.fetchone.return_value = product_row

        ProductRepository(mock_conn).find_by_slug("iphone-15-pro-max")

        sql, params = mock_cursor.execute.call_args[0]
        assert "p.slug = %s OR p.base_slug = %s" in sql
        assert params == ("iphone-15-pro-max", "iphone-15-pro-max")

    @pytest.mark.parametrize("row, expected", [({"?column?": 1}, True), (None, False)])
    def test_slug_taken(self, mock_conn, mock_cursor, row, expected):
        mock_cursor.fetchone.return_value = row

        assert ProductRepository(mock_conn).slug_taken("iphone-15") is expected

    def test_slug_taken_excludes_current_product(self, mock_conn, mock_cursor):
        mock_cursor.fetchone.return_value = None

        ProductRepository(mock_conn).slug_taken("iphone-15", exclude_id=10)

        sql, params = mock_cursor.execute.call_args[0]
        assert "id <> %s" in sql
        assert params == ("iphone-15", "iphone-15", 10)

    def test_find_all_with_filters(self, mock_conn, mock_cursor, product_row):
        # Arrange: count query then page query
        mock_cursor.fetchone.return_value = {"total": 30}
        mock_cursor.fetchall.return_value = [product_row]

        # Act
        products, total = ProductRepository(mock_conn).find_all(
            search="pro", status="AVAILABLE", product_type_id=1, limit=12, offset=12
        )

        # Assert
        assert total == 30
        assert len(products) == 1
        assert mock_cursor.execute.call_count == 2

        page_sql, page_params = mock_cursor.execute.call_args_list[1][0]
        assert "p.name ILIKE %s OR p.model ILIKE %s" in page_sql
        assert "ORDER BY p.created_at DESC" in page_sql
        assert page_params == ["%pro%", "%pro%", "AVAILABLE", 1, 12, 12]

    def test_find_all_without_filters(self, mock_conn, mock_cursor):
        mock_cursor.fetchone.return_value = {"total": 0}
        mock_cursor.fetchall.return_value = []

        products, total = ProductRepository(mock_conn).find_all()

        count_sql, count_params = mock_cursor.execute.call_args_list[0][0]
        assert "WHERE 1=1" in count_sql
        assert count_params == []
        assert products == []

    def test_insert_wraps_json_columns(self, mock_conn, mock_cursor, product_row):
        mock_cursor.fetchone.return_value = product_row

        ProductRepository(mock_conn).insert({
            "name": "iPhone 15 Pro Max",
            "specifications": {"chip": "A17 Pro"},
            "status": ProductStatus.AVAILABLE,
        })

        sql, params = mock_cursor.execute.call_args[0]
        assert "RETURNING" in sql
        assert params[0] == "iPhone 15 Pro Max"
        assert isinstance(params[1], Json)
        assert params[2] == "AVAILABLE"

    def test_update_rejects_immutable_columns(self, mock_conn):
        with pytest.raises(ValueError):
            ProductRepository(mock_conn).update(10, {"product_type_id": 2})

    def test_update_without_changes_reloads(self, mock_conn, mock_cursor, product_row):
        mock_cursor.fetchone.return_value = product_row

        product = ProductRepository(mock_conn).update(10, {})

        assert product.id == 10
        assert "SELECT" in mock_cursor.execute.call_args[0][0]

    def test_find_low_stock_uses_threshold(self, mock_conn, mock_cursor):
        mock_cursor.fetchall.return_value = []

        ProductRepository(mock_conn).find_low_stock(5)

        sql, params = mock_cursor.execute.call_args[0]
        assert "v.stock <= %s" in sql
        assert params == (5,)

    def test_delete_returns_false_when_missing(self, mock_conn, mock_cursor):
        mock_cursor.rowcount = 0

        assert ProductRepository(mock_conn).delete(10) is False
