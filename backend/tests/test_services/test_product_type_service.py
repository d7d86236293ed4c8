"""
Unit tests for ProductTypeService
"""
from unittest.mock import patch

import pytest

from unified_catalog.core.exceptions import ConflictError, NotFoundError, ReferentialError, ValidationError
from unified_catalog.domain.product_type import (
    ProductTypeCreate,
    ProductTypeUpdate,
    SpecificationFieldUpdate,
    parse_specification_field,
)
from unified_catalog.services import product_type_service
from unified_catalog.services.product_type_service import ProductTypeService


@pytest.fixture
def repo(monkeypatch, fake_transaction):
    monkeypatch.setattr(product_type_service, "transaction", fake_transaction)
    monkeypatch.setattr(product_type_service, "read_connection", fake_transaction)

    with patch('unified_catalog.services.product_type_service.ProductTypeRepository') as repo_cls:
        repo = repo_cls.return_value
        repo.update.side_effect = lambda product_type_id, changes: changes
        yield repo


class TestCreateProductType:

    def test_creates_with_generated_slug(self, repo, iphone_type, mock_conn):
        # Arrange
        repo.find_by_name.return_value = None
        repo.slug_exists.return_value = False
        repo.insert.return_value = iphone_type

        # Act
        payload = ProductTypeCreate(
            name=" Apple Watch ",
            specification_fields=[{"name": "screen_size", "label": "Screen Size", "type": "text", "required": True}],
        )
        ProductTypeService().create_product_type(payload, actor_id="admin-1")

        # Assert
        values = repo.insert.call_args[0][0]
        assert values["name"] == "Apple Watch"
        assert values["slug"] == "apple-watch"
        assert values["status"].value == "ACTIVE"
        assert values["created_by"] == "admin-1"
        assert values["specification_fields"][0].name == "screen_size"
        repo.find_by_name.assert_called_once_with("Apple Watch")
        mock_conn.commit.assert_called_once()

    def test_duplicate_name_is_conflict(self, repo, iphone_type, mock_conn):
        repo.find_by_name.return_value = iphone_type

        with pytest.raises(ConflictError) as exc_info:
            ProductTypeService().create_product_type(ProductTypeCreate(name="IPHONE"), actor_id="admin-1")

        assert exc_info.value.field == "name"
        repo.insert.assert_not_called()
        mock_conn.rollback.assert_called_once()

    def test_duplicate_slug_is_conflict(self, repo):
        repo.find_by_name.return_value = None
        repo.slug_exists.return_value = True

        with pytest.raises(ConflictError) as exc_info:
            ProductTypeService().create_product_type(ProductTypeCreate(name="Mac", slug="mac"), actor_id="admin-1")

        assert exc_info.value.field == "slug"

    def test_blank_slug_is_derived_from_name(self, repo, iphone_type):
        repo.find_by_name.return_value = None
        repo.slug_exists.return_value = False
        repo.insert.return_value = iphone_type

        ProductTypeService().create_product_type(
            ProductTypeCreate(name="Apple Watch", slug="   "), actor_id="admin-1"
        )

        assert repo.insert.call_args[0][0]["slug"] == "apple-watch"
        repo.slug_exists.assert_called_once_with("apple-watch")

    def test_blank_name(self, repo):
        with pytest.raises(ValidationError):
            ProductTypeService().create_product_type(ProductTypeCreate(name="   "), actor_id="admin-1")


class TestUpdateProductType:

    def test_rename_keeps_slug(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type
        repo.find_by_name.return_value = None

        changes = ProductTypeService().update_product_type(
            1, ProductTypeUpdate(name="iPhone Pro", display_order=2), actor_id="admin-2"
        )

        assert changes["name"] == "iPhone Pro"
        assert changes["display_order"] == 2
        assert changes["updated_by"] == "admin-2"
        assert "slug" not in changes
        repo.find_by_name.assert_called_once_with("iPhone Pro", exclude_id=1)

    def test_rename_to_existing_name(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type
        repo.find_by_name.return_value = iphone_type.model_copy(update={"id": 2, "name": "iPad"})

        with pytest.raises(ConflictError):
            ProductTypeService().update_product_type(1, ProductTypeUpdate(name="ipad"), actor_id="admin-1")

    def test_not_found(self, repo):
        repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            ProductTypeService().update_product_type(1, ProductTypeUpdate(icon="x"), actor_id="admin-1")


class TestDeleteProductType:

    def test_delete_unused_type(self, repo, iphone_type, mock_conn):
        repo.find_by_id.return_value = iphone_type
        repo.count_products.return_value = 0

        ProductTypeService().delete_product_type(1)

        repo.delete.assert_called_once_with(1)
        mock_conn.commit.assert_called_once()

    def test_referenced_type_cannot_be_deleted(self, repo, iphone_type, mock_conn):
        repo.find_by_id.return_value = iphone_type
        repo.count_products.return_value = 4

        with pytest.raises(ReferentialError) as exc_info:
            ProductTypeService().delete_product_type(1)

        assert "4 products" in exc_info.value.message
        repo.delete.assert_not_called()
        mock_conn.rollback.assert_called_once()

    def test_not_found(self, repo):
        repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            ProductTypeService().delete_product_type(1)


class TestSpecificationFields:

    def test_add_field(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type
        field = parse_specification_field({"name": "battery", "label": "Battery", "type": "text"})

        changes = ProductTypeService().add_specification_field(1, field, actor_id="admin-1")

        names = [f.name for f in changes["specification_fields"]]
        assert names[-1] == "battery"
        assert len(names) == 6

    def test_add_duplicate_field(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type
        field = parse_specification_field({"name": "chip", "label": "Chip", "type": "text"})

        with pytest.raises(ConflictError):
            ProductTypeService().add_specification_field(1, field, actor_id="admin-1")

        repo.update.assert_not_called()

    def test_update_field_merges_and_revalidates(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type

        changes = ProductTypeService().update_specification_field(
            1, "chip", SpecificationFieldUpdate(type="select", options=["A17 Pro", "A18"]), actor_id="admin-1"
        )

        chip = changes["specification_fields"][0]
        assert chip.type == "select"
        assert chip.options == ["A17 Pro", "A18"]
        assert chip.label == "Chip"
        assert chip.required is True

    def test_update_field_to_select_without_options(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type

        with pytest.raises(ValidationError):
            ProductTypeService().update_specification_field(
                1, "chip", SpecificationFieldUpdate(type="select"), actor_id="admin-1"
            )

    def test_rename_field_onto_existing_name(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type

        with pytest.raises(ConflictError):
            ProductTypeService().update_specification_field(
                1, "chip", SpecificationFieldUpdate(name="storage"), actor_id="admin-1"
            )

    def test_update_unknown_field(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type

        with pytest.raises(NotFoundError):
            ProductTypeService().update_specification_field(
                1, "gpu", SpecificationFieldUpdate(label="GPU"), actor_id="admin-1"
            )

    def test_remove_field(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type

        changes = ProductTypeService().remove_specification_field(1, "notes", actor_id="admin-1")

        assert "notes" not in [f.name for f in changes["specification_fields"]]

    def test_remove_unknown_field(self, repo, iphone_type):
        repo.find_by_id.return_value = iphone_type

        with pytest.raises(NotFoundError):
            ProductTypeService().remove_specification_field(1, "gpu", actor_id="admin-1")


class TestReads:

    def test_list_defaults_to_active(self, repo):
        repo.find_all.return_value = []

        ProductTypeService().list_product_types()

        repo.find_all.assert_called_once_with(status="ACTIVE")

    def test_list_include_inactive(self, repo):
        repo.find_all.return_value = []

        ProductTypeService().list_product_types(include_inactive=True)

        repo.find_all.assert_called_once_with(status=None)

    def test_get_by_slug_adds_count(self, repo, iphone_type):
        repo.find_by_slug.return_value = iphone_type
        repo.count_products.return_value = 7

        product_type = ProductTypeService().get_product_type_by_slug("iphone")

        assert product_type.product_count == 7

    def test_get_missing(self, repo):
        repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            ProductTypeService().get_product_type(5)


class TestActingUser:

    def test_create_requires_actor(self, repo):
        with pytest.raises(ValidationError):
            ProductTypeService().create_product_type(ProductTypeCreate(name="Mac"), actor_id=None)

        repo.insert.assert_not_called()

    def test_update_requires_actor(self, repo):
        with pytest.raises(ValidationError):
            ProductTypeService().update_product_type(1, ProductTypeUpdate(icon="mac"), actor_id="")

        repo.find_by_id.assert_not_called()

    def test_field_edits_require_actor(self, repo):
        with pytest.raises(ValidationError):
            ProductTypeService().remove_specification_field(1, "notes", actor_id="")

        repo.update.assert_not_called()
