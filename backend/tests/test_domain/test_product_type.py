"""
Unit tests for ProductType domain model and field descriptors
"""
import pytest
from pydantic import ValidationError as PydanticValidationError

from unified_catalog.domain.product_type import (
    FieldType,
    MultiSelectField,
    NumberField,
    ProductTypeCreate,
    SelectField,
    SpecificationFieldUpdate,
    TextField,
    parse_specification_field,
)


class TestSpecificationFieldUnion:
    """Test the tagged union of field descriptors"""

    @pytest.mark.parametrize("type_name, expected", [
        ("text", TextField),
        ("number", NumberField),
        ("select", SelectField),
        ("multiselect", MultiSelectField),
    ])
    def test_type_selects_descriptor_class(self, type_name, expected):
        data = {"name": "f", "label": "F", "type": type_name}
        if type_name in ("select", "multiselect"):
            data["options"] = ["a"]

        field = parse_specification_field(data)

        assert isinstance(field, expected)
        assert FieldType(field.type).value == type_name

    def test_unknown_type_rejected(self):
        with pytest.raises(PydanticValidationError):
            parse_specification_field({"name": "f", "label": "F", "type": "date"})

    @pytest.mark.parametrize("type_name", ["select", "multiselect"])
    def test_choice_fields_need_options(self, type_name):
        with pytest.raises(PydanticValidationError):
            parse_specification_field({"name": "f", "label": "F", "type": type_name, "options": []})

    def test_choice_options_are_cleaned(self):
        field = parse_specification_field({
            "name": "storage", "label": "Storage", "type": "select",
            "options": [" 128GB", "256GB", "256GB", ""],
        })
        assert field.options == ["128GB", "256GB"]

    def test_blank_name_rejected(self):
        with pytest.raises(PydanticValidationError):
            parse_specification_field({"name": "  ", "label": "F", "type": "text"})

    def test_defaults(self):
        field = parse_specification_field({"name": "chip", "label": "Chip", "type": "text"})
        assert field.required is False
        assert field.options == []


class TestProductType:
    """Test ProductType computed helpers"""

    def test_required_fields(self, iphone_type):
        assert [f.name for f in iphone_type.required_fields] == ["chip", "storage"]

    def test_get_field(self, iphone_type):
        assert iphone_type.get_field("storage").options == ["128GB", "256GB", "512GB", "1TB"]
        assert iphone_type.get_field("missing") is None

    def test_to_dict_omits_unknown_product_count(self, iphone_type):
        data = iphone_type.to_dict()
        assert "product_count" not in data
        assert data["specification_fields"][1]["type"] == "select"

    def test_to_dict_includes_product_count(self, iphone_type):
        iphone_type.product_count = 3
        assert iphone_type.to_dict()["product_count"] == 3

    def test_create_rejects_duplicate_field_names(self):
        with pytest.raises(PydanticValidationError):
            ProductTypeCreate(
                name="Mac",
                specification_fields=[
                    {"name": "chip", "label": "Chip", "type": "text"},
                    {"name": "chip", "label": "Chip again", "type": "text"},
                ],
            )

    def test_field_update_requires_something(self):
        with pytest.raises(PydanticValidationError):
            SpecificationFieldUpdate()
