"""
ProductType Domain Model

A product type is a named category ("iPhone", "Mac", ...) that owns the
schema of the specifications its products carry. Each specification field
descriptor is one member of a closed tagged union keyed on `type`.
"""
from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator


class FieldType(str, Enum):
    """Kinds of specification field"""
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    MULTISELECT = "multiselect"
    TEXTAREA = "textarea"


class ProductTypeStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class _SpecificationFieldBase(BaseModel):
    """Attributes shared by every specification field descriptor"""
    name: str = Field(..., min_length=1, description="Machine key inside Product.specifications")
    label: str = Field(..., min_length=1, description="Display text")
    options: List[str] = Field(default_factory=list)
    required: bool = False
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    order: int = 0

    @field_validator("name", "label")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class TextField(_SpecificationFieldBase):
    type: Literal["text"] = "text"


class TextAreaField(_SpecificationFieldBase):
    type: Literal["textarea"] = "textarea"


class NumberField(_SpecificationFieldBase):
    type: Literal["number"] = "number"


class _ChoiceField(_SpecificationFieldBase):
    options: List[str] = Field(..., min_length=1)

    @field_validator("options")
    @classmethod
    def _clean_options(cls, options: List[str]) -> List[str]:
        cleaned = []
        for option in options:
            option = option.strip()
            if option and option not in cleaned:
                cleaned.append(option)
        if not cleaned:
            raise ValueError("at least one option is required")
        return cleaned


class SelectField(_ChoiceField):
    type: Literal["select"] = "select"


class MultiSelectField(_ChoiceField):
    type: Literal["multiselect"] = "multiselect"


SpecificationField = Annotated[
    Union[TextField, TextAreaField, NumberField, SelectField, MultiSelectField],
    Field(discriminator="type"),
]


def ensure_unique_field_names(fields: List[SpecificationField]) -> List[SpecificationField]:
    seen = set()
    duplicates = []
    for field in fields:
        if field.name in seen and field.name not in duplicates:
            duplicates.append(field.name)
        seen.add(field.name)
    if duplicates:
        raise ValueError(f"duplicate specification field names: {', '.join(duplicates)}")
    return fields


class ProductType(BaseModel):
    """
    ProductType domain model

    Fields:
        id: Internal product type ID
        name: Display name, unique case-insensitively
        slug: URL identifier, derived from name when not given
        specification_fields: Ordered field descriptors
        display_order: Sort key in listings
        product_count: Number of products using this type (listings only)
    """

    id: int = Field(..., description="Internal product type ID")
    name: str
    slug: str
    description: str = ""
    icon: str = ""
    specification_fields: List[SpecificationField] = Field(default_factory=list)
    status: ProductTypeStatus = ProductTypeStatus.ACTIVE
    display_order: int = 0

    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    product_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def required_fields(self) -> List[SpecificationField]:
        return [field for field in self.specification_fields if field.required]

    @property
    def fields_by_name(self) -> Dict[str, SpecificationField]:
        return {field.name: field for field in self.specification_fields}

    @property
    def is_active(self) -> bool:
        return self.status == ProductTypeStatus.ACTIVE

    def get_field(self, name: str) -> Optional[SpecificationField]:
        return self.fields_by_name.get(name)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        if self.product_count is None:
            data.pop("product_count")
        return data


class ProductTypeCreate(BaseModel):
    """Schema for creating a new product type"""
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: str = ""
    icon: str = ""
    specification_fields: List[SpecificationField] = Field(default_factory=list)
    display_order: int = 0

    @field_validator("specification_fields")
    @classmethod
    def _unique_names(cls, fields):
        return ensure_unique_field_names(fields)


class ProductTypeUpdate(BaseModel):
    """Schema for updating an existing product type; omitted fields are kept"""
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    specification_fields: Optional[List[SpecificationField]] = None
    display_order: Optional[int] = None
    status: Optional[ProductTypeStatus] = None

    @field_validator("specification_fields")
    @classmethod
    def _unique_names(cls, fields):
        if fields is None:
            return fields
        return ensure_unique_field_names(fields)


class SpecificationFieldUpdate(BaseModel):
    """
    Partial update of one specification field.

    The merged descriptor is re-validated as a whole, so switching `type`
    to select/multiselect requires options.
    """
    name: Optional[str] = None
    label: Optional[str] = None
    type: Optional[FieldType] = None
    options: Optional[List[str]] = None
    required: Optional[bool] = None
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    order: Optional[int] = None

    @model_validator(mode="after")
    def _not_empty(self):
        if not self.model_fields_set:
            raise ValueError("no field attributes to update")
        return self


specification_field_adapter = TypeAdapter(SpecificationField)


def parse_specification_field(data: dict) -> SpecificationField:
    """Build the right descriptor class for a raw dict (e.g. a JSONB row)"""
    return specification_field_adapter.validate_python(data)
