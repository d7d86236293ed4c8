"""
Variant Domain Model

A variant is one purchasable SKU of a product, identified by color and
version name ("Black" + "256GB").
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from unified_catalog.core.config import settings
from unified_catalog.core.exceptions import ValidationError


def check_price_not_above_original(price: Decimal, original_price: Decimal, label: str = "price") -> None:
    """Selling price may never exceed the original (list) price"""
    if price > original_price:
        raise ValidationError(
            f"{label} ({price}) cannot be greater than original price ({original_price})"
        )


class Variant(BaseModel):
    """
    Variant domain model - a row of product_variants

    Fields:
        id: Internal variant ID
        product_id: Owning product
        position: Order inside the product (group order, then option order)
        color / version_name: What the customer picks
        original_price / price: List price and selling price (price <= original_price)
        stock: Units on hand, never negative
        sku: Globally unique stock keeping unit
        slug: {product.base_slug}-{slugify(version_name)}
        sales_count / view_count: Analytics counters
        legacy_fields: Field values carried over from the per-category schemas
    """

    id: int
    product_id: int
    position: int = 0
    color: str
    version_name: str

    original_price: Decimal = Field(..., ge=0)
    price: Decimal = Field(..., ge=0)
    stock: int = Field(0, ge=0)

    images: List[str] = Field(default_factory=list)
    sku: str
    slug: Optional[str] = None

    sales_count: int = Field(0, ge=0)
    view_count: int = Field(0, ge=0)

    legacy_fields: Dict[str, str] = Field(default_factory=dict)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def full_name(self) -> str:
        """e.g. "Black 256GB" """
        return f"{self.color} {self.version_name}"

    @property
    def discount_percent(self) -> int:
        if not self.original_price or self.original_price <= self.price:
            return 0
        ratio = (self.original_price - self.price) / self.original_price * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.stock <= settings.LOW_STOCK_THRESHOLD

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["original_price"] = float(self.original_price)
        data["price"] = float(self.price)
        data["full_name"] = self.full_name
        data["discount_percent"] = self.discount_percent
        data["in_stock"] = self.in_stock
        data["is_low_stock"] = self.is_low_stock
        return data


@dataclass
class VariantRecord:
    """A variant ready to be inserted, produced by variant expansion"""
    color: str
    version_name: str
    original_price: Decimal
    price: Decimal
    stock: int
    sku: str
    slug: str
    position: int = 0
    images: List[str] = field(default_factory=list)
    legacy_fields: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.color or not self.color.strip():
            raise ValidationError("Variant color is required")
        if not self.version_name or not self.version_name.strip():
            raise ValidationError("Variant version name is required")
        if self.original_price < 0 or self.price < 0:
            raise ValidationError(f"Prices of {self.full_name} cannot be negative")
        if self.stock < 0:
            raise ValidationError(f"Stock of {self.full_name} cannot be negative")
        check_price_not_above_original(self.price, self.original_price, label=f"Price of {self.full_name}")

    @property
    def full_name(self) -> str:
        return f"{self.color} {self.version_name}"
