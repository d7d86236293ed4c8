"""
Product Domain Model

A product is the aggregate root of the catalog: it references one product
type, carries specifications shaped by that type, and exclusively owns its
variants.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from unified_catalog.domain.product_type import ProductType
from unified_catalog.domain.variant import Variant

NO_PRICE_LABEL = "Liên hệ"
CURRENCY_SYMBOL = "₫"


class ProductCondition(str, Enum):
    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    USED = "USED"
    REFURBISHED = "REFURBISHED"


class ProductStatus(str, Enum):
    """Business lifecycle, changed only by explicit administrative update"""
    AVAILABLE = "AVAILABLE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    DISCONTINUED = "DISCONTINUED"
    COMING_SOON = "COMING_SOON"


class InstallmentBadge(str, Enum):
    NONE = "NONE"
    ZERO_PERCENT = "0_PERCENT"
    SPECIAL_OFFER = "SPECIAL_OFFER"


def format_price(amount: Decimal) -> str:
    return f"{amount:,.0f}{CURRENCY_SYMBOL}"


class Product(BaseModel):
    """
    Product domain model - a row of products, optionally with its variants
    and product type loaded

    Fields:
        id: Internal product ID
        name / model: Display name and model line ("iPhone 15 Pro Max")
        slug / base_slug: URL identity, kept equal, derived from model
        product_type_id: Immutable reference to the ProductType
        specifications: Open map validated against the product type
        variants: Owned variants in position order (loaded on demand)
        product_type: Referenced type (loaded on demand)
    """

    id: int = Field(..., description="Internal product ID")
    name: str
    model: str
    slug: Optional[str] = None
    base_slug: str
    description: str = ""

    product_type_id: int
    specifications: Dict[str, Any] = Field(default_factory=dict)

    condition: ProductCondition = ProductCondition.NEW
    brand: str = "Apple"
    status: ProductStatus = ProductStatus.AVAILABLE
    installment_badge: InstallmentBadge = InstallmentBadge.NONE

    featured_images: List[str] = Field(default_factory=list)
    video_url: str = ""

    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    variants: List[Variant] = Field(default_factory=list)
    product_type: Optional[ProductType] = None

    model_config = ConfigDict(from_attributes=True)

    # Computed properties over the loaded variants
    @property
    def variant_ids(self) -> List[int]:
        return [variant.id for variant in self.variants]

    @property
    def min_price(self) -> Decimal:
        if not self.variants:
            return Decimal("0")
        return min(variant.price for variant in self.variants)

    @property
    def max_price(self) -> Decimal:
        if not self.variants:
            return Decimal("0")
        return max(variant.price for variant in self.variants)

    @property
    def price_range(self) -> str:
        """ "33,990,000₫" or "29,990,000₫ - 46,990,000₫" """
        prices = [variant.price for variant in self.variants if variant.price > 0]
        if not prices:
            return NO_PRICE_LABEL

        low, high = min(prices), max(prices)
        if low == high:
            return format_price(low)
        return f"{format_price(low)} - {format_price(high)}"

    @property
    def total_stock(self) -> int:
        return sum(variant.stock for variant in self.variants)

    @property
    def has_stock(self) -> bool:
        return any(variant.stock > 0 for variant in self.variants)

    @property
    def available_colors(self) -> List[str]:
        return list(dict.fromkeys(variant.color for variant in self.variants))

    @property
    def available_versions(self) -> List[str]:
        return list(dict.fromkeys(variant.version_name for variant in self.variants))

    def find_variant_by_sku(self, sku: str) -> Optional[Variant]:
        return next((variant for variant in self.variants if variant.sku == sku), None)

    def default_variant(self) -> Optional[Variant]:
        """First in-stock variant, else the first variant"""
        return next((variant for variant in self.variants if variant.stock > 0), None) or \
            (self.variants[0] if self.variants else None)

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus price and stock summaries
        """
        data = self.model_dump(mode="json", exclude={"variants", "product_type"})

        data["variants"] = [variant.to_dict() for variant in self.variants]
        data["product_type"] = self.product_type.to_dict() if self.product_type else None

        data["min_price"] = float(self.min_price)
        data["max_price"] = float(self.max_price)
        data["price_range"] = self.price_range
        data["total_stock"] = self.total_stock
        data["has_stock"] = self.has_stock
        data["available_colors"] = self.available_colors
        data["available_versions"] = self.available_versions

        return data


class VariantOption(BaseModel):
    """One version of a color group: "256GB" at a given price and stock"""
    version_name: str = Field("", validation_alias=AliasChoices("version_name", "versionName"))
    original_price: Optional[Decimal] = Field(None, validation_alias=AliasChoices("original_price", "originalPrice"))
    price: Optional[Decimal] = None
    stock: Optional[int] = None

    @field_validator("original_price", "price", "stock", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class VariantGroup(BaseModel):
    """All versions offered in one color, sharing the color's images"""
    color: str = ""
    images: List[str] = Field(default_factory=list)
    options: List[VariantOption] = Field(default_factory=list)


class ProductCreate(BaseModel):
    """Schema for creating a new product together with its variants"""
    name: str
    model: str
    product_type_id: int
    slug: Optional[str] = None
    description: str = ""
    specifications: Dict[str, Any] = Field(default_factory=dict)
    condition: ProductCondition = ProductCondition.NEW
    brand: Optional[str] = None
    status: ProductStatus = ProductStatus.AVAILABLE
    installment_badge: InstallmentBadge = InstallmentBadge.NONE
    featured_images: List[str] = Field(default_factory=list)
    video_url: str = ""
    variants: List[VariantGroup] = Field(
        default_factory=list,
        validation_alias=AliasChoices("variants", "create_variants"),
    )


class ProductUpdate(BaseModel):
    """
    Schema for updating an existing product

    Omitted fields are kept. A non-empty `variants` list replaces every
    existing variant of the product.
    """
    name: Optional[str] = None
    model: Optional[str] = None
    product_type_id: Optional[int] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None
    condition: Optional[ProductCondition] = None
    brand: Optional[str] = None
    status: Optional[ProductStatus] = None
    installment_badge: Optional[InstallmentBadge] = None
    featured_images: Optional[List[str]] = None
    video_url: Optional[str] = None
    variants: Optional[List[VariantGroup]] = Field(
        None,
        validation_alias=AliasChoices("variants", "create_variants"),
    )


class SlugResolution(BaseModel):
    """
    Result of resolving a public slug

    redirect=True means the slug named the product itself and the client
    should navigate to the canonical variant slug.
    """
    product: Product
    selected_variant_sku: str
    redirect: bool = False
    redirect_slug: Optional[str] = None
    redirect_sku: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "product": self.product.to_dict(),
            "selected_variant_sku": self.selected_variant_sku,
            "redirect": self.redirect,
        }
        if self.redirect:
            data["redirect_slug"] = self.redirect_slug
            data["redirect_sku"] = self.redirect_sku
        return data
