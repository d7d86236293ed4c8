"""
Product Service

Owns the product aggregate: a product, its validated specifications and the
variants expanded from the submitted color groups.

create / update / delete each run in a single transaction. A failure at any
step (unknown type, invalid specifications, slug collision, SKU clash)
rolls back everything written so far.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from unified_catalog.core.config import settings
from unified_catalog.core.database import read_connection, transaction
from unified_catalog.core.exceptions import ConflictError, NotFoundError, ReferentialError, ValidationError
from unified_catalog.domain.product import Product, ProductCreate, ProductUpdate, SlugResolution
from unified_catalog.domain.product_type import ProductType
from unified_catalog.domain.slug import slugify, variant_slug
from unified_catalog.domain.variant import Variant
from unified_catalog.repositories.product_repository import ProductRepository
from unified_catalog.repositories.product_type_repository import ProductTypeRepository
from unified_catalog.repositories.sku_allocator import SequenceSkuAllocator
from unified_catalog.repositories.variant_repository import VariantRepository
from unified_catalog.services.specification_validator import ensure_valid_specifications
from unified_catalog.services.variant_expansion import expand_variant_groups

logger = logging.getLogger(__name__)

# Scalar columns copied from ProductUpdate when provided
SCALAR_UPDATE_FIELDS = (
    "description", "condition", "brand", "status",
    "installment_badge", "featured_images", "video_url",
)


@dataclass
class ProductPage:
    """One page of a product listing"""
    products: List[Product]
    total: int
    current_page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict:
        return {
            "products": [product.to_dict() for product in self.products],
            "total": self.total,
            "total_pages": self.total_pages,
            "current_page": self.current_page,
        }


def _product_slug(explicit: Optional[str], model: str) -> str:
    source = explicit if explicit and explicit.strip() else model
    slug = slugify(source)
    if not slug:
        raise ValidationError(f"Cannot derive a slug from '{source}'")
    return slug


class ProductService:
    """Service for product aggregate business logic"""

    # Writes

    def create_product(self, payload: ProductCreate, actor_id: str) -> Product:
        """
        Create a product together with all of its variants

        Args:
            payload: Product fields plus nested color groups
            actor_id: Acting user, stored as created_by / updated_by

        Returns:
            The stored product with variants and product type loaded

        Raises:
            ValidationError: missing name/model/actor, invalid specifications, bad prices
            ReferentialError: product type does not exist
            ConflictError: slug or SKU already taken
        """
        errors = []
        name = (payload.name or "").strip()
        model = (payload.model or "").strip()
        if not name:
            errors.append("name is required")
        if not model:
            errors.append("model is required")
        if not actor_id:
            errors.append("acting user is required")
        if errors:
            raise ValidationError(errors=errors)

        slug = _product_slug(payload.slug, model)

        with transaction() as conn:
            product_types = ProductTypeRepository(conn)
            products = ProductRepository(conn)
            variants = VariantRepository(conn)

            product_type = product_types.find_by_id(payload.product_type_id)
            if not product_type:
                raise ReferentialError(f"Product type {payload.product_type_id} does not exist")

            ensure_valid_specifications(product_type, payload.specifications)

            if products.slug_taken(slug):
                raise ConflictError(f"Slug already exists: {slug}", field="slug", value=slug)

            product = products.insert({
                "name": name,
                "model": model,
                "slug": slug,
                "base_slug": slug,
                "description": payload.description.strip(),
                "product_type_id": product_type.id,
                "specifications": payload.specifications,
                "condition": payload.condition,
                "brand": (payload.brand or "").strip() or settings.DEFAULT_BRAND,
                "status": payload.status,
                "installment_badge": payload.installment_badge,
                "featured_images": payload.featured_images,
                "video_url": payload.video_url.strip(),
                "created_by": actor_id,
                "updated_by": actor_id,
            })

            records = expand_variant_groups(payload.variants, slug, SequenceSkuAllocator(conn))
            product.variants = variants.insert_many(product.id, records)
            product.product_type = product_type

        logger.info(f"Created product {product.id} '{product.name}' ({slug}) with {len(product.variants)} variants")
        return product

    def update_product(self, product_id: int, payload: ProductUpdate, actor_id: str) -> Product:
        """
        Update a product; omitted fields are kept

        A new model or explicit slug moves slug and base_slug together.
        A non-empty variants list replaces every existing variant; otherwise
        existing variants keep their SKUs and only follow a slug change.
        """
        if not actor_id:
            raise ValidationError("acting user is required")

        with transaction() as conn:
            product_types = ProductTypeRepository(conn)
            products = ProductRepository(conn)
            variants = VariantRepository(conn)

            current = products.find_by_id(product_id, for_update=True)
            if not current:
                raise NotFoundError(f"Product {product_id} not found")

            if payload.product_type_id is not None and payload.product_type_id != current.product_type_id:
                raise ValidationError("product_type_id cannot be changed")

            changes: Dict[str, object] = {}

            if payload.name is not None:
                name = payload.name.strip()
                if not name:
                    raise ValidationError("name cannot be blank")
                changes["name"] = name

            for column in SCALAR_UPDATE_FIELDS:
                value = getattr(payload, column)
                if value is not None:
                    if isinstance(value, str) and not isinstance(value, Enum):
                        value = value.strip()
                    changes[column] = value

            model = current.model
            if payload.model is not None:
                model = payload.model.strip()
                if not model:
                    raise ValidationError("model cannot be blank")
                changes["model"] = model

            base_slug = current.base_slug
            model_changed = model != current.model
            if model_changed or (payload.slug and payload.slug.strip()):
                new_slug = _product_slug(None if model_changed else payload.slug, model)
                if new_slug != current.base_slug or new_slug != current.slug:
                    if products.slug_taken(new_slug, exclude_id=product_id):
                        raise ConflictError(f"Slug already exists: {new_slug}", field="slug", value=new_slug)
                    changes["slug"] = new_slug
                    changes["base_slug"] = new_slug
                base_slug = new_slug

            product_type = product_types.find_by_id(current.product_type_id)
            if payload.specifications is not None:
                ensure_valid_specifications(product_type, payload.specifications)
                changes["specifications"] = payload.specifications

            changes["updated_by"] = actor_id
            product = products.update(product_id, changes)

            if payload.variants:
                removed = variants.delete_by_product(product_id)
                records = expand_variant_groups(payload.variants, base_slug, SequenceSkuAllocator(conn))
                product.variants = variants.insert_many(product_id, records)
                logger.info(f"Replaced {removed} variants of product {product_id} with {len(records)}")
            else:
                product.variants = variants.find_by_product(product_id)
                if base_slug != current.base_slug:
                    self._follow_slug(variants, product.variants, base_slug)

            product.product_type = product_type

        logger.info(f"Updated product {product_id}: {', '.join(sorted(changes))}")
        return product

    @staticmethod
    def _follow_slug(repo: VariantRepository, product_variants: List[Variant], base_slug: str) -> None:
        for variant in product_variants:
            slug = variant_slug(base_slug, variant.version_name)
            repo.update_slug(variant.id, slug)
            variant.slug = slug

    def delete_product(self, product_id: int) -> None:
        """Delete a product and every variant it owns"""
        with transaction() as conn:
            products = ProductRepository(conn)
            if not products.find_by_id(product_id, for_update=True):
                raise NotFoundError(f"Product {product_id} not found")

            removed = VariantRepository(conn).delete_by_product(product_id)
            products.delete(product_id)

        logger.info(f"Deleted product {product_id} and {removed} variants")

    # Reads

    def _attach(
        self,
        conn,
        product_list: List[Product],
        type_cache: Optional[Dict[int, ProductType]] = None
    ) -> List[Product]:
        """Load variants and product type onto each product"""
        type_cache = {} if type_cache is None else type_cache
        product_types = ProductTypeRepository(conn)
        grouped = VariantRepository(conn).find_by_products([product.id for product in product_list])

        for product in product_list:
            product.variants = grouped.get(product.id, [])
            if product.product_type_id not in type_cache:
                type_cache[product.product_type_id] = product_types.find_by_id(product.product_type_id)
            product.product_type = type_cache[product.product_type_id]

        return product_list

    def get_product(self, product_id: int) -> Product:
        with read_connection() as conn:
            product = ProductRepository(conn).find_by_id(product_id)
            if not product:
                raise NotFoundError(f"Product {product_id} not found")
            return self._attach(conn, [product])[0]

    def list_products(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        product_type_id: Optional[int] = None,
        product_type_slug: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None
    ) -> ProductPage:
        """
        List products newest first

        product_type_id wins over product_type_slug; a slug naming no
        product type leaves the listing unfiltered.
        """
        limit = limit or settings.DEFAULT_PAGE_SIZE
        page = max(page, 1)

        with read_connection() as conn:
            if product_type_id is None and product_type_slug:
                product_type = ProductTypeRepository(conn).find_by_slug(product_type_slug)
                if product_type:
                    product_type_id = product_type.id
                else:
                    logger.debug(f"Unknown product type slug '{product_type_slug}', listing unfiltered")

            product_list, total = ProductRepository(conn).find_all(
                search=search.strip() if search else None,
                status=status,
                product_type_id=product_type_id,
                limit=limit,
                offset=(page - 1) * limit,
            )
            self._attach(conn, product_list)

        return ProductPage(products=product_list, total=total, current_page=page, limit=limit)

    def resolve_slug(self, slug: str, sku: Optional[str] = None) -> SlugResolution:
        """
        Resolve a public slug to a product and a selected variant

        A variant slug selects that variant (or the variant with `sku`, when
        it belongs to the same product). A product slug asks the caller to
        redirect to its first in-stock variant, else its first variant.
        """
        sku = sku.strip() if sku else None

        with read_connection() as conn:
            variant = VariantRepository(conn).find_by_slug(slug)

            if variant:
                product = ProductRepository(conn).find_by_id(variant.product_id)
                if not product:
                    raise NotFoundError(f"Product for '{slug}' not found")
                self._attach(conn, [product])

                selected = variant
                if sku:
                    selected = product.find_variant_by_sku(sku) or variant
                return SlugResolution(product=product, selected_variant_sku=selected.sku)

            product = ProductRepository(conn).find_by_slug(slug)
            if not product:
                raise NotFoundError(f"Product '{slug}' not found")
            self._attach(conn, [product])

        selected = product.default_variant()
        if not selected:
            raise NotFoundError(f"Product '{slug}' has no variants")

        return SlugResolution(
            product=product,
            selected_variant_sku=selected.sku,
            redirect=True,
            redirect_slug=selected.slug,
            redirect_sku=selected.sku,
        )

    def get_variants(self, product_id: int) -> List[Variant]:
        """Variants of a product sorted by color, then version name"""
        with read_connection() as conn:
            if not ProductRepository(conn).find_by_id(product_id):
                raise NotFoundError(f"Product {product_id} not found")
            return VariantRepository(conn).find_by_product(product_id, order_by_name=True)

    def find_low_stock(self, threshold: Optional[int] = None) -> List[Product]:
        threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
        with read_connection() as conn:
            return self._attach(conn, ProductRepository(conn).find_low_stock(threshold))

    def find_out_of_stock(self) -> List[Product]:
        with read_connection() as conn:
            return self._attach(conn, ProductRepository(conn).find_out_of_stock())
