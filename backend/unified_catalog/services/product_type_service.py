"""
Product Type Service

Registry of product types and their specification field descriptors.
Every write runs in one transaction; name uniqueness is case-insensitive
and a type cannot be deleted while products still reference it.
"""
import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from unified_catalog.core.database import read_connection, transaction
from unified_catalog.core.exceptions import ConflictError, NotFoundError, ReferentialError, ValidationError
from unified_catalog.domain.product_type import (
    ProductType,
    ProductTypeCreate,
    ProductTypeStatus,
    ProductTypeUpdate,
    SpecificationField,
    SpecificationFieldUpdate,
    parse_specification_field,
)
from unified_catalog.domain.slug import slugify
from unified_catalog.repositories.product_type_repository import ProductTypeRepository

logger = logging.getLogger(__name__)


def _pydantic_errors(error: PydanticValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in item['loc']) or 'field'}: {item['msg']}"
        for item in error.errors()
    ]


def _require_actor(actor_id: Optional[str]) -> None:
    if not actor_id:
        raise ValidationError("acting user is required")


class ProductTypeService:
    """Service for product type business logic"""

    # Reads

    def list_product_types(
        self,
        status: Optional[str] = None,
        include_inactive: bool = False
    ) -> List[ProductType]:
        """
        List product types with their product counts

        Without a status only ACTIVE types are returned, unless
        include_inactive is set.
        """
        if not status and not include_inactive:
            status = ProductTypeStatus.ACTIVE.value

        with read_connection() as conn:
            return ProductTypeRepository(conn).find_all(status=status)

    def get_product_type(self, product_type_id: int) -> ProductType:
        with read_connection() as conn:
            repo = ProductTypeRepository(conn)
            product_type = repo.find_by_id(product_type_id)
            if not product_type:
                raise NotFoundError(f"Product type {product_type_id} not found")
            product_type.product_count = repo.count_products(product_type.id)
            return product_type

    def get_product_type_by_slug(self, slug: str) -> ProductType:
        with read_connection() as conn:
            repo = ProductTypeRepository(conn)
            product_type = repo.find_by_slug(slug)
            if not product_type:
                raise NotFoundError(f"Product type '{slug}' not found")
            product_type.product_count = repo.count_products(product_type.id)
            return product_type

    # Writes

    def create_product_type(self, payload: ProductTypeCreate, actor_id: str) -> ProductType:
        """
        Create a product type

        Raises:
            ValidationError: blank name or name without slug characters
            ConflictError: name (case-insensitive) or slug already taken
        """
        _require_actor(actor_id)

        name = payload.name.strip()
        if not name:
            raise ValidationError("Product type name is required")

        # a blank slug falls back to the name
        source = payload.slug if payload.slug and payload.slug.strip() else name
        slug = slugify(source)
        if not slug:
            raise ValidationError(f"Cannot derive a slug from '{source}'")

        with transaction() as conn:
            repo = ProductTypeRepository(conn)

            if repo.find_by_name(name):
                raise ConflictError(f"Product type '{name}' already exists", field="name", value=name)
            if repo.slug_exists(slug):
                raise ConflictError(f"Product type slug '{slug}' already exists", field="slug", value=slug)

            product_type = repo.insert({
                "name": name,
                "slug": slug,
                "description": payload.description.strip(),
                "icon": payload.icon.strip(),
                "specification_fields": payload.specification_fields,
                "status": ProductTypeStatus.ACTIVE,
                "display_order": payload.display_order,
                "created_by": actor_id,
                "updated_by": actor_id,
            })

        logger.info(f"Created product type {product_type.id} '{product_type.name}' ({len(product_type.specification_fields)} fields)")
        return product_type

    def update_product_type(
        self,
        product_type_id: int,
        payload: ProductTypeUpdate,
        actor_id: str
    ) -> ProductType:
        """
        Update a product type; omitted attributes are kept

        Renaming keeps the existing slug unless a new slug is supplied.
        """
        _require_actor(actor_id)
        changes = {}

        with transaction() as conn:
            repo = ProductTypeRepository(conn)
            current = repo.find_by_id(product_type_id, for_update=True)
            if not current:
                raise NotFoundError(f"Product type {product_type_id} not found")

            if payload.name is not None:
                name = payload.name.strip()
                if not name:
                    raise ValidationError("Product type name is required")
                if name != current.name:
                    if repo.find_by_name(name, exclude_id=product_type_id):
                        raise ConflictError(f"Product type '{name}' already exists", field="name", value=name)
                    changes["name"] = name

            if payload.slug is not None:
                slug = slugify(payload.slug)
                if not slug:
                    raise ValidationError(f"Cannot derive a slug from '{payload.slug}'")
                if slug != current.slug:
                    if repo.slug_exists(slug, exclude_id=product_type_id):
                        raise ConflictError(f"Product type slug '{slug}' already exists", field="slug", value=slug)
                    changes["slug"] = slug

            if payload.description is not None:
                changes["description"] = payload.description.strip()
            if payload.icon is not None:
                changes["icon"] = payload.icon.strip()
            if payload.specification_fields is not None:
                changes["specification_fields"] = payload.specification_fields
            if payload.display_order is not None:
                changes["display_order"] = payload.display_order
            if payload.status is not None:
                changes["status"] = payload.status

            changes["updated_by"] = actor_id
            product_type = repo.update(product_type_id, changes)

        logger.info(f"Updated product type {product_type_id}: {', '.join(sorted(changes))}")
        return product_type

    def delete_product_type(self, product_type_id: int) -> None:
        """
        Delete a product type that no product references

        Raises:
            NotFoundError: unknown id
            ReferentialError: products still use the type
        """
        with transaction() as conn:
            repo = ProductTypeRepository(conn)
            if not repo.find_by_id(product_type_id, for_update=True):
                raise NotFoundError(f"Product type {product_type_id} not found")

            product_count = repo.count_products(product_type_id)
            if product_count > 0:
                raise ReferentialError(
                    f"Cannot delete product type {product_type_id}: {product_count} products use it"
                )

            repo.delete(product_type_id)

        logger.info(f"Deleted product type {product_type_id}")

    # Specification fields

    def _replace_fields(
        self,
        product_type_id: int,
        actor_id: str,
        edit
    ) -> ProductType:
        """Load the type under lock, let `edit` rewrite its field list, save it"""
        _require_actor(actor_id)

        with transaction() as conn:
            repo = ProductTypeRepository(conn)
            product_type = repo.find_by_id(product_type_id, for_update=True)
            if not product_type:
                raise NotFoundError(f"Product type {product_type_id} not found")

            fields = edit(list(product_type.specification_fields))
            return repo.update(product_type_id, {
                "specification_fields": fields,
                "updated_by": actor_id,
            })

    def add_specification_field(
        self,
        product_type_id: int,
        field: SpecificationField,
        actor_id: str
    ) -> ProductType:
        """Append a field descriptor; its name must be new within the type"""
        def edit(fields):
            if any(existing.name == field.name for existing in fields):
                raise ConflictError(
                    f"Specification field '{field.name}' already exists",
                    field="specification_fields.name",
                    value=field.name,
                )
            return fields + [field]

        product_type = self._replace_fields(product_type_id, actor_id, edit)
        logger.info(f"Added specification field '{field.name}' to product type {product_type_id}")
        return product_type

    def update_specification_field(
        self,
        product_type_id: int,
        field_name: str,
        updates: SpecificationFieldUpdate,
        actor_id: str
    ) -> ProductType:
        """
        Merge updates into one field descriptor

        The merged descriptor is validated again as a whole.
        """
        def edit(fields):
            index = next((i for i, existing in enumerate(fields) if existing.name == field_name), None)
            if index is None:
                raise NotFoundError(f"Specification field '{field_name}' not found")

            merged = fields[index].model_dump()
            merged.update(updates.model_dump(exclude_unset=True, mode="json"))

            try:
                updated = parse_specification_field(merged)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid specification field '{field_name}'",
                    errors=_pydantic_errors(e),
                ) from e

            if updated.name != field_name and any(existing.name == updated.name for existing in fields):
                raise ConflictError(
                    f"Specification field '{updated.name}' already exists",
                    field="specification_fields.name",
                    value=updated.name,
                )

            fields[index] = updated
            return fields

        product_type = self._replace_fields(product_type_id, actor_id, edit)
        logger.info(f"Updated specification field '{field_name}' of product type {product_type_id}")
        return product_type

    def remove_specification_field(
        self,
        product_type_id: int,
        field_name: str,
        actor_id: str
    ) -> ProductType:
        """
        Drop a field descriptor

        Values already stored under that key in product specifications are
        left in place and become undescribed keys.
        """
        def edit(fields):
            remaining = [existing for existing in fields if existing.name != field_name]
            if len(remaining) == len(fields):
                raise NotFoundError(f"Specification field '{field_name}' not found")
            return remaining

        product_type = self._replace_fields(product_type_id, actor_id, edit)
        logger.info(f"Removed specification field '{field_name}' from product type {product_type_id}")
        return product_type
