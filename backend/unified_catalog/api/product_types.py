"""
Product Types API Endpoints
Manages product types and the specification fields they define
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import ValidationError as PydanticValidationError

from unified_catalog.core.auth import TokenUser, require_admin
from unified_catalog.core.exceptions import CatalogError, ValidationError, to_http_exception
from unified_catalog.domain.product_type import (
    ProductTypeCreate,
    ProductTypeStatus,
    ProductTypeUpdate,
    SpecificationFieldUpdate,
    parse_specification_field,
)
from unified_catalog.services.product_type_service import ProductTypeService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def list_product_types(
    status_filter: Optional[ProductTypeStatus] = Query(None, alias="status", description="ACTIVE or INACTIVE"),
    include_inactive: bool = Query(False, description="Include INACTIVE types when no status is given")
):
    """
    List product types ordered by display order, then name

    Each entry carries product_count. Only ACTIVE types are returned by default.
    """
    try:
        service = ProductTypeService()
        product_types = service.list_product_types(
            status=status_filter.value if status_filter else None,
            include_inactive=include_inactive
        )

        return {
            "status": "success",
            "count": len(product_types),
            "data": [product_type.to_dict() for product_type in product_types]
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching product types: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching product types: {str(e)}")


@router.get("/slug/{slug}")
async def get_product_type_by_slug(slug: str):
    try:
        product_type = ProductTypeService().get_product_type_by_slug(slug)
        return {"status": "success", "data": product_type.to_dict()}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching product type '{slug}': {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching product type: {str(e)}")


@router.get("/{product_type_id}")
async def get_product_type(product_type_id: int):
    try:
        product_type = ProductTypeService().get_product_type(product_type_id)
        return {"status": "success", "data": product_type.to_dict()}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching product type {product_type_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching product type: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_product_type(
    payload: ProductTypeCreate,
    user: TokenUser = Depends(require_admin)
):
    """Create a product type (admin only)"""
    try:
        product_type = ProductTypeService().create_product_type(payload, actor_id=user.id)
        return {
            "status": "success",
            "message": "Product type created",
            "data": product_type.to_dict()
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating product type: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating product type: {str(e)}")


@router.put("/{product_type_id}")
async def update_product_type(
    product_type_id: int,
    payload: ProductTypeUpdate,
    user: TokenUser = Depends(require_admin)
):
    """Update a product type (admin only)"""
    try:
        product_type = ProductTypeService().update_product_type(product_type_id, payload, actor_id=user.id)
        return {
            "status": "success",
            "message": "Product type updated",
            "data": product_type.to_dict()
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating product type {product_type_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error updating product type: {str(e)}")


@router.delete("/{product_type_id}")
async def delete_product_type(
    product_type_id: int,
    user: TokenUser = Depends(require_admin)
):
    """Delete a product type no product uses (admin only)"""
    try:
        ProductTypeService().delete_product_type(product_type_id)
        return {"status": "success", "message": f"Product type {product_type_id} deleted"}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error deleting product type {product_type_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error deleting product type: {str(e)}")


# Specification fields

@router.post("/{product_type_id}/fields", status_code=status.HTTP_201_CREATED)
async def add_specification_field(
    product_type_id: int,
    field: Dict[str, Any] = Body(..., description="Field descriptor; `type` selects text/number/select/multiselect/textarea"),
    user: TokenUser = Depends(require_admin)
):
    try:
        try:
            descriptor = parse_specification_field(field)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid specification field",
                errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            ) from e

        product_type = ProductTypeService().add_specification_field(product_type_id, descriptor, actor_id=user.id)
        return {"status": "success", "data": product_type.to_dict()}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error adding field to product type {product_type_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error adding specification field: {str(e)}")


@router.put("/{product_type_id}/fields/{field_name}")
async def update_specification_field(
    product_type_id: int,
    field_name: str,
    updates: SpecificationFieldUpdate,
    user: TokenUser = Depends(require_admin)
):
    try:
        product_type = ProductTypeService().update_specification_field(
            product_type_id, field_name, updates, actor_id=user.id
        )
        return {"status": "success", "data": product_type.to_dict()}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating field '{field_name}' of product type {product_type_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error updating specification field: {str(e)}")


@router.delete("/{product_type_id}/fields/{field_name}")
async def remove_specification_field(
    product_type_id: int,
    field_name: str,
    user: TokenUser = Depends(require_admin)
):
    try:
        product_type = ProductTypeService().remove_specification_field(product_type_id, field_name, actor_id=user.id)
        return {"status": "success", "data": product_type.to_dict()}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error removing field '{field_name}' of product type {product_type_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error removing specification field: {str(e)}")
