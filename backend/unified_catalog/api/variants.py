"""
Variants API Endpoints
Variant lookups plus the stock, sales and view counters
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from unified_catalog.core.auth import TokenUser, require_catalog_editor
from unified_catalog.core.exceptions import CatalogError, to_http_exception
from unified_catalog.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

router = APIRouter()


# Request models
class QuantityRequest(BaseModel):
    quantity: int = Field(1, ge=1)


def _quantity(request: Optional[QuantityRequest]) -> int:
    return request.quantity if request else 1


@router.get("/sku/{sku}")
async def get_variant_by_sku(sku: str):
    try:
        variant = InventoryService().get_by_sku(sku)
        return {"status": "success", "data": variant.to_dict()}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching variant {sku}: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching variant: {str(e)}")


@router.get("/low-stock")
async def get_low_stock_variants(
    threshold: Optional[int] = Query(None, ge=1, description="Default: LOW_STOCK_THRESHOLD")
):
    try:
        variants = InventoryService().find_low_stock(threshold)
        return {
            "status": "success",
            "count": len(variants),
            "data": [variant.to_dict() for variant in variants]
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching low stock variants: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching low stock variants: {str(e)}")


@router.get("/out-of-stock")
async def get_out_of_stock_variants():
    try:
        variants = InventoryService().find_out_of_stock()
        return {
            "status": "success",
            "count": len(variants),
            "data": [variant.to_dict() for variant in variants]
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching out of stock variants: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching out of stock variants: {str(e)}")


@router.get("/top-selling")
async def get_top_selling_variants(limit: int = Query(10, ge=1, le=100)):
    try:
        variants = InventoryService().find_top_selling(limit)
        return {
            "status": "success",
            "count": len(variants),
            "data": [variant.to_dict() for variant in variants]
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching top selling variants: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching top selling variants: {str(e)}")


@router.post("/{variant_id}/stock/decrement")
async def decrement_stock(
    variant_id: int,
    request: Optional[QuantityRequest] = None,
    user: TokenUser = Depends(require_catalog_editor)
):
    """Take units from stock; fails without changes when stock is insufficient"""
    try:
        stock = InventoryService().decrement_stock(variant_id, _quantity(request))
        return {"status": "success", "data": {"variant_id": variant_id, "stock": stock}}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error decrementing stock of variant {variant_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error decrementing stock: {str(e)}")


@router.post("/{variant_id}/stock/increment")
async def increment_stock(
    variant_id: int,
    request: Optional[QuantityRequest] = None,
    user: TokenUser = Depends(require_catalog_editor)
):
    try:
        stock = InventoryService().increment_stock(variant_id, _quantity(request))
        return {"status": "success", "data": {"variant_id": variant_id, "stock": stock}}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error incrementing stock of variant {variant_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error incrementing stock: {str(e)}")


@router.post("/{variant_id}/sales")
async def increment_sales(
    variant_id: int,
    request: Optional[QuantityRequest] = None,
    user: TokenUser = Depends(require_catalog_editor)
):
    try:
        sales_count = InventoryService().increment_sales(variant_id, _quantity(request))
        return {"status": "success", "data": {"variant_id": variant_id, "sales_count": sales_count}}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error recording sales of variant {variant_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error recording sales: {str(e)}")


@router.post("/{variant_id}/views")
async def increment_views(variant_id: int):
    """Record a product page view (public)"""
    try:
        view_count = InventoryService().increment_views(variant_id)
        return {"status": "success", "data": {"variant_id": variant_id, "view_count": view_count}}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error recording view of variant {variant_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error recording view: {str(e)}")
