"""
Products API Endpoints
Handles the product aggregate: products with their specifications and variants
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from unified_catalog.core.auth import TokenUser, require_catalog_editor
from unified_catalog.core.exceptions import CatalogError, to_http_exception
from unified_catalog.domain.product import ProductCreate, ProductStatus, ProductUpdate
from unified_catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_products(
    search: Optional[str] = Query(None, description="Search by name or model"),
    status_filter: Optional[ProductStatus] = Query(None, alias="status", description="Filter by product status"),
    product_type_id: Optional[int] = Query(None, description="Filter by product type ID"),
    product_type_slug: Optional[str] = Query(None, description="Filter by product type slug"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100)
):
    """
    Get products with optional filters, newest first

    Every product includes its variants, product type and price summary.
    """
    try:
        result = ProductService().list_products(
            search=search,
            status=status_filter.value if status_filter else None,
            product_type_id=product_type_id,
            product_type_slug=product_type_slug,
            page=page,
            limit=limit
        )

        return {"status": "success", "data": result.to_dict()}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching products: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/low-stock")
async def get_low_stock_products(
    threshold: Optional[int] = Query(None, ge=1, description="Default: LOW_STOCK_THRESHOLD")
):
    """Products with at least one variant running low"""
    try:
        products = ProductService().find_low_stock(threshold)
        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching low stock products: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching low stock products: {str(e)}")


@router.get("/out-of-stock")
async def get_out_of_stock_products():
    try:
        products = ProductService().find_out_of_stock()
        return {
            "status": "success",
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching out of stock products: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching out of stock products: {str(e)}")


@router.get("/{product_id}/variants")
async def get_product_variants(product_id: int):
    """Variants of a product sorted by color, then version name"""
    try:
        variants = ProductService().get_variants(product_id)
        return {
            "status": "success",
            "count": len(variants),
            "data": [variant.to_dict() for variant in variants]
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching variants of product {product_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching variants: {str(e)}")


@router.get("/{id_or_slug}")
async def get_product(
    id_or_slug: str,
    sku: Optional[str] = Query(None, description="Select this variant when resolving a variant slug")
):
    """
    Get a product by numeric ID or by public slug

    A slug naming a variant selects it. A slug naming the product itself
    returns redirect=True with the slug and SKU of its default variant.
    """
    try:
        service = ProductService()

        if id_or_slug.isdigit():
            product = service.get_product(int(id_or_slug))
            return {"status": "success", "data": product.to_dict()}

        resolution = service.resolve_slug(id_or_slug, sku=sku)
        return {"status": "success", "data": resolution.to_dict()}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error fetching product '{id_or_slug}': {e}")
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    user: TokenUser = Depends(require_catalog_editor)
):
    """Create a product and all of its variants in one transaction"""
    try:
        product = ProductService().create_product(payload, actor_id=user.id)
        return {
            "status": "success",
            "message": f"Product created with {len(product.variants)} variants",
            "data": product.to_dict()
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error creating product: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    user: TokenUser = Depends(require_catalog_editor)
):
    """Update a product; a non-empty variants list replaces all variants"""
    try:
        product = ProductService().update_product(product_id, payload, actor_id=user.id)
        return {
            "status": "success",
            "message": "Product updated",
            "data": product.to_dict()
        }

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating product {product_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    user: TokenUser = Depends(require_catalog_editor)
):
    """Delete a product together with its variants"""
    try:
        ProductService().delete_product(product_id)
        return {"status": "success", "message": f"Product {product_id} deleted"}

    except CatalogError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error deleting product {product_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")
