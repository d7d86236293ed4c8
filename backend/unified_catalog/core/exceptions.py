"""
Catalog error taxonomy

Services raise these; routers turn them into HTTP responses through
`to_http_exception`.
"""
from typing import Any, List, Optional

from fastapi import HTTPException


class CatalogError(Exception):
    status_code = 500
    default_detail = "Catalog error"
    default_code = "catalog_error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.default_code, "message": self.message}


class ValidationError(CatalogError):
    """
    Input rejected before any write.

    `errors` carries every field-level problem when more than one was found.
    """
    status_code = 400
    default_detail = "Invalid input"
    default_code = "validation_error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None):
        self.errors = list(errors or [])
        if message is None and self.errors:
            message = "; ".join(self.errors)
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class SpecificationValidationError(ValidationError):
    default_detail = "Specifications do not match the product type"
    default_code = "invalid_specifications"


class InsufficientStockError(ValidationError):
    default_detail = "Not enough stock"
    default_code = "insufficient_stock"


class ConflictError(CatalogError):
    """A unique value (slug, sku, product type name, field name) is already taken"""
    status_code = 409
    default_detail = "Resource already exists"
    default_code = "conflict"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["field"] = self.field
        data["value"] = self.value
        return data


class ReferentialError(CatalogError):
    status_code = 409
    default_detail = "Resource is referenced by other records"
    default_code = "referential_integrity"


class NotFoundError(CatalogError):
    status_code = 404
    default_detail = "Resource not found"
    default_code = "not_found"


def to_http_exception(error: CatalogError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_dict())
