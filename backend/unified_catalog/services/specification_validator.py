"""
Specification Validator

Checks a product's specification map against the field descriptors of its
product type. Pure: no database access, every violation reported at once.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from unified_catalog.core.config import settings
from unified_catalog.core.exceptions import SpecificationValidationError
from unified_catalog.domain.product_type import FieldType, ProductType, SpecificationField

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of validating one specification map"""
    valid: bool
    errors: List[str] = field(default_factory=list)
    unknown_fields: List[str] = field(default_factory=list)


def is_empty(value: Any) -> bool:
    """Absent, None, blank string or empty list counts as not provided"""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    # ints of any size are finite; float() would overflow on huge ones
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        try:
            return math.isfinite(float(value.strip()))
        except (ValueError, OverflowError):
            return False
    return False


def _check_text(field: SpecificationField, value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple, set, dict)):
        return f"{field.label} must be a single value"
    return None


def _check_number(field: SpecificationField, value: Any) -> Optional[str]:
    if not is_number(value):
        return f"{field.label} must be a number"
    return None


def _check_select(field: SpecificationField, value: Any) -> Optional[str]:
    if not isinstance(value, str) or value not in field.options:
        return f"{field.label} must be one of: {', '.join(field.options)}"
    return None


def _check_multiselect(field: SpecificationField, value: Any) -> Optional[str]:
    if not isinstance(value, (list, tuple)):
        return f"{field.label} must be a list of: {', '.join(field.options)}"
    invalid = [str(item) for item in value if item not in field.options]
    if invalid:
        return f"{field.label} contains invalid values: {', '.join(invalid)}"
    return None


FIELD_CHECKS: Dict[FieldType, Callable[[SpecificationField, Any], Optional[str]]] = {
    FieldType.TEXT: _check_text,
    FieldType.TEXTAREA: _check_text,
    FieldType.NUMBER: _check_number,
    FieldType.SELECT: _check_select,
    FieldType.MULTISELECT: _check_multiselect,
}


def validate_specifications(
    product_type: ProductType,
    specifications: Optional[Dict[str, Any]],
    strict: Optional[bool] = None,
) -> ValidationResult:
    """
    Validate a specification map against a product type

    Args:
        product_type: Type whose specification_fields describe the map
        specifications: Candidate key -> value map (None is treated as {})
        strict: Reject keys the type does not describe
                (default: settings.STRICT_SPECIFICATIONS)

    Returns:
        ValidationResult with every violation found
    """
    strict = settings.STRICT_SPECIFICATIONS if strict is None else strict
    specifications = specifications or {}
    errors: List[str] = []

    for spec_field in product_type.specification_fields:
        value = specifications.get(spec_field.name)

        if is_empty(value):
            if spec_field.required:
                errors.append(f"{spec_field.label} is required")
            continue

        error = FIELD_CHECKS[FieldType(spec_field.type)](spec_field, value)
        if error:
            errors.append(error)

    known = product_type.fields_by_name
    unknown = [key for key in specifications if key not in known]
    if unknown:
        if strict:
            errors.extend(f"Unknown specification field: {key}" for key in unknown)
        else:
            logger.warning(
                f"Specifications for product type '{product_type.slug}' carry undescribed keys: {', '.join(unknown)}"
            )

    return ValidationResult(valid=not errors, errors=errors, unknown_fields=unknown)


def ensure_valid_specifications(
    product_type: ProductType,
    specifications: Optional[Dict[str, Any]],
    strict: Optional[bool] = None,
) -> None:
    """Raise SpecificationValidationError listing every violation"""
    result = validate_specifications(product_type, specifications, strict=strict)
    if not result.valid:
        raise SpecificationValidationError(
            f"Invalid specifications for {product_type.name}",
            errors=result.errors,
        )
