"""
URL slugs for product types, products and variants

slugify("iPhone 15 Pro Max") -> "iphone-15-pro-max"
slugify("Điện thoại") -> "dien-thoai"
"""
import re
import unicodedata

from unified_catalog.core.exceptions import ValidationError

_WHITESPACE = re.compile(r"\s+")
_INVALID = re.compile(r"[^a-z0-9-]")
_HYPHENS = re.compile(r"-{2,}")

# Letters that NFD does not decompose into base + combining mark
_TRANSLITERATIONS = str.maketrans({"đ": "d", "ð": "d", "ø": "o", "ł": "l", "ß": "ss", "æ": "ae", "œ": "oe"})


def slugify(text) -> str:
    """
    Turn free text into a URL-safe identifier.

    Total and idempotent: the result matches ^[a-z0-9]+(-[a-z0-9]+)*$ or is "".
    """
    if text is None:
        return ""

    value = unicodedata.normalize("NFD", str(text).lower())
    value = "".join(ch for ch in value if not unicodedata.combining(ch))
    value = value.translate(_TRANSLITERATIONS)
    value = _WHITESPACE.sub("-", value)
    value = _INVALID.sub("", value)
    value = _HYPHENS.sub("-", value)
    return value.strip("-")


def variant_slug(base_slug: str, version_name: str) -> str:
    """
    Composite slug of a variant: {base_slug}-{slugify(version_name)}

    A version name without letters or digits is rejected, so a variant slug
    never equals the product slug.
    """
    version = slugify(version_name)
    if not version:
        raise ValidationError(f"Version name '{version_name}' cannot be turned into a slug")
    return f"{base_slug}-{version}"
