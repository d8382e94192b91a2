"""
Catalog helpers: SKU generation for product variants

SKUs follow the pattern <product-slug>-<color>-<size>, e.g.
"Linen Kurta" in "Navy Blue", size "XL" -> linen-kurta-navy-blue-xl
"""
import re
from typing import Optional

from shopdesk.core.errors import ValidationError

_NON_WORD = re.compile(r"[^\w-]+")


def slugify(name: Optional[str]) -> str:
    """Lowercase, spaces to dashes, anything that is not a word character or dash dropped"""
    if not name:
        return ""
    return _NON_WORD.sub("", name.strip().lower().replace(" ", "-"))


def generate_sku(product_name: str, color_name: str, size_name: str) -> str:
    """
    Build the default SKU for a variant

    Raises:
        ValidationError: product name has no usable characters or color is missing
    """
    slug = slugify(product_name)
    if not slug:
        raise ValidationError("Product name is required to generate a SKU")
    if not color_name or not color_name.strip():
        raise ValidationError("Color is required to generate a SKU")
    if not size_name or not size_name.strip():
        raise ValidationError("Size is required to generate a SKU")

    color = color_name.strip().lower().replace(" ", "-")
    size = size_name.strip().lower()
    return f"{slug}-{color}-{size}"
