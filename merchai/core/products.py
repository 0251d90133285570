"""Product templates a logo can be placed on."""

from dataclasses import dataclass
from typing import Dict, List, Literal


@dataclass(frozen=True)
class ProductType:
    id: str
    name: str
    category: Literal["Apparel", "Accessories", "Home"]
    icon: str
    prompt_hint: str


PRODUCTS: List[ProductType] = [
    ProductType(
        id="tshirt",
        name="T-Shirt",
        category="Apparel",
        icon="👕",
        prompt_hint="a premium cotton oversized t-shirt",
    ),
    ProductType(
        id="hoodie",
        name="Hoodie",
        category="Apparel",
        icon="🧥",
        prompt_hint="a cozy heavy-duty hoodie with drawstring",
    ),
    ProductType(
        id="cap",
        name="Baseball Cap",
        category="Accessories",
        icon="🧢",
        prompt_hint="a classic 6-panel baseball cap",
    ),
    ProductType(
        id="tote",
        name="Tote Bag",
        category="Accessories",
        icon="👜",
        prompt_hint="a durable canvas tote bag",
    ),
    ProductType(
        id="mug",
        name="Ceramic Mug",
        category="Home",
        icon="☕",
        prompt_hint="a minimalist 11oz ceramic mug",
    ),
    ProductType(
        id="iphone",
        name="iPhone Case",
        category="Accessories",
        icon="📱",
        prompt_hint="a sleek matte finish smartphone case",
    ),
]

_PRODUCTS_BY_ID: Dict[str, ProductType] = {product.id: product for product in PRODUCTS}


def get_product(product_id: str) -> ProductType:
    """Look up a product template, raising KeyError for unknown ids."""
    try:
        return _PRODUCTS_BY_ID[product_id]
    except KeyError:
        raise KeyError(f"Unknown product: {product_id}") from None


__all__ = ["ProductType", "PRODUCTS", "get_product"]
