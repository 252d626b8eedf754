"""
Catalog Domain Service

Product browsing: the available catalog, categories, featured products and
the category/search filters applied on top of them.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.services.models import Category, Product
from storefront.services.repositories import CategoryRepository, ProductRepository

logger = get_logger(__name__)


@dataclass
class CatalogSnapshot:
    """Products and categories loaded together for one page view."""

    products: List[Product] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)

    @property
    def featured(self) -> List[Product]:
        return featured(self.products)

    def category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)


def filter_products(
    products: Iterable[Product],
    category_id: Optional[str] = None,
    query: Optional[str] = None,
) -> List[Product]:
    """
    Narrow a product list by category and free-text query.

    Args:
        products: Products to filter
        category_id: Keep only this category (None keeps all)
        query: Case-insensitive substring of name or description

    Returns:
        Matching products in their original order
    """
    filtered = list(products)

    if category_id:
        filtered = [p for p in filtered if p.category_id == category_id]

    if query:
        needle = query.lower()
        filtered = [
            p for p in filtered
            if needle in p.name.lower() or needle in (p.description or "").lower()
        ]

    return filtered


def featured(products: Iterable[Product]) -> List[Product]:
    return [p for p in products if p.is_featured]


class CatalogService:
    """
    Catalog domain service.

    Provides clean interface for:
    - Loading the available catalog with its categories
    - Filtering by category and search text
    - Single product lookup
    """

    def __init__(self, products: ProductRepository, categories: CategoryRepository):
        self.products = products
        self.categories = categories

    async def load(self) -> CatalogSnapshot:
        """Fetch available products and all categories concurrently."""
        products, categories = await asyncio.gather(
            self.products.get_available(),
            self.categories.get_all(),
        )
        logger.debug(f"Catalog loaded: {len(products)} products, {len(categories)} categories")
        return CatalogSnapshot(products=products, categories=categories)

    async def search(
        self,
        query: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> List[Product]:
        """Search the available catalog."""
        logger.debug(f"Catalog search: {sanitize_string_for_logging(query)}")
        products = await self.products.get_available()
        return filter_products(products, category_id=category_id, query=query)

    async def get_product(self, product_id: str) -> Optional[Product]:
        return await self.products.get_by_id(product_id)
