"""Product Repository - Product catalog and category reads."""
from typing import List, Optional

from storefront.db import Tables
from storefront.services.models import Category, Product

from .base import BaseRepository


class ProductRepository(BaseRepository):
    """Product database operations (read-only)."""

    table_name = Tables.PRODUCTS

    async def get_available(self) -> List[Product]:
        """Get all products currently offered for sale."""
        async with self.reading():
            result = await self.table().select("*").eq("is_available", True).execute()
            return [Product(**p) for p in result.data]

    async def get_featured(self) -> List[Product]:
        """Get featured products that are available."""
        async with self.reading():
            result = await (
                self.table()
                .select("*")
                .eq("is_available", True)
                .eq("is_featured", True)
                .execute()
            )
            return [Product(**p) for p in result.data]

    async def get_by_category(self, category_id: str) -> List[Product]:
        """Get available products in a category."""
        async with self.reading():
            result = await (
                self.table()
                .select("*")
                .eq("category_id", category_id)
                .eq("is_available", True)
                .execute()
            )
            return [Product(**p) for p in result.data]

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        """Get product by ID."""
        async with self.reading():
            result = await self.table().select("*").eq("id", product_id).execute()
            return Product(**result.data[0]) if result.data else None


class CategoryRepository(BaseRepository):
    """Category database operations (read-only)."""

    table_name = Tables.CATEGORIES

    async def get_all(self) -> List[Category]:
        async with self.reading():
            result = await self.table().select("*").execute()
            return [Category(**c) for c in result.data]

    async def get_by_slug(self, slug: str) -> Optional[Category]:
        async with self.reading():
            result = await self.table().select("*").eq("slug", slug).execute()
            return Category(**result.data[0]) if result.data else None
