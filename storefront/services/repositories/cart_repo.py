"""Cart Repository - cart_items rows keyed by owning user.

All methods use async/await with supabase-py v2.
"""
from datetime import UTC, datetime
from typing import List

from storefront.db import Tables
from storefront.services.models import CartItemRow

from .base import BaseRepository

# Embed the referenced product row so totals need no second query
CART_SELECT = "*, products(*)"


class CartRepository(BaseRepository):
    """cart_items database operations."""

    table_name = Tables.CART_ITEMS

    async def get_for_user(self, user_id: str) -> List[CartItemRow]:
        """Get all of a user's lines with their product snapshots, oldest first."""
        async with self.reading():
            result = await (
                self.table()
                .select(CART_SELECT)
                .eq("user_id", user_id)
                .order("created_at")
                .execute()
            )
            return [CartItemRow(**row) for row in result.data]

    async def insert(self, user_id: str, product_id: str, quantity: int) -> None:
        """Insert a new line. A duplicate (user_id, product_id) fails with code 23505."""
        async with self.writing():
            await (
                self.table()
                .insert({"user_id": user_id, "product_id": product_id, "quantity": quantity})
                .execute()
            )

    async def update_quantity(self, line_id: str, quantity: int) -> None:
        async with self.writing():
            await (
                self.table()
                .update({"quantity": quantity, "updated_at": datetime.now(UTC).isoformat()})
                .eq("id", line_id)
                .execute()
            )

    async def delete(self, line_id: str) -> None:
        """Delete one line. Deleting a missing line matches zero rows and succeeds."""
        async with self.writing():
            await self.table().delete().eq("id", line_id).execute()

    async def delete_for_user(self, user_id: str) -> None:
        async with self.writing():
            await self.table().delete().eq("user_id", user_id).execute()
