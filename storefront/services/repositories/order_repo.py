"""Order Repository - Orders and their line items."""
from typing import Any, Dict, List, Optional

from storefront.db import Tables
from storefront.constants import OrderStatus, PaymentMethod
from storefront.services.models import Order
from storefront.services.money import to_float

from .base import BaseRepository

HISTORY_SELECT = "*, order_items(*, products(*))"


class OrderRepository(BaseRepository):
    """Order database operations."""

    table_name = Tables.ORDERS

    async def create(
        self,
        user_id: str,
        order_number: str,
        total_amount,
        shipping_address: str,
        payment_method: str = PaymentMethod.COD.value,
        notes: Optional[str] = None,
    ) -> Order:
        """Create a pending order and return the stored row."""
        data = {
            "user_id": user_id,
            "order_number": order_number,
            "status": OrderStatus.PENDING.value,
            "total_amount": to_float(total_amount),
            "shipping_address": shipping_address,
            "payment_method": payment_method,
            "notes": notes or None,
        }
        async with self.writing():
            result = await self.table().insert(data).execute()
        return Order(**result.data[0])

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """Get order by ID, with items."""
        async with self.reading():
            result = await self.table().select(HISTORY_SELECT).eq("id", order_id).execute()
            return Order(**result.data[0]) if result.data else None

    async def get_by_user(self, user_id: str, limit: Optional[int] = None) -> List[Order]:
        """Get user's orders with items and product snapshots, newest first."""
        query = (
            self.table()
            .select(HISTORY_SELECT)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        if limit:
            query = query.limit(limit)

        async with self.reading():
            result = await query.execute()
            return [Order(**o) for o in result.data]


class OrderItemRepository(BaseRepository):
    """order_items database operations."""

    table_name = Tables.ORDER_ITEMS

    async def create_many(self, order_id: str, items: List[Dict[str, Any]]) -> None:
        """Insert all lines of an order in one request.

        Each item carries product_id, quantity and the unit price at order time.
        """
        rows = [
            {
                "order_id": order_id,
                "product_id": item["product_id"],
                "quantity": item["quantity"],
                "price": to_float(item["price"]),
            }
            for item in items
        ]
        async with self.writing():
            await self.table().insert(rows).execute()
