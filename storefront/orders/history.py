"""Order history for the signed-in user."""
from typing import List, Optional

from storefront.auth.session import SessionProvider
from storefront.constants import OrderStatus
from storefront.services.models import Order
from storefront.services.repositories import OrderRepository

STATUS_LABELS = {
    OrderStatus.PENDING.value: "Pending",
    OrderStatus.PROCESSING.value: "Processing",
    OrderStatus.SHIPPED.value: "Shipped",
    OrderStatus.DELIVERED.value: "Delivered",
    OrderStatus.CANCELLED.value: "Cancelled",
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status.capitalize())


class OrderHistory:
    """Reads past orders, with their frozen line prices, newest first."""

    def __init__(self, session: SessionProvider, orders: OrderRepository):
        self.session = session
        self.orders = orders

    async def list_orders(self, limit: Optional[int] = None) -> List[Order]:
        """Empty when nobody is signed in. Raises RemoteReadFailed on fetch failure."""
        identity = self.session.identity
        if identity is None:
            return []
        return await self.orders.get_by_user(identity.id, limit=limit)

    async def get_order(self, order_id: str) -> Optional[Order]:
        """One of the signed-in user's orders, or None."""
        identity = self.session.identity
        if identity is None:
            return None
        order = await self.orders.get_by_id(order_id)
        if order is None or order.user_id != identity.id:
            return None
        return order
