"""
Checkout Workflow

Turns the current cart into an order. Remote writes happen in sequence and
the cart is cleared only after the order, its lines and the profile were all
written; any earlier failure leaves the cart as it was so checkout can be
retried.
"""
import secrets
import time
from dataclasses import asdict, dataclass
from typing import Optional

from storefront.cart import CartManager
from storefront.constants import ORDER_NUMBER_PREFIX, PaymentMethod
from storefront.errors import CartNotCleared, CheckoutFailed, EmptyCart, NotAuthenticated, RemoteWriteFailed
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.models import Order
from storefront.services.repositories import OrderItemRepository, OrderRepository, ProfileRepository

logger = get_logger(__name__)


def generate_order_number() -> str:
    """Human-readable order reference: ``ORD-<epoch millis>-<0..999>``."""
    timestamp = time.time_ns() // 1_000_000
    return f"{ORDER_NUMBER_PREFIX}-{timestamp}-{secrets.randbelow(1000)}"


@dataclass
class ShippingDetails:
    """Contact and delivery details collected at checkout."""
    full_name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str

    def formatted_address(self) -> str:
        return f"{self.address}, {self.city}, {self.state} - {self.pincode}"


class CheckoutWorkflow:
    """Places orders for the cart manager's current identity."""

    def __init__(
        self,
        cart: CartManager,
        orders: OrderRepository,
        order_items: OrderItemRepository,
        profiles: ProfileRepository,
    ):
        self.cart = cart
        self.orders = orders
        self.order_items = order_items
        self.profiles = profiles

    async def place_order(
        self,
        shipping: ShippingDetails,
        payment_method: str = PaymentMethod.COD.value,
        notes: Optional[str] = None,
    ) -> Order:
        """
        Place an order for everything in the cart.

        Raises:
            NotAuthenticated: no one is signed in
            EmptyCart: nothing to order
            CheckoutFailed: a remote write failed; `step` names which one
            CartNotCleared: the order was placed (`order`) but the cart was not emptied
        """
        identity = self.cart.identity
        if identity is None:
            raise NotAuthenticated()

        # Total and order lines come from the same snapshot
        lines = self.cart.items
        if not lines:
            raise EmptyCart()
        total = self.cart.total()

        order_number = generate_order_number()
        payment_method = PaymentMethod(payment_method).value

        try:
            order = await self.orders.create(
                user_id=identity.id,
                order_number=order_number,
                total_amount=total,
                shipping_address=shipping.formatted_address(),
                payment_method=payment_method,
                notes=notes,
            )
        except RemoteWriteFailed as e:
            raise CheckoutFailed("order", e.detail or str(e)) from e

        try:
            await self.order_items.create_many(
                order.id,
                [
                    {"product_id": line.product_id, "quantity": line.quantity, "price": line.unit_price}
                    for line in lines
                ],
            )
        except RemoteWriteFailed as e:
            logger.error(f"Order {order_number} created without items")
            raise CheckoutFailed("order_items", e.detail or str(e)) from e

        try:
            await self.profiles.upsert(identity.id, identity.email, asdict(shipping))
        except RemoteWriteFailed as e:
            raise CheckoutFailed("profile", e.detail or str(e)) from e

        try:
            cleared = await self.cart.clear(expected=identity)
        except RemoteWriteFailed as e:
            logger.error(
                f"Order {order_number} placed but cart not cleared for user "
                f"{sanitize_id_for_logging(identity.id)}: {e}"
            )
            raise CartNotCleared(order, e.detail or str(e)) from e
        if not cleared:
            # Signed out or switched user while the order was being written
            logger.warning(f"Order {order_number} placed after identity change, cart left as is")

        logger.info(f"Order {order_number} placed: {len(lines)} lines, total {total}")
        return order
