"""Order status, payment method and order number constants."""
from enum import Enum


class OrderStatus(str, Enum):
    """
    Order status lifecycle.

    Flow:
        pending -> processing -> shipped -> delivered
                -> cancelled

    New orders are always created as pending.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    """Payment methods offered at checkout. No payment is captured by the client."""
    COD = "cod"
    UPI = "upi"
    CARD = "card"


ORDER_NUMBER_PREFIX = "ORD"
