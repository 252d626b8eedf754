"""Orders package: checkout workflow, order history and status constants."""
from storefront.constants import OrderStatus, PaymentMethod

from .checkout import CheckoutWorkflow, ShippingDetails, generate_order_number
from .history import OrderHistory, status_label

__all__ = [
    "CheckoutWorkflow",
    "OrderHistory",
    "OrderStatus",
    "PaymentMethod",
    "ShippingDetails",
    "generate_order_number",
    "status_label",
]
