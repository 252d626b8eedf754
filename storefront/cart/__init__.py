"""Cart package: cart line model and the cart state manager."""
from .models import CartLine
from .service import CartManager

__all__ = [
    "CartLine",
    "CartManager",
]
