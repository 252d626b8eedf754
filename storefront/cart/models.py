"""Cart line model with Decimal-based pricing."""
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from storefront.services.models import CartItemRow, Product
from storefront.services.money import multiply, round_money, to_float


@dataclass(frozen=True)
class CartLine:
    """One product held in the user's cart, with its joined product snapshot."""
    id: str
    user_id: str
    product_id: str
    quantity: int
    product: Product
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def unit_price(self) -> Decimal:
        return self.product.price

    @property
    def total_price(self) -> Decimal:
        """Total price for all units."""
        return multiply(self.product.price, self.quantity)

    def with_quantity(self, quantity: int, updated_at: Optional[datetime] = None) -> "CartLine":
        return replace(self, quantity=quantity, updated_at=updated_at or self.updated_at)

    def to_dict(self) -> dict:
        """Convert to dictionary for display."""
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name,
            "image_url": self.product.image_url,
            "unit": self.product.unit,
            "quantity": self.quantity,
            "unit_price": to_float(self.unit_price),
            "total": to_float(round_money(self.total_price)),
        }

    @classmethod
    def from_row(cls, row: CartItemRow) -> "CartLine":
        """Create from a cart_items row fetched with its product embedded."""
        if row.products is None:
            # Product row hidden or deleted; keep the line so it can still be removed
            product = Product(id=row.product_id, name="Unavailable product", is_available=False)
        else:
            product = row.products
        return cls(
            id=row.id,
            user_id=row.user_id,
            product_id=row.product_id,
            quantity=row.quantity,
            product=product,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
