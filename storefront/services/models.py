"""Database Models - Pydantic models for the storefront tables."""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from storefront.services.money import divide, multiply, subtract, to_decimal as _to_decimal


class Category(BaseModel):
    """Category model."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None


class Product(BaseModel):
    """Product model. Read-only from the client's point of view."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    category_id: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    price: Decimal = Decimal("0")
    original_price: Optional[Decimal] = None  # Pre-discount price
    image_url: Optional[str] = None
    stock: int = 0
    unit: str = "piece"
    rating: Decimal = Decimal("0")
    review_count: int = 0
    is_featured: bool = False
    is_available: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("price", "rating", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("original_price", mode="before")
    @classmethod
    def convert_original_price(cls, v):
        return _to_decimal(v) if v is not None else None

    @property
    def discount_percent(self) -> int:
        """Whole-percent saving against original_price, 0 when there is none."""
        if not self.original_price or self.original_price <= 0:
            return 0
        saving = divide(subtract(self.original_price, self.price), self.original_price)
        return int(multiply(saving, 100).to_integral_value(rounding=ROUND_HALF_UP))

    @property
    def in_stock(self) -> bool:
        return self.is_available and self.stock > 0


class CartItemRow(BaseModel):
    """Raw cart_items row, with the product embedded by select("*, products(*)")."""
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    product_id: str
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    products: Optional[Product] = None


class OrderItem(BaseModel):
    """Order item model. `price` is the unit price frozen at checkout."""
    model_config = ConfigDict(extra="ignore")

    id: str
    order_id: str
    product_id: Optional[str] = None  # NULL once the product is deleted
    quantity: int = 1
    price: Decimal
    created_at: Optional[datetime] = None
    products: Optional[Product] = None

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @property
    def line_total(self) -> Decimal:
        return multiply(self.price, self.quantity)


class Order(BaseModel):
    """Order model."""
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    order_number: str
    status: str = "pending"
    total_amount: Decimal
    shipping_address: str
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    order_items: list[OrderItem] = []

    @field_validator("total_amount", mode="before")
    @classmethod
    def convert_amount_to_decimal(cls, v):
        return _to_decimal(v)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.order_items)


class Profile(BaseModel):
    """Profile / address book model, keyed by auth user id."""
    model_config = ConfigDict(extra="ignore")

    id: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
