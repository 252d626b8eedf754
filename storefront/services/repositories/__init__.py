"""
Repository Pattern for Database Operations

One repository per remote table:
- ProductRepository / CategoryRepository: catalog reads
- CartRepository: cart_items CRUD keyed by user
- OrderRepository / OrderItemRepository: orders and frozen order lines
- ProfileRepository: profile upsert
"""
from .cart_repo import CartRepository
from .order_repo import OrderItemRepository, OrderRepository
from .product_repo import CategoryRepository, ProductRepository
from .profile_repo import ProfileRepository

__all__ = [
    "CartRepository",
    "CategoryRepository",
    "OrderItemRepository",
    "OrderRepository",
    "ProductRepository",
    "ProfileRepository",
]
