"""
Storefront context: the explicitly constructed object graph for one session.

Usage:
    ctx = await StorefrontContext.create()
    await ctx.session.sign_in(email, password)
    await ctx.cart.wait_until_synced()
    await ctx.cart.add(product, 2)
"""
from typing import Optional

from supabase._async.client import AsyncClient

from storefront.auth.session import SessionProvider
from storefront.cart import CartManager
from storefront.db import get_supabase
from storefront.orders import CheckoutWorkflow, OrderHistory
from storefront.services.domains import CatalogService
from storefront.services.repositories import (
    CartRepository,
    CategoryRepository,
    OrderItemRepository,
    OrderRepository,
    ProfileRepository,
    ProductRepository,
)


class StorefrontContext:
    """One running session: identity, cart, checkout, catalog and order history."""

    def __init__(self, client: AsyncClient, session: Optional[SessionProvider] = None):
        self.client = client
        self.session = session or SessionProvider(getattr(client, "auth", None))

        self.products = ProductRepository(client)
        self.categories = CategoryRepository(client)
        self.cart_items = CartRepository(client)
        self.orders = OrderRepository(client)
        self.order_items = OrderItemRepository(client)
        self.profiles = ProfileRepository(client)

        self.catalog = CatalogService(self.products, self.categories)
        self.cart = CartManager(self.cart_items, self.session)
        self.checkout = CheckoutWorkflow(self.cart, self.orders, self.order_items, self.profiles)
        self.order_history = OrderHistory(self.session, self.orders)

    @classmethod
    async def create(cls) -> "StorefrontContext":
        """Build a context on the configured Supabase project and restore any session."""
        ctx = cls(await get_supabase())
        await ctx.session.restore()
        return ctx

    def close(self) -> None:
        self.cart.detach()
