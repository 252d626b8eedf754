"""Storefront client: catalog, cart, checkout and order history over Supabase."""
from .context import StorefrontContext

__all__ = ["StorefrontContext"]
