"""
Database Module - Supabase client

Provides a lazily created async Supabase client for the PostgREST tables and
the auth API. Configuration comes from the environment:

- SUPABASE_URL: project URL
- SUPABASE_ANON_KEY: public anon key (row-level security scopes every query
  to the signed-in user)
"""

import os
from typing import Optional

from supabase._async.client import AsyncClient
from supabase._async.client import create_client as acreate_client

SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")


# Table names
class Tables:
    """Remote table names."""

    PRODUCTS = "products"
    CATEGORIES = "categories"
    CART_ITEMS = "cart_items"
    ORDERS = "orders"
    ORDER_ITEMS = "order_items"
    PROFILES = "profiles"


_async_supabase_client: Optional[AsyncClient] = None


async def get_supabase() -> AsyncClient:
    """
    Get async Supabase client (singleton).

    Raises:
        ValueError: if SUPABASE_URL or SUPABASE_ANON_KEY is not set
    """
    global _async_supabase_client

    if _async_supabase_client is None:
        if not SUPABASE_URL or not SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
        _async_supabase_client = await acreate_client(SUPABASE_URL, SUPABASE_ANON_KEY)

    return _async_supabase_client


def reset_supabase() -> None:
    """Drop the cached client (used by tests and after key rotation)."""
    global _async_supabase_client
    _async_supabase_client = None
