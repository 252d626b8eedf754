"""Domain services wrapping repositories."""
from .catalog import CatalogService, CatalogSnapshot, featured, filter_products

__all__ = [
    "CatalogService",
    "CatalogSnapshot",
    "featured",
    "filter_products",
]
