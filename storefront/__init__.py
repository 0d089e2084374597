"""
Storefront Cart Engine

This package contains the client-side cart components:
- cart: line items, totals, snapshot persistence, notifications, CartStore
- config: environment-driven settings
- db: Upstash Redis client for the shared snapshot slot
- models: Pydantic schemas for candidates and checkout summaries

Note: Imports are lazy so that importing the package never touches
Redis or the filesystem.
"""

__all__ = [
    "CartStore",
    "create_cart_store",
    "load_settings",
]


def __getattr__(name):
    """Lazy attribute access for clean module loading."""
    if name == "CartStore":
        from storefront.cart import CartStore
        return CartStore
    if name == "create_cart_store":
        from storefront.cart import create_cart_store
        return create_cart_store
    if name == "load_settings":
        from storefront.config import load_settings
        return load_settings
    raise AttributeError(f"module 'storefront' has no attribute '{name}'")
