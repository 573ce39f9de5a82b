"""
REST Adapter - HTTP client for the shop backend.
"""

from .client import ShopAPIClient

__all__ = ["ShopAPIClient"]
