"""
RepairDesk - Inventory and repair-order client for a phone repair shop.

Example:
    >>> from repairdesk.adapters.rest import ShopAPIClient
    >>> from repairdesk.domains.inventory import PartStore
    >>> store = PartStore(ShopAPIClient("http://localhost:8000/api"))
    >>> await store.load()
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
