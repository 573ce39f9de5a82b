"""
Repairs Domain - Customer repair tickets.

This domain handles:
- Repair orders, service lines and statuses
- The intake draft (service lines, total snapshot)
- The repair store (load, create, optimistic status change, delete)
"""

from .models import RepairOrder, RepairStatus, ServiceItem
from .contracts import RepairRepository
from .forms import RepairDraft
from .store import RepairStore

__all__ = [
    "RepairOrder",
    "RepairStatus",
    "ServiceItem",
    "RepairRepository",
    "RepairDraft",
    "RepairStore",
]
