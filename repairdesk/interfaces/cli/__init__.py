"""
CLI Interface - Command-line tools for RepairDesk.

Provides commands for:
- Listing, adding and importing parts
- Normalizing part names
- Repair order intake and status changes
- Inventory statistics
"""

from .main import app

__all__ = ["app"]
