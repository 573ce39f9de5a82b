"""
Inventory Domain - Spare parts, drafts and screen-level state.

This domain handles:
- Part records and dashboard statistics
- Part drafts and the auto-fill merge policy
- Bulk import and batch commit
- The part store (load, save, delete, normalize)
"""

from .models import Category, InventoryStats, Part, PartCondition
from .contracts import PartRepository
from .drafts import PartDraft, format_models_input, merge_candidate, parse_models_input
from .bulk import BulkCommitResult, BulkImport, BulkItemFailure, candidate_to_part
from .forms import PartForm
from .store import PartStore, ReconcileReport

__all__ = [
    # Models
    "Category",
    "PartCondition",
    "Part",
    "InventoryStats",
    # Contracts
    "PartRepository",
    # Drafts
    "PartDraft",
    "merge_candidate",
    "parse_models_input",
    "format_models_input",
    # Controllers
    "PartForm",
    "BulkImport",
    "BulkCommitResult",
    "BulkItemFailure",
    "candidate_to_part",
    "PartStore",
    "ReconcileReport",
]
