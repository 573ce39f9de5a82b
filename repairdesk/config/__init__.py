"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    ErrorCode,
    LLMError,
    NotFoundError,
    RecordBusyError,
    RepairDeskError,
    StorageError,
    SubmitInProgressError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "RepairDeskError",
    "LLMError",
    "StorageError",
    "NotFoundError",
    "SubmitInProgressError",
    "RecordBusyError",
]
