"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from repairdesk.config.errors import ErrorCode, RepairDeskError

    raise RepairDeskError(ErrorCode.STORAGE_WRITE_FAILED, "Failed to create part")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # LLM/Model errors
    LLM_UNAVAILABLE = "LLM_UNAVAILABLE"
    LLM_RATE_LIMITED = "LLM_RATE_LIMITED"

    # Storage errors
    STORAGE_CONNECTION_FAILED = "STORAGE_CONNECTION_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"

    # Controller state errors
    SUBMIT_IN_PROGRESS = "SUBMIT_IN_PROGRESS"
    RECORD_BUSY = "RECORD_BUSY"

    # General errors
    NOT_FOUND = "NOT_FOUND"


class RepairDeskError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a serializable dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


# Domain-specific exceptions for cleaner imports
class LLMError(RepairDeskError):
    """LLM/model errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.LLM_UNAVAILABLE,
    ) -> None:
        super().__init__(code, message, details)


class StorageError(RepairDeskError):
    """Persistence backend errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.STORAGE_CONNECTION_FAILED,
    ) -> None:
        super().__init__(code, message, details)


class NotFoundError(RepairDeskError):
    """Record is not known to the local store."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.NOT_FOUND, message, details)


class SubmitInProgressError(RepairDeskError):
    """A submission from the same screen is already in flight."""

    def __init__(self, message: str = "Submission already in progress") -> None:
        super().__init__(ErrorCode.SUBMIT_IN_PROGRESS, message)


class RecordBusyError(RepairDeskError):
    """Another mutation of the record is still pending."""

    def __init__(self, record_id: str) -> None:
        super().__init__(
            ErrorCode.RECORD_BUSY,
            f"Record {record_id} has a pending change",
            {"id": record_id},
        )
