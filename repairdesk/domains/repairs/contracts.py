"""
Repair Contracts - Persistence interface used by the repair store.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import RepairOrder, RepairStatus


@runtime_checkable
class RepairRepository(Protocol):
    """
    Contract for repair order persistence.

    `repairdesk.adapters.rest.ShopAPIClient` satisfies it. Implementations
    raise `StorageError` on failure.
    """

    async def list_repairs(self) -> list[RepairOrder]: ...

    async def create_repair(self, order: RepairOrder) -> RepairOrder: ...

    async def update_repair_status(
        self, repair_id: str, status: RepairStatus
    ) -> RepairOrder | None: ...

    async def delete_repair(self, repair_id: str) -> None: ...
