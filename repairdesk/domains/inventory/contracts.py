"""
Inventory Contracts - Persistence interface used by the part store.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import Part


@runtime_checkable
class PartRepository(Protocol):
    """
    Contract for part persistence.

    `repairdesk.adapters.rest.ShopAPIClient` satisfies it. Implementations
    raise `StorageError` on failure; create/update return the entity as
    persisted by the backend.
    """

    async def list_parts(self) -> list[Part]: ...

    async def create_part(self, part: Part) -> Part: ...

    async def update_part(self, part: Part) -> Part: ...

    async def delete_part(self, part_id: str) -> None: ...
