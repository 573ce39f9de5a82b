"""
Repair Store - Screen-level state for repair orders.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from repairdesk.config import NotFoundError, RecordBusyError, SubmitInProgressError

from .contracts import RepairRepository
from .forms import RepairDraft
from .models import RepairOrder, RepairStatus

logger = logging.getLogger(__name__)

__all__ = ["RepairStore"]


class RepairStore:
    """
    Repair orders with explicit read and write methods.

    Status changes are optimistic: the local copy changes first and is put
    back if the backend rejects the change. While a change is in flight the
    record accepts no other mutation.
    """

    def __init__(self, repository: RepairRepository) -> None:
        self._repository = repository
        self._orders: list[RepairOrder] = []
        self._pending: set[str] = set()
        self._load_seq = 0
        self.saving = False

    # --- Reads ---

    @property
    def orders(self) -> list[RepairOrder]:
        return list(self._orders)

    def get(self, repair_id: str) -> RepairOrder:
        for order in self._orders:
            if order.id == repair_id:
                return order
        raise NotFoundError(f"Repair {repair_id} not found", {"id": repair_id})

    def is_pending(self, repair_id: str) -> bool:
        return repair_id in self._pending

    def filter(
        self, search: str = "", status: RepairStatus | str | None = None
    ) -> list[RepairOrder]:
        if status == "ALL":
            status = None
        if status is not None:
            status = RepairStatus(status)
        return [
            o
            for o in self._orders
            if o.matches(search) and (status is None or o.status is status)
        ]

    def counts_by_status(self) -> dict[RepairStatus, int]:
        counts = {status: 0 for status in RepairStatus}
        for order in self._orders:
            counts[order.status] += 1
        return counts

    # --- Sync ---

    async def load(self) -> bool:
        """Replace local state; returns False if a newer load superseded it."""
        self._load_seq += 1
        token = self._load_seq
        orders = await self._repository.list_repairs()
        if token != self._load_seq:
            logger.debug("Dropping superseded repairs load %d", token)
            return False
        self._orders = orders
        logger.info("Loaded %d repair orders", len(orders))
        return True

    @contextmanager
    def _submitting(self) -> Iterator[None]:
        if self.saving:
            raise SubmitInProgressError()
        self.saving = True
        try:
            yield
        finally:
            self.saving = False

    def _supersede_loads(self) -> None:
        """Local state changed; any load still in flight carries older data."""
        self._load_seq += 1

    def _replace(self, order: RepairOrder) -> None:
        self._supersede_loads()
        for i, existing in enumerate(self._orders):
            if existing.id == order.id:
                self._orders[i] = order
                return

    # --- Writes ---

    async def create(self, draft: RepairDraft) -> RepairOrder:
        """Submit a draft; the total price is fixed at this point."""
        with self._submitting():
            saved = await self._repository.create_repair(draft.to_order())
        self._orders.insert(0, saved)
        self._supersede_loads()
        logger.info("Created repair %s for %s", saved.id, saved.client_name)
        return saved

    async def change_status(self, repair_id: str, status: RepairStatus) -> RepairOrder:
        """
        Optimistically change a repair's status.

        Raises:
            RecordBusyError: Another change to this record is in flight
            StorageError: Backend rejected the change

        Any failure reverts the local status before propagating.
        """
        order = self.get(repair_id)
        if repair_id in self._pending:
            raise RecordBusyError(repair_id)
        if order.status is status:
            return order

        previous = order.status
        self._pending.add(repair_id)
        self._replace(order.model_copy(update={"status": status}))
        try:
            echoed = await self._repository.update_repair_status(repair_id, status)
        except Exception:
            logger.warning(
                "Status change %s -> %s failed for %s, reverting",
                previous.value,
                status.value,
                repair_id,
            )
            current = self.get(repair_id)
            self._replace(current.model_copy(update={"status": previous}))
            raise
        finally:
            self._pending.discard(repair_id)

        if echoed is not None:
            self._replace(echoed)
        logger.info("Repair %s: %s -> %s", repair_id, previous.value, status.value)
        return self.get(repair_id)

    async def delete(self, repair_id: str) -> None:
        self.get(repair_id)
        if repair_id in self._pending:
            raise RecordBusyError(repair_id)
        await self._repository.delete_repair(repair_id)
        self._orders = [o for o in self._orders if o.id != repair_id]
        self._supersede_loads()
        logger.info("Deleted repair %s", repair_id)
