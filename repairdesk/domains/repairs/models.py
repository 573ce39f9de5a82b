"""
Repair Models - Customer repair tickets.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from repairdesk.domains.inventory.models import CamelModel, new_id, utc_now_iso


class RepairStatus(str, Enum):
    """Workflow status of a repair order (ordered, not strictly linear)."""

    RECEIVED = "RECEIVED"
    DIAGNOSTICS = "DIAGNOSTICS"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_PARTS = "WAITING_PARTS"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def is_open(self) -> bool:
        return self not in (RepairStatus.COMPLETED, RepairStatus.CANCELLED)


_STATUS_LABELS = {
    RepairStatus.RECEIVED: "Прийнято",
    RepairStatus.DIAGNOSTICS: "Діагностика",
    RepairStatus.IN_PROGRESS: "В роботі",
    RepairStatus.WAITING_PARTS: "Чекає запчастини",
    RepairStatus.READY: "Готово",
    RepairStatus.COMPLETED: "Видано",
    RepairStatus.CANCELLED: "Відмова",
}


class ServiceItem(CamelModel):
    """One billed line on a repair order."""

    name: str
    price: float = Field(default=0.0, ge=0)
    cost: float = Field(default=0.0, ge=0)


class RepairOrder(CamelModel):
    """A customer repair ticket.

    ``total_price`` is a snapshot taken at submission and is not recomputed
    when ``services`` changes later.
    """

    id: str = Field(default_factory=new_id)
    client_name: str = ""
    client_phone: str = ""
    device_brand: str = ""
    device_model: str = ""
    device_sn_imei: str = ""
    problem_description: str = ""
    device_condition: str = ""
    status: RepairStatus = RepairStatus.RECEIVED
    services: list[ServiceItem] = Field(default_factory=list)
    total_price: float = 0.0
    notes: str = ""
    date_received: str = Field(default_factory=utc_now_iso)

    @property
    def services_cost(self) -> float:
        return sum(s.cost for s in self.services)

    def matches(self, term: str) -> bool:
        """Case-insensitive match on client, phone, device model and serial."""
        needle = term.strip().lower()
        if not needle:
            return True
        haystack = (
            self.client_name,
            self.client_phone,
            self.device_brand,
            self.device_model,
            self.device_sn_imei,
        )
        return any(needle in value.lower() for value in haystack)
