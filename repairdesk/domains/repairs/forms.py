"""
Repair Draft - Intake form state for a new repair order.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from repairdesk.domains.inventory.models import new_id, utc_now_iso

from .models import RepairOrder, RepairStatus, ServiceItem

__all__ = ["RepairDraft"]


class RepairDraft(BaseModel):
    """Not yet submitted repair order."""

    client_name: str = ""
    client_phone: str = ""
    device_brand: str = ""
    device_model: str = ""
    device_sn_imei: str = ""
    problem_description: str = ""
    device_condition: str = ""
    status: RepairStatus = RepairStatus.RECEIVED
    services: list[ServiceItem] = Field(default_factory=list)
    notes: str = ""

    @property
    def total(self) -> float:
        return sum(item.price for item in self.services)

    def add_service(self, name: str, price: float = 0.0, cost: float = 0.0) -> bool:
        """Append a service line; blank names are ignored."""
        if not name.strip():
            return False
        self.services.append(ServiceItem(name=name.strip(), price=price, cost=cost))
        return True

    def remove_service(self, index: int) -> None:
        del self.services[index]

    def to_order(self) -> RepairOrder:
        """Build the order to submit, snapshotting the current total."""
        return RepairOrder(
            id=new_id(),
            date_received=utc_now_iso(),
            total_price=self.total,
            services=[item.model_copy() for item in self.services],
            **self.model_dump(exclude={"services"}),
        )
