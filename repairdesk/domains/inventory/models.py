"""
Inventory Models - Spare part records and their enumerations.

`Category` and `PartCondition` are the single source for both the domain
model and the extraction schema sent to the language model.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate an opaque record identifier."""
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """JSON-ready dict using wire (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


class Category(str, Enum):
    """Part category."""

    SCREEN = "SCREEN"
    BATTERY = "BATTERY"
    HOUSING = "HOUSING"
    CAMERA = "CAMERA"
    BOARD = "BOARD"
    CABLE = "CABLE"
    OTHER = "OTHER"


class PartCondition(str, Enum):
    """Physical condition of a part."""

    NEW = "NEW"
    USED_EXCELLENT = "USED_EXCELLENT"  # pulled from a new device
    USED_GOOD = "USED_GOOD"  # working, cosmetic wear
    USED_DAMAGED = "USED_DAMAGED"  # defect that does not affect function
    FOR_PARTS = "FOR_PARTS"  # donor

    @property
    def label(self) -> str:
        return _CONDITION_LABELS[self]

    @property
    def is_used(self) -> bool:
        return self is not PartCondition.NEW


_CONDITION_LABELS = {
    PartCondition.NEW: "Нова",
    PartCondition.USED_EXCELLENT: "Б/У Ідеал",
    PartCondition.USED_GOOD: "Б/У Робоча",
    PartCondition.USED_DAMAGED: "Б/У Дефект",
    PartCondition.FOR_PARTS: "На запчастини",
}


class Part(CamelModel):
    """A single spare-component inventory record."""

    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    category: Category = Category.OTHER
    compatibility: list[str] = Field(default_factory=list)
    condition: PartCondition = PartCondition.NEW
    price_buy: float = Field(default=0.0, ge=0)
    price_sell: float = Field(default=0.0, ge=0)
    quantity: int = Field(default=0, ge=0)
    location: str = ""
    source_info: str | None = None
    date_added: str = Field(default_factory=utc_now_iso)

    def matches(self, term: str) -> bool:
        """Case-insensitive match against name, compatible models and source."""
        needle = term.strip().lower()
        if not needle:
            return True
        if needle in self.name.lower():
            return True
        if any(needle in model.lower() for model in self.compatibility):
            return True
        return bool(self.source_info and needle in self.source_info.lower())


class InventoryStats(BaseModel):
    """Aggregates shown on the inventory dashboard."""

    total_items: int = 0
    total_value_buy: float = 0.0
    total_value_sell: float = 0.0
    used_count: int = 0
    low_stock_count: int = 0
    by_condition: dict[PartCondition, int] = Field(default_factory=dict)

    @classmethod
    def from_parts(cls, parts: list[Part], low_stock_threshold: int = 1) -> InventoryStats:
        """Compute dashboard aggregates over a list of parts."""
        by_condition: dict[PartCondition, int] = {}
        for part in parts:
            by_condition[part.condition] = by_condition.get(part.condition, 0) + 1

        return cls(
            total_items=sum(p.quantity or 0 for p in parts),
            total_value_buy=sum((p.price_buy or 0) * (p.quantity or 0) for p in parts),
            total_value_sell=sum((p.price_sell or 0) * (p.quantity or 0) for p in parts),
            used_count=sum(1 for p in parts if p.condition.is_used),
            low_stock_count=sum(1 for p in parts if p.quantity <= low_stock_threshold),
            by_condition=by_condition,
        )

    @property
    def potential_margin(self) -> float:
        return self.total_value_sell - self.total_value_buy
