"""
Part Drafts - Editable form state and the auto-fill merge policy.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from repairdesk.domains.extraction.models import PartCandidate

from .models import Category, Part, PartCondition, new_id, utc_now_iso

__all__ = ["PartDraft", "merge_candidate", "parse_models_input", "format_models_input"]


class PartDraft(BaseModel):
    """In-progress, not yet persisted part form."""

    id: str | None = None
    date_added: str | None = None
    name: str = ""
    category: Category = Category.OTHER
    condition: PartCondition = PartCondition.NEW
    quantity: int = 1
    price_buy: float = 0.0
    price_sell: float = 0.0
    location: str = ""
    compatibility: list[str] = Field(default_factory=list)
    description: str = ""
    source_info: str = ""

    @classmethod
    def from_part(cls, part: Part) -> PartDraft:
        """Start editing an existing part."""
        return cls(
            id=part.id,
            date_added=part.date_added,
            name=part.name,
            category=part.category,
            condition=part.condition,
            quantity=part.quantity,
            price_buy=part.price_buy,
            price_sell=part.price_sell,
            location=part.location,
            compatibility=list(part.compatibility),
            description=part.description,
            source_info=part.source_info or "",
        )

    @property
    def is_new(self) -> bool:
        return self.id is None

    def to_part(self) -> Part:
        """Build the record to submit; new drafts get an id and timestamp."""
        return Part(
            id=self.id or new_id(),
            date_added=self.date_added or utc_now_iso(),
            name=self.name.strip(),
            category=self.category,
            condition=self.condition,
            quantity=self.quantity,
            price_buy=self.price_buy,
            price_sell=self.price_sell,
            location=self.location,
            compatibility=list(self.compatibility),
            description=self.description,
            source_info=self.source_info or None,
        )


def merge_candidate(
    draft: PartDraft,
    candidate: PartCandidate,
    source_text: str | None = None,
) -> PartDraft:
    """
    Merge an extraction result into a draft.

    Fields the extraction provided override the draft; fields it left out
    keep the draft's value. For quantity and prices "left out" is ``None``,
    so an extracted ``0`` is applied. A missing description falls back to
    the source text only when the draft has none either.
    """
    updates: dict = {
        "name": candidate.name,
        "category": candidate.category,
        "condition": candidate.condition,
        "compatibility": list(candidate.compatibility),
    }

    for field in ("quantity", "price_buy", "price_sell", "source_info", "location"):
        value = getattr(candidate, field)
        if value is not None:
            updates[field] = value

    if candidate.description:
        updates["description"] = candidate.description
    elif not draft.description and source_text:
        updates["description"] = source_text.strip()

    return draft.model_copy(update=updates, deep=True)


def parse_models_input(text: str) -> list[str]:
    """Split a comma-separated model list, keeping order and duplicates."""
    return [item.strip() for item in text.split(",") if item.strip()]


def format_models_input(models: list[str]) -> str:
    return ", ".join(models)
