"""
Extraction Models - Validated shapes of model output.

Every payload coming back from the language model is validated against one
of these before it reaches drafts or stores.
"""

from __future__ import annotations

from pydantic import ConfigDict, Field

from repairdesk.domains.inventory.models import CamelModel, Category, PartCondition


class PartCandidate(CamelModel):
    """
    A part as extracted from free text.

    Optional fields use ``None`` for "not mentioned"; ``0`` is a real value.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    category: Category
    condition: PartCondition
    compatibility: list[str]
    quantity: int | None = Field(default=None, ge=0)
    price_buy: float | None = Field(default=None, ge=0)
    price_sell: float | None = Field(default=None, ge=0)
    description: str | None = None
    source_info: str | None = None
    location: str | None = None


class NameSuggestion(CamelModel):
    """A proposed correction for one stored part."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(min_length=1)
    corrected_name: str = Field(min_length=1)
    corrected_category: Category
