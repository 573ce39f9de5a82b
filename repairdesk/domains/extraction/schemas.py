"""
Response Schemas - Output schemas sent with each extraction request.

Enum values are read from the domain enumerations on every call.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from repairdesk.domains.inventory.models import Category, PartCondition

__all__ = ["enum_values", "part_schema", "part_list_schema", "suggestion_list_schema"]


def enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


def _enum_property(enum_cls: type[Enum], description: str) -> dict[str, Any]:
    return {
        "type": "STRING",
        "format": "enum",
        "enum": enum_values(enum_cls),
        "description": description,
    }


def part_schema() -> dict[str, Any]:
    """Schema for a single extracted part."""
    return {
        "type": "OBJECT",
        "properties": {
            "name": {
                "type": "STRING",
                "description": "Short descriptive name of the part in Ukrainian",
            },
            "category": _enum_property(Category, "Category enum value"),
            "condition": _enum_property(
                PartCondition, "Condition enum value based on description"
            ),
            "compatibility": {
                "type": "ARRAY",
                "items": {"type": "STRING"},
                "description": "List of compatible phone models found in text",
            },
            "quantity": {
                "type": "INTEGER",
                "description": "Number of pieces, only if stated",
            },
            "priceBuy": {
                "type": "NUMBER",
                "description": "Purchase price, only if stated",
            },
            "priceSell": {
                "type": "NUMBER",
                "description": "Selling price, only if stated",
            },
            "description": {
                "type": "STRING",
                "description": "Cleaned up description/notes in Ukrainian",
            },
            "sourceInfo": {
                "type": "STRING",
                "description": "Any info about origin (donor, client name)",
            },
        },
        "required": ["name", "category", "condition", "compatibility"],
    }


def part_list_schema() -> dict[str, Any]:
    """Schema for an ordered list of extracted parts."""
    return {"type": "ARRAY", "items": part_schema()}


def suggestion_list_schema() -> dict[str, Any]:
    """Schema for normalization suggestions."""
    return {
        "type": "ARRAY",
        "items": {
            "type": "OBJECT",
            "properties": {
                "id": {"type": "STRING"},
                "correctedName": {"type": "STRING"},
                "correctedCategory": _enum_property(Category, "Category enum value"),
            },
            "required": ["id", "correctedName", "correctedCategory"],
        },
    }
