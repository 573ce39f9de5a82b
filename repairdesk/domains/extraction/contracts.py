"""
Extraction Contracts - Interfaces for extraction domain.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from repairdesk.domains.inventory.models import Part

from .models import NameSuggestion, PartCandidate


@runtime_checkable
class StructuredGenerator(Protocol):
    """
    Contract for a schema-constrained text model.

    `repairdesk.adapters.gemini.GeminiClient` satisfies it.
    """

    async def generate_structured(
        self,
        prompt: str,
        response_schema: dict[str, Any],
        system_instruction: str | None = None,
    ) -> Any:
        """
        Generate JSON following ``response_schema``.

        May raise on transport failure or unparseable output; callers in this
        domain absorb those errors.
        """
        ...


@runtime_checkable
class PartExtractor(Protocol):
    """
    Contract for free-text to part extraction.

    None of the methods raise: failures come back as ``None`` or ``[]`` so
    the caller can fall back to manual entry.
    """

    async def parse_one(self, text: str) -> PartCandidate | None:
        """Extract a single part description."""
        ...

    async def parse_many(self, text: str) -> list[PartCandidate]:
        """Extract a dictated list of parts, in order."""
        ...

    async def reconcile(self, parts: list[Part]) -> list[NameSuggestion]:
        """Suggest standardized names and categories for stored parts."""
        ...
