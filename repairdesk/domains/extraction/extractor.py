"""
Gemini Part Extractor - Free text to structured part records.

Turns typed or dictated descriptions (usually Ukrainian) into part
candidates, and proposes naming/category fixes for stored parts. Output is
validated before use; any failure yields "no suggestion" instead of an
exception.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from repairdesk.config import LLMError
from repairdesk.domains.inventory.models import Part

from .contracts import StructuredGenerator
from .models import NameSuggestion, PartCandidate
from .schemas import part_list_schema, part_schema, suggestion_list_schema

logger = logging.getLogger(__name__)

__all__ = ["GeminiPartExtractor"]

SYSTEM_INSTRUCTION = (
    "You are an assistant for a mobile repair shop. You categorize spare parts. "
    "Interpret 'знятий', 'ориг', 'бу' as used conditions. "
    "Default to OTHER category if unsure. "
    "Only fill quantity and prices when the text states them."
)

PARSE_ONE_PROMPT = """Analyze this text describing a mobile phone spare part and extract structured data.
Input text: "{text}\""""

PARSE_MANY_PROMPT = """The text below is a dictated or typed list of mobile phone spare parts.
Split it into separate parts. Items are separated by words like "далі", "також",
"потім", "наступна", "next", "also", "then", by punctuation, or by a change of
part or device. Keep the order of the text. Extract every part separately.
Input text: "{text}\""""

RECONCILE_PROMPT = """Below is the inventory of a phone repair shop as JSON (id, name, category).
For each item propose a standardized name: fix typos, use canonical model
names and capitalization ("iPhone 11", "Samsung S21"), keep the part type in
Ukrainian, and make the category consistent with the name.
Return one entry per item, reusing the given id.
Inventory: {payload}"""


class GeminiPartExtractor:
    """
    Part extractor backed by a schema-constrained model.

    Example:
        >>> from repairdesk.adapters.gemini import GeminiClient
        >>> extractor = GeminiPartExtractor(GeminiClient())
        >>> candidate = await extractor.parse_one("Дисплей iPhone 11 оригінал, 2 штуки")
        >>> candidate.quantity
        2
    """

    def __init__(self, client: StructuredGenerator) -> None:
        """
        Initialize extractor.

        Args:
            client: Model client with ``generate_structured``
        """
        self._client = client

    async def _call(self, operation: str, prompt: str, schema: dict[str, Any]) -> Any:
        """Run one model call; returns None on any transport or decoding failure."""
        try:
            return await self._client.generate_structured(
                prompt=prompt,
                response_schema=schema,
                system_instruction=SYSTEM_INSTRUCTION,
            )
        except json.JSONDecodeError as e:
            logger.warning("%s: model returned non-JSON output: %s", operation, e)
        except LLMError as e:
            logger.warning("%s: model call failed [%s]: %s", operation, e.code.value, e.message)
        except Exception:
            logger.exception("%s: unexpected model client failure", operation)
        return None

    async def parse_one(self, text: str) -> PartCandidate | None:
        """
        Extract a single part from a description.

        Args:
            text: Free-text description

        Returns:
            Validated candidate, or None when nothing usable came back
        """
        if not text or not text.strip():
            return None

        data = await self._call(
            "parse_one", PARSE_ONE_PROMPT.format(text=text.strip()), part_schema()
        )
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("parse_one: expected object, got %s", type(data).__name__)
            return None

        try:
            candidate = PartCandidate.model_validate(data)
        except ValidationError as e:
            logger.warning("parse_one: output violates schema: %s", e.errors())
            return None

        logger.info(
            "Parsed part: %s (%s, %s)",
            candidate.name,
            candidate.category.value,
            candidate.condition.value,
        )
        return candidate

    async def parse_many(self, text: str) -> list[PartCandidate]:
        """
        Extract an ordered list of parts from a dictated list.

        Items failing validation are dropped; the rest keep their order.
        Quantity defaults to 1 when the text does not state it.

        Args:
            text: Free-text list

        Returns:
            Candidates in input order (possibly empty)
        """
        if not text or not text.strip():
            return []

        data = await self._call(
            "parse_many", PARSE_MANY_PROMPT.format(text=text.strip()), part_list_schema()
        )
        if not isinstance(data, list):
            if data is not None:
                logger.warning("parse_many: expected array, got %s", type(data).__name__)
            return []

        candidates: list[PartCandidate] = []
        for index, item in enumerate(data):
            try:
                candidate = PartCandidate.model_validate(item)
            except ValidationError as e:
                logger.warning("parse_many: dropping item %d: %s", index, e.errors())
                continue
            if candidate.quantity is None:
                candidate = candidate.model_copy(update={"quantity": 1})
            candidates.append(candidate)

        logger.info("Parsed %d of %d listed parts", len(candidates), len(data))
        return candidates

    async def reconcile(self, parts: list[Part]) -> list[NameSuggestion]:
        """
        Propose standardized names and categories for stored parts.

        Only id, name and category are sent. Suggestions for unknown ids
        are discarded, as are repeated suggestions for the same id.

        Args:
            parts: Current stored parts

        Returns:
            Suggestions referencing input ids only (possibly empty)
        """
        if not parts:
            return []

        payload = json.dumps(
            [{"id": p.id, "name": p.name, "category": p.category.value} for p in parts],
            ensure_ascii=False,
        )
        data = await self._call(
            "reconcile", RECONCILE_PROMPT.format(payload=payload), suggestion_list_schema()
        )
        if not isinstance(data, list):
            if data is not None:
                logger.warning("reconcile: expected array, got %s", type(data).__name__)
            return []

        known_ids = {p.id for p in parts}
        seen: set[str] = set()
        suggestions: list[NameSuggestion] = []
        for item in data:
            try:
                suggestion = NameSuggestion.model_validate(item)
            except ValidationError as e:
                logger.warning("reconcile: dropping suggestion: %s", e.errors())
                continue
            if suggestion.id not in known_ids:
                logger.warning("reconcile: ignoring unknown id %s", suggestion.id)
                continue
            if suggestion.id in seen:
                continue
            seen.add(suggestion.id)
            suggestions.append(suggestion)

        logger.info("Received %d suggestions for %d parts", len(suggestions), len(parts))
        return suggestions
