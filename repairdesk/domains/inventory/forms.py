"""
Part Form - Controller behind the add/edit part screen.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .drafts import PartDraft, format_models_input, merge_candidate, parse_models_input
from .models import Part

if TYPE_CHECKING:
    from repairdesk.domains.extraction.contracts import PartExtractor

    from .store import PartStore

logger = logging.getLogger(__name__)

__all__ = ["PartForm", "AUTOFILL_FAILED_NOTICE"]

AUTOFILL_FAILED_NOTICE = (
    "Не вдалося розпізнати опис. Спробуйте ще раз або заповніть вручну."
)


class PartForm:
    """
    Holds one part draft and fills it from free text on request.

    Example:
        >>> form = PartForm(extractor)
        >>> await form.autofill("Дисплей iPhone 11 оригінал, 2 штуки")
        True
        >>> part = await form.submit(store)
    """

    def __init__(self, extractor: PartExtractor, initial: Part | None = None) -> None:
        self._extractor = extractor
        self.draft = PartDraft.from_part(initial) if initial else PartDraft()
        self.models_input = format_models_input(self.draft.compatibility)
        self.notice = ""
        self.ai_loading = False
        self._autofill_seq = 0

    @property
    def is_editing(self) -> bool:
        return not self.draft.is_new

    def set_models_input(self, text: str) -> None:
        """Update the comma-separated compatible models field."""
        self.models_input = text
        self.draft = self.draft.model_copy(
            update={"compatibility": parse_models_input(text)}
        )

    async def autofill(self, text: str) -> bool:
        """
        Merge an extraction of ``text`` into the draft.

        Only the latest request applies; an older response arriving after a
        newer request was started is dropped.

        Returns:
            True if the draft was updated
        """
        if not text.strip():
            return False

        self._autofill_seq += 1
        token = self._autofill_seq
        self.ai_loading = True
        self.notice = ""

        candidate = await self._extractor.parse_one(text)

        if token != self._autofill_seq:
            logger.debug("Dropping superseded auto-fill response %d", token)
            return False

        self.ai_loading = False
        if candidate is None:
            self.notice = AUTOFILL_FAILED_NOTICE
            return False

        self.draft = merge_candidate(self.draft, candidate, source_text=text)
        self.models_input = format_models_input(self.draft.compatibility)
        return True

    async def submit(self, store: PartStore) -> Part:
        """Persist the draft through the store (create or update)."""
        return await store.save(self.draft.to_part())
