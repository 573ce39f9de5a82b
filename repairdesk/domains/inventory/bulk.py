"""
Bulk Import - Dictated multi-part import and batch commit results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from repairdesk.domains.extraction.models import PartCandidate

from .models import Category, Part, PartCondition, new_id, utc_now_iso

if TYPE_CHECKING:
    from repairdesk.domains.extraction.contracts import PartExtractor

    from .store import PartStore

logger = logging.getLogger(__name__)

__all__ = [
    "AI_IMPORT_SOURCE",
    "BulkCommitResult",
    "BulkImport",
    "BulkItemFailure",
    "candidate_to_part",
]

AI_IMPORT_SOURCE = "AI Import"
UNKNOWN_PART_NAME = "Unknown Part"
NOTHING_RECOGNIZED_NOTICE = "Не вдалося розпізнати жодної деталі."


def candidate_to_part(candidate: PartCandidate, date_added: str | None = None) -> Part:
    """
    Turn an import candidate into a new record with defaults applied.

    Quantity below one is stored as one: an import line always stands for
    at least one physical piece.
    """
    return Part(
        id=new_id(),
        date_added=date_added or utc_now_iso(),
        name=(candidate.name or "").strip() or UNKNOWN_PART_NAME,
        category=candidate.category or Category.OTHER,
        condition=candidate.condition or PartCondition.USED_GOOD,
        compatibility=list(candidate.compatibility or []),
        quantity=max(candidate.quantity or 1, 1),
        price_buy=candidate.price_buy if candidate.price_buy is not None else 0.0,
        price_sell=candidate.price_sell if candidate.price_sell is not None else 0.0,
        location=candidate.location or "",
        description=candidate.description or "",
        source_info=candidate.source_info or AI_IMPORT_SOURCE,
    )


@dataclass
class BulkItemFailure:
    """One item of a batch that was not persisted."""

    index: int
    part: Part
    error: str


@dataclass
class BulkCommitResult:
    """Per-item outcome of a batch commit."""

    created: list[Part] = field(default_factory=list)
    failures: list[BulkItemFailure] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.created) + len(self.failures)

    @property
    def ok(self) -> bool:
        """Every item was persisted (an empty batch counts as ok)."""
        return not self.failures

    @property
    def partial(self) -> bool:
        """Some, but not all, items were persisted."""
        return bool(self.created) and bool(self.failures)

    @property
    def failed(self) -> bool:
        """Nothing was persisted although items were submitted."""
        return not self.created and bool(self.failures)

    def summary(self) -> str:
        if self.ok:
            return f"Saved {len(self.created)} parts"
        if self.partial:
            return (
                f"Saved {len(self.created)} of {self.attempted} parts, "
                f"{len(self.failures)} failed"
            )
        return f"Failed to save {len(self.failures)} parts"


class BulkImport:
    """
    Controller behind the bulk import screen.

    Text comes from typing or from a voice listener that the user starts and
    stops by hand; final transcripts are appended to the text.
    """

    def __init__(self, extractor: PartExtractor) -> None:
        self._extractor = extractor
        self.text = ""
        self.candidates: list[PartCandidate] = []
        self.listening = False
        self.ai_loading = False
        self.notice = ""
        self._process_seq = 0

    # --- Voice capture ---

    def toggle_listening(self) -> bool:
        self.listening = not self.listening
        return self.listening

    def on_transcript(self, transcript: str, is_final: bool = True) -> None:
        """Append a final transcript chunk while listening."""
        if not self.listening or not is_final or not transcript.strip():
            return
        chunk = transcript.strip()
        self.text = f"{self.text} {chunk}" if self.text else chunk

    def on_listen_error(self, error: str) -> None:
        logger.warning("Speech recognition error: %s", error)
        self.listening = False

    # --- Extraction ---

    async def process(self) -> list[PartCandidate]:
        """Extract candidates from the current text, replacing the list."""
        if not self.text.strip():
            return self.candidates

        self._process_seq += 1
        token = self._process_seq
        self.ai_loading = True
        self.notice = ""

        candidates = await self._extractor.parse_many(self.text)

        if token != self._process_seq:
            logger.debug("Dropping superseded bulk extraction %d", token)
            return self.candidates

        self.ai_loading = False
        if not candidates:
            self.notice = NOTHING_RECOGNIZED_NOTICE
            return self.candidates

        self.candidates = [
            c.model_copy(update={"quantity": c.quantity if c.quantity is not None else 1})
            for c in candidates
        ]
        return self.candidates

    # --- Editing ---

    def remove(self, index: int) -> None:
        del self.candidates[index]

    def set_quantity(self, index: int, quantity: int) -> None:
        if quantity < 0:
            raise ValueError("quantity must be non-negative")
        self.candidates[index] = self.candidates[index].model_copy(
            update={"quantity": quantity}
        )

    # --- Commit ---

    async def save_all(self, store: PartStore) -> BulkCommitResult:
        """
        Commit all candidates; failed items stay in the list for a retry.
        """
        result = await store.bulk_commit(self.candidates)
        failed_indexes = {failure.index for failure in result.failures}
        self.candidates = [
            c for i, c in enumerate(self.candidates) if i in failed_indexes
        ]
        if not result.ok:
            self.notice = result.summary()
        return result
