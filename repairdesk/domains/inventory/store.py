"""
Part Store - Screen-level state for the inventory.

Holds the client's copy of the parts list and routes every mutation
through the repository, merging server responses back into local state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from repairdesk.config import NotFoundError, StorageError, SubmitInProgressError
from repairdesk.domains.extraction.models import NameSuggestion, PartCandidate

from .bulk import BulkCommitResult, BulkItemFailure, candidate_to_part
from .contracts import PartRepository
from .models import Category, InventoryStats, Part, utc_now_iso

logger = logging.getLogger(__name__)

__all__ = ["PartStore", "ReconcileReport"]


@dataclass
class ReconcileReport:
    """Outcome of applying normalization suggestions."""

    updated: list[Part] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def updated_count(self) -> int:
        return len(self.updated)

    @property
    def ok(self) -> bool:
        return not self.failures


class PartStore:
    """
    Inventory state with explicit read and write methods.

    Example:
        >>> store = PartStore(ShopAPIClient(settings.api_base_url))
        >>> await store.load()
        >>> await store.save(Part(name="Шлейф iPhone 8"))
        >>> store.stats().total_items
    """

    def __init__(self, repository: PartRepository, low_stock_threshold: int = 1) -> None:
        self._repository = repository
        self._parts: list[Part] = []
        self._load_seq = 0
        self.low_stock_threshold = low_stock_threshold
        self.saving = False

    # --- Reads ---

    @property
    def parts(self) -> list[Part]:
        return list(self._parts)

    def get(self, part_id: str) -> Part:
        for part in self._parts:
            if part.id == part_id:
                return part
        raise NotFoundError(f"Part {part_id} not found", {"id": part_id})

    def _index(self, part_id: str) -> int | None:
        for i, part in enumerate(self._parts):
            if part.id == part_id:
                return i
        return None

    def filter(self, search: str = "", category: Category | str | None = None) -> list[Part]:
        """Parts matching a search term and an optional category ("ALL" for any)."""
        if category == "ALL":
            category = None
        if category is not None:
            category = Category(category)
        return [
            p
            for p in self._parts
            if p.matches(search) and (category is None or p.category is category)
        ]

    def stats(self) -> InventoryStats:
        return InventoryStats.from_parts(self._parts, self.low_stock_threshold)

    # --- Sync ---

    async def load(self) -> bool:
        """
        Replace local state with the backend's list.

        Returns:
            False if a newer load started before this one finished
        """
        self._load_seq += 1
        token = self._load_seq
        parts = await self._repository.list_parts()
        if token != self._load_seq:
            logger.debug("Dropping superseded parts load %d", token)
            return False
        self._parts = parts
        logger.info("Loaded %d parts", len(parts))
        return True

    @contextmanager
    def _submitting(self) -> Iterator[None]:
        if self.saving:
            raise SubmitInProgressError()
        self.saving = True
        try:
            yield
        finally:
            self.saving = False

    # --- Writes ---

    async def save(self, part: Part) -> Part:
        """
        Create or update a part.

        Updates keep the stored id and creation date. Raises StorageError
        when the backend rejects the write; local state is left untouched.
        """
        with self._submitting():
            index = self._index(part.id)
            if index is None:
                saved = await self._repository.create_part(part)
                self._parts.insert(0, saved)
                self._supersede_loads()
                logger.info("Created part %s (%s)", saved.id, saved.name)
                return saved

            stored = self._parts[index]
            part = part.model_copy(update={"date_added": stored.date_added})
            saved = await self._repository.update_part(part)
            saved = saved.model_copy(
                update={"id": stored.id, "date_added": stored.date_added}
            )
            self._replace(saved)
            logger.info("Updated part %s", saved.id)
            return saved

    async def delete(self, part_id: str) -> None:
        self.get(part_id)
        await self._repository.delete_part(part_id)
        self._parts = [p for p in self._parts if p.id != part_id]
        self._supersede_loads()
        logger.info("Deleted part %s", part_id)

    def _supersede_loads(self) -> None:
        """Local state changed; any load still in flight carries older data."""
        self._load_seq += 1

    def _replace(self, part: Part) -> None:
        self._supersede_loads()
        index = self._index(part.id)
        if index is not None:
            self._parts[index] = part

    async def bulk_commit(self, candidates: list[PartCandidate]) -> BulkCommitResult:
        """
        Persist import candidates as new parts, one request per item.

        A failed item does not stop the others; the result lists each
        failure. An empty list issues no requests.
        """
        result = BulkCommitResult()
        if not candidates:
            return result

        with self._submitting():
            timestamp = utc_now_iso()
            for index, candidate in enumerate(candidates):
                part = candidate_to_part(candidate, date_added=timestamp)
                try:
                    saved = await self._repository.create_part(part)
                except StorageError as e:
                    logger.error("Bulk item %d (%s) failed: %s", index, part.name, e)
                    result.failures.append(BulkItemFailure(index, part, e.message))
                    continue
                result.created.append(saved)

        self._parts[:0] = result.created
        self._supersede_loads()
        logger.info(
            "Bulk commit: %d created, %d failed",
            len(result.created),
            len(result.failures),
        )
        return result

    async def apply_suggestions(self, suggestions: list[NameSuggestion]) -> ReconcileReport:
        """
        Apply normalization suggestions that actually change something.

        A suggestion equal to the stored name and category is a no-op: no
        request is sent and it is not counted as updated.
        """
        report = ReconcileReport()
        if not suggestions:
            return report

        with self._submitting():
            for suggestion in suggestions:
                index = self._index(suggestion.id)
                if index is None:
                    report.unknown.append(suggestion.id)
                    continue

                stored = self._parts[index]
                if (
                    suggestion.corrected_name == stored.name
                    and suggestion.corrected_category is stored.category
                ):
                    report.unchanged.append(stored.id)
                    continue

                changed = stored.model_copy(
                    update={
                        "name": suggestion.corrected_name,
                        "category": suggestion.corrected_category,
                    }
                )
                try:
                    saved = await self._repository.update_part(changed)
                except StorageError as e:
                    logger.error("Normalizing part %s failed: %s", stored.id, e)
                    report.failures[stored.id] = e.message
                    continue

                saved = saved.model_copy(
                    update={"id": stored.id, "date_added": stored.date_added}
                )
                self._replace(saved)
                report.updated.append(saved)

        logger.info(
            "Normalization: %d updated, %d unchanged, %d failed",
            report.updated_count,
            len(report.unchanged),
            len(report.failures),
        )
        return report
