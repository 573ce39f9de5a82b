"""
Tests for inventory models, drafts, the merge policy and the part form.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from repairdesk.domains.extraction.models import PartCandidate

from .bulk import AI_IMPORT_SOURCE, BulkImport, candidate_to_part
from .drafts import PartDraft, format_models_input, merge_candidate, parse_models_input
from .forms import AUTOFILL_FAILED_NOTICE, PartForm
from .models import Category, InventoryStats, Part, PartCondition


def make_candidate(**overrides) -> PartCandidate:
    data = {
        "name": "Дисплей iPhone 11",
        "category": Category.SCREEN,
        "condition": PartCondition.USED_EXCELLENT,
        "compatibility": ["iPhone 11"],
    }
    data.update(overrides)
    return PartCandidate(**data)


# --- Part Tests ---


def test_part_wire_format_is_camel_case() -> None:
    """Test parts serialize with camelCase keys."""
    part = Part(id="1", name="Акумулятор", price_buy=400, source_info="Донор")
    wire = part.to_wire()
    assert wire["priceBuy"] == 400
    assert wire["sourceInfo"] == "Донор"
    assert "dateAdded" in wire
    assert Part.model_validate(wire) == part


def test_part_rejects_negative_values() -> None:
    """Test non-negative constraints."""
    with pytest.raises(ValueError):
        Part(name="x", quantity=-1)
    with pytest.raises(ValueError):
        Part(name="x", price_sell=-5)


def test_part_matches_search_fields() -> None:
    """Test search covers name, compatible models and source."""
    part = Part(
        name="Корпус iPhone XR Black",
        compatibility=["iPhone XR"],
        source_info="Клієнт відмовився",
    )
    assert part.matches("корпус")
    assert part.matches("xr")
    assert part.matches("клієнт")
    assert part.matches("")
    assert not part.matches("samsung")


def test_part_matches_without_source() -> None:
    """Test parts without source info still search cleanly."""
    part = Part(name="Шлейф", compatibility=["iPhone 8", "iPhone 8"])
    assert not part.matches("донор")
    # Duplicates are kept
    assert part.compatibility == ["iPhone 8", "iPhone 8"]


def test_condition_labels() -> None:
    """Test every condition has a display label."""
    assert PartCondition.NEW.label == "Нова"
    assert PartCondition.FOR_PARTS.label == "На запчастини"
    assert all(c.label for c in PartCondition)
    assert not PartCondition.NEW.is_used
    assert PartCondition.USED_GOOD.is_used


# --- InventoryStats Tests ---


def test_inventory_stats() -> None:
    """Test dashboard aggregates."""
    parts = [
        Part(name="a", quantity=1, price_buy=1200, price_sell=2500,
             condition=PartCondition.USED_EXCELLENT),
        Part(name="b", quantity=5, price_buy=400, price_sell=900,
             condition=PartCondition.NEW),
        Part(name="c", quantity=0, price_buy=200, price_sell=600,
             condition=PartCondition.USED_DAMAGED),
    ]
    stats = InventoryStats.from_parts(parts, low_stock_threshold=1)

    assert stats.total_items == 6
    assert stats.total_value_buy == 1200 + 2000
    assert stats.total_value_sell == 2500 + 4500
    assert stats.used_count == 2
    assert stats.low_stock_count == 2
    assert stats.by_condition[PartCondition.NEW] == 1
    assert stats.potential_margin == stats.total_value_sell - stats.total_value_buy


def test_inventory_stats_empty() -> None:
    """Test aggregates over no parts."""
    stats = InventoryStats.from_parts([])
    assert stats.total_items == 0
    assert stats.by_condition == {}


# --- Draft Tests ---


def test_draft_defaults() -> None:
    """Test a new draft starts with quantity one and zero prices."""
    draft = PartDraft()
    assert draft.is_new
    assert draft.quantity == 1
    assert draft.price_buy == 0
    assert draft.category is Category.OTHER


def test_draft_to_part_new_gets_identity() -> None:
    """Test new drafts get an id and timestamp."""
    part = PartDraft(name=" Шлейф ").to_part()
    assert part.id
    assert part.date_added
    assert part.name == "Шлейф"
    assert part.source_info is None


def test_draft_roundtrip_keeps_identity() -> None:
    """Test editing keeps id and creation date."""
    original = Part(id="p1", name="Камера", date_added="2024-01-01T00:00:00+00:00")
    draft = PartDraft.from_part(original)
    assert not draft.is_new

    edited = draft.model_copy(update={"name": "Камера iPhone XR"}).to_part()
    assert edited.id == "p1"
    assert edited.date_added == "2024-01-01T00:00:00+00:00"


def test_models_input_helpers() -> None:
    """Test comma-separated model parsing keeps order and duplicates."""
    assert parse_models_input(" iPhone 11, ,iPhone 11 Pro,iPhone 11 ") == [
        "iPhone 11",
        "iPhone 11 Pro",
        "iPhone 11",
    ]
    assert format_models_input(["A", "B"]) == "A, B"
    assert parse_models_input("") == []


# --- Merge Policy Tests ---


def test_merge_keeps_draft_values_absent_from_extraction() -> None:
    """Test fields missing from the extraction keep draft values."""
    draft = PartDraft(
        quantity=3,
        price_buy=150,
        price_sell=300,
        location="A-01",
        source_info="Донор",
        description="Мій опис",
    )
    merged = merge_candidate(draft, make_candidate(), source_text="текст")

    assert merged.quantity == 3
    assert merged.price_buy == 150
    assert merged.price_sell == 300
    assert merged.location == "A-01"
    assert merged.source_info == "Донор"
    assert merged.description == "Мій опис"
    assert merged.name == "Дисплей iPhone 11"
    assert merged.category is Category.SCREEN


def test_merge_applies_explicit_zero() -> None:
    """Test an extracted zero overrides the draft value."""
    draft = PartDraft(quantity=4, price_buy=100, price_sell=200)
    merged = merge_candidate(
        draft, make_candidate(quantity=0, price_buy=0, price_sell=0)
    )

    assert merged.quantity == 0
    assert merged.price_buy == 0
    assert merged.price_sell == 0


def test_merge_applies_extracted_values() -> None:
    """Test present values override."""
    merged = merge_candidate(
        PartDraft(),
        make_candidate(quantity=2, price_sell=2500, description="Оригінал"),
    )
    assert merged.quantity == 2
    assert merged.price_sell == 2500
    assert merged.description == "Оригінал"
    assert merged.compatibility == ["iPhone 11"]


def test_merge_description_falls_back_to_source_text() -> None:
    """Test an empty draft description takes the source text."""
    merged = merge_candidate(PartDraft(), make_candidate(), source_text=" бу дисплей ")
    assert merged.description == "бу дисплей"


def test_merge_does_not_mutate_draft() -> None:
    """Test merge returns a new draft."""
    draft = PartDraft(compatibility=["old"])
    merge_candidate(draft, make_candidate(quantity=9))
    assert draft.quantity == 1
    assert draft.compatibility == ["old"]


# --- Bulk Defaults Tests ---


def test_candidate_to_part_defaults() -> None:
    """Test defaults for fields still missing at commit."""
    part = candidate_to_part(make_candidate(compatibility=[]))

    assert part.quantity == 1
    assert part.price_buy == 0
    assert part.price_sell == 0
    assert part.compatibility == []
    assert part.source_info == AI_IMPORT_SOURCE
    assert part.id and part.date_added


def test_candidate_to_part_keeps_given_values() -> None:
    """Test provided values survive and zero quantity becomes one."""
    part = candidate_to_part(
        make_candidate(quantity=3, price_buy=0, price_sell=700, source_info="IMEI 354")
    )
    assert part.quantity == 3
    assert part.price_sell == 700
    assert part.source_info == "IMEI 354"

    assert candidate_to_part(make_candidate(quantity=0)).quantity == 1


def test_candidate_to_part_fresh_ids() -> None:
    """Test each committed part gets its own id."""
    candidate = make_candidate()
    assert candidate_to_part(candidate).id != candidate_to_part(candidate).id


# --- PartForm Tests ---


@pytest.fixture
def mock_extractor() -> AsyncMock:
    mock = AsyncMock()
    mock.parse_one.return_value = make_candidate(quantity=2)
    mock.parse_many.return_value = []
    return mock


async def test_form_autofill_merges(mock_extractor: AsyncMock) -> None:
    """Test auto-fill merges into the draft and the models field."""
    form = PartForm(mock_extractor)
    assert await form.autofill("Дисплей iPhone 11 оригінал, 2 штуки") is True

    assert form.draft.quantity == 2
    assert form.draft.category is Category.SCREEN
    assert form.models_input == "iPhone 11"
    assert form.notice == ""
    assert not form.ai_loading


async def test_form_autofill_failure_sets_notice(mock_extractor: AsyncMock) -> None:
    """Test extraction failure leaves the draft and shows a notice."""
    mock_extractor.parse_one.return_value = None
    form = PartForm(mock_extractor)
    form.draft = form.draft.model_copy(update={"name": "Вручну"})

    assert await form.autofill("???") is False
    assert form.notice == AUTOFILL_FAILED_NOTICE
    assert form.draft.name == "Вручну"


async def test_form_autofill_blank_text(mock_extractor: AsyncMock) -> None:
    """Test blank text does nothing."""
    form = PartForm(mock_extractor)
    assert await form.autofill("  ") is False
    mock_extractor.parse_one.assert_not_called()


async def test_form_ignores_superseded_response() -> None:
    """Test a slow older response does not overwrite a newer one."""
    slow_release = asyncio.Event()

    async def parse_one(text: str) -> PartCandidate:
        if text == "slow":
            await slow_release.wait()
            return make_candidate(name="Старий", quantity=7)
        return make_candidate(name="Новий", quantity=1)

    extractor = AsyncMock()
    extractor.parse_one.side_effect = parse_one
    form = PartForm(extractor)

    slow = asyncio.create_task(form.autofill("slow"))
    await asyncio.sleep(0)
    assert await form.autofill("fast") is True
    slow_release.set()
    assert await slow is False

    assert form.draft.name == "Новий"
    assert form.draft.quantity == 1


def test_form_models_input_updates_draft(mock_extractor: AsyncMock) -> None:
    """Test editing the models field updates compatibility."""
    form = PartForm(mock_extractor)
    form.set_models_input("iPhone 11, iPhone 11")
    assert form.draft.compatibility == ["iPhone 11", "iPhone 11"]


def test_form_edit_mode(mock_extractor: AsyncMock) -> None:
    """Test forms opened on a part start from its values."""
    part = Part(id="p1", name="Камера", compatibility=["iPhone XR", "iPhone XS"])
    form = PartForm(mock_extractor, initial=part)
    assert form.is_editing
    assert form.models_input == "iPhone XR, iPhone XS"


# --- BulkImport Editing Tests ---


def test_bulk_voice_transcripts(mock_extractor: AsyncMock) -> None:
    """Test final transcripts append only while listening."""
    bulk = BulkImport(mock_extractor)
    bulk.on_transcript("ignored")
    assert bulk.text == ""

    assert bulk.toggle_listening() is True
    bulk.on_transcript("дисплей XR")
    bulk.on_transcript("проміжне", is_final=False)
    bulk.on_transcript("далі батарея")
    assert bulk.text == "дисплей XR далі батарея"

    bulk.on_listen_error("network")
    assert bulk.listening is False


async def test_bulk_process_and_edit(mock_extractor: AsyncMock) -> None:
    """Test processing fills candidates which can then be edited."""
    mock_extractor.parse_many.return_value = [
        make_candidate(name="A"),
        make_candidate(name="B", quantity=4),
    ]
    bulk = BulkImport(mock_extractor)
    bulk.text = "A далі B"

    candidates = await bulk.process()
    assert [c.quantity for c in candidates] == [1, 4]

    bulk.set_quantity(0, 3)
    bulk.remove(1)
    assert [(c.name, c.quantity) for c in bulk.candidates] == [("A", 3)]

    with pytest.raises(ValueError):
        bulk.set_quantity(0, -1)


async def test_bulk_process_nothing_recognized(mock_extractor: AsyncMock) -> None:
    """Test an empty extraction keeps the list and sets a notice."""
    bulk = BulkImport(mock_extractor)
    bulk.text = "шум"
    assert await bulk.process() == []
    assert bulk.notice
