"""
Tests for repair models, the intake draft and the repair store.
"""

from __future__ import annotations

import asyncio

import pytest

from repairdesk.config import NotFoundError, RecordBusyError, StorageError

from .contracts import RepairRepository
from .forms import RepairDraft
from .models import RepairOrder, RepairStatus, ServiceItem
from .store import RepairStore


class FakeRepairRepository:
    """In-memory backend with switchable failures."""

    def __init__(self, orders: list[RepairOrder] | None = None) -> None:
        self.rows = {o.id: o for o in orders or []}
        self.calls: list[tuple[str, str]] = []
        self.fail = False
        self.gate: asyncio.Event | None = None

    async def list_repairs(self) -> list[RepairOrder]:
        return list(self.rows.values())

    async def create_repair(self, order: RepairOrder) -> RepairOrder:
        self.calls.append(("create", order.id))
        if self.fail:
            raise StorageError("Failed to create repair")
        self.rows[order.id] = order
        return order

    async def update_repair_status(
        self, repair_id: str, status: RepairStatus
    ) -> RepairOrder | None:
        self.calls.append(("status", status.value))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise StorageError("Failed to update repair status")
        self.rows[repair_id] = self.rows[repair_id].model_copy(update={"status": status})
        return self.rows[repair_id]

    async def delete_repair(self, repair_id: str) -> None:
        self.calls.append(("delete", repair_id))
        self.rows.pop(repair_id, None)


@pytest.fixture
def repo() -> FakeRepairRepository:
    return FakeRepairRepository(
        [
            RepairOrder(
                id="r1",
                client_name="Олена",
                client_phone="+380501112233",
                device_brand="Apple",
                device_model="iPhone 12",
                device_sn_imei="354000111222333",
                status=RepairStatus.RECEIVED,
            ),
            RepairOrder(id="r2", client_name="Петро", device_model="Galaxy S21",
                        status=RepairStatus.READY),
        ]
    )


@pytest.fixture
async def store(repo: FakeRepairRepository) -> RepairStore:
    store = RepairStore(repo)
    await store.load()
    return store


def test_fake_repository_satisfies_contract(repo: FakeRepairRepository) -> None:
    assert isinstance(repo, RepairRepository)


# --- Model Tests ---


def test_repair_order_wire_format() -> None:
    """Test camelCase keys on the wire."""
    order = RepairOrder(
        client_name="Олена",
        device_sn_imei="354",
        services=[ServiceItem(name="Заміна дисплея", price=2500, cost=1200)],
        total_price=2500,
    )
    wire = order.to_wire()
    assert wire["clientName"] == "Олена"
    assert wire["deviceSnImei"] == "354"
    assert wire["totalPrice"] == 2500
    assert wire["services"][0] == {"name": "Заміна дисплея", "price": 2500, "cost": 1200}
    assert wire["status"] == "RECEIVED"


def test_status_labels_and_open_flag() -> None:
    assert RepairStatus.WAITING_PARTS.label == "Чекає запчастини"
    assert all(s.label for s in RepairStatus)
    assert RepairStatus.IN_PROGRESS.is_open
    assert not RepairStatus.CANCELLED.is_open


def test_repair_matches() -> None:
    order = RepairOrder(client_name="Олена", device_model="iPhone 12",
                        device_sn_imei="354000")
    assert order.matches("олена")
    assert order.matches("IPHONE")
    assert order.matches("354")
    assert not order.matches("samsung")


# --- Draft Tests ---


def test_draft_services_and_total() -> None:
    """Test service lines and running total."""
    draft = RepairDraft()
    assert draft.add_service("Заміна дисплея", price=2500, cost=1200)
    assert not draft.add_service("   ", price=100)
    assert draft.add_service("Чистка", price=300)
    assert draft.total == 2800

    draft.remove_service(1)
    assert [s.name for s in draft.services] == ["Заміна дисплея"]


def test_draft_total_is_snapshot() -> None:
    """Test the order total does not follow later service edits."""
    draft = RepairDraft(client_name="Олена")
    draft.add_service("Заміна дисплея", price=2500)
    order = draft.to_order()

    order.services.append(ServiceItem(name="Скло камери", price=400))
    draft.add_service("Ще", price=100)

    assert order.total_price == 2500
    assert order.client_name == "Олена"
    assert order.status is RepairStatus.RECEIVED
    assert order.id and order.date_received


# --- Store Tests ---


async def test_create(store: RepairStore, repo: FakeRepairRepository) -> None:
    draft = RepairDraft(client_name="Іван", device_model="Pixel 7")
    draft.add_service("Діагностика", price=200)

    order = await store.create(draft)

    assert store.orders[0].id == order.id
    assert order.total_price == 200
    assert store.saving is False


async def test_create_failure(store: RepairStore, repo: FakeRepairRepository) -> None:
    repo.fail = True
    with pytest.raises(StorageError):
        await store.create(RepairDraft(client_name="Іван"))
    assert len(store.orders) == 2
    assert store.saving is False


async def test_change_status(store: RepairStore, repo: FakeRepairRepository) -> None:
    order = await store.change_status("r1", RepairStatus.DIAGNOSTICS)
    assert order.status is RepairStatus.DIAGNOSTICS
    assert store.get("r1").status is RepairStatus.DIAGNOSTICS
    assert not store.is_pending("r1")


async def test_change_status_same_value_is_noop(
    store: RepairStore, repo: FakeRepairRepository
) -> None:
    await store.change_status("r2", RepairStatus.READY)
    assert repo.calls == []


async def test_change_status_reverts_on_failure(
    store: RepairStore, repo: FakeRepairRepository
) -> None:
    """Test a failed status change restores the previous status."""
    repo.fail = True
    with pytest.raises(StorageError):
        await store.change_status("r1", RepairStatus.COMPLETED)

    assert store.get("r1").status is RepairStatus.RECEIVED
    assert not store.is_pending("r1")


async def test_change_status_is_optimistic_and_locks_record(
    store: RepairStore, repo: FakeRepairRepository
) -> None:
    """Test the new status shows immediately and the record is locked."""
    repo.gate = asyncio.Event()
    repo.fail = True
    task = asyncio.create_task(store.change_status("r1", RepairStatus.IN_PROGRESS))
    await asyncio.sleep(0)

    assert store.get("r1").status is RepairStatus.IN_PROGRESS
    assert store.is_pending("r1")
    with pytest.raises(RecordBusyError):
        await store.change_status("r1", RepairStatus.READY)
    with pytest.raises(RecordBusyError):
        await store.delete("r1")

    # Other records stay editable
    await store.delete("r2")

    repo.gate.set()
    with pytest.raises(StorageError):
        await task
    assert store.get("r1").status is RepairStatus.RECEIVED


async def test_filter_and_counts(store: RepairStore) -> None:
    assert [o.id for o in store.filter("олена")] == ["r1"]
    assert [o.id for o in store.filter(status=RepairStatus.READY)] == ["r2"]
    assert len(store.filter(status="ALL")) == 2
    counts = store.counts_by_status()
    assert counts[RepairStatus.RECEIVED] == 1
    assert counts[RepairStatus.CANCELLED] == 0


async def test_delete_unknown(store: RepairStore) -> None:
    with pytest.raises(NotFoundError):
        await store.delete("missing")


async def test_change_status_reverts_on_unexpected_error(
    store: RepairStore, repo: FakeRepairRepository
) -> None:
    """Test a non-storage failure also restores the previous status."""

    async def broken(repair_id: str, status: RepairStatus) -> RepairOrder | None:
        raise RuntimeError("decoder exploded")

    repo.update_repair_status = broken  # type: ignore[method-assign]
    with pytest.raises(RuntimeError):
        await store.change_status("r1", RepairStatus.READY)

    assert store.get("r1").status is RepairStatus.RECEIVED
    assert not store.is_pending("r1")


async def test_load_in_flight_during_create_is_dropped(
    store: RepairStore, repo: FakeRepairRepository
) -> None:
    """Test a load that started before a create cannot erase the new order."""
    gate = asyncio.Event()
    snapshot = list(repo.rows.values())

    async def slow_list() -> list[RepairOrder]:
        await gate.wait()
        return snapshot

    repo.list_repairs = slow_list  # type: ignore[method-assign]
    loading = asyncio.create_task(store.load())
    await asyncio.sleep(0)

    order = await store.create(RepairDraft(client_name="Іван"))
    gate.set()

    assert await loading is False
    assert store.get(order.id).client_name == "Іван"
