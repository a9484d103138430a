from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from playgrounds.core.draft import BookingDraftStore
from playgrounds.core.schemas import Duration, VenueConfig
from playgrounds.core.slots import SLOTS_ERROR, SlotAvailabilityFetcher


def _store() -> BookingDraftStore:
    venue = VenueConfig(
        id="v1",
        price_per_hour=15,
        durations=[Duration(id="d60", minutes=60), Duration(id="d90", minutes=90)],
    )
    store = BookingDraftStore(venue)
    store.set_duration("d60")
    store.set_date("2026-03-01")
    return store


class ControlledBackend:
    """fetch_slots calls block until the test resolves them, in any order."""

    def __init__(self):
        self.pending: list[asyncio.Future] = []
        self.calls: list[tuple] = []

    async def fetch_slots(self, venue_id, date, duration_minutes):
        fut = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        self.calls.append((venue_id, date, duration_minutes))
        return await fut


@pytest.mark.asyncio
async def test_success_replaces_slot_list():
    store = _store()
    backend = AsyncMock()
    backend.fetch_slots = AsyncMock(
        return_value={"success": True, "data": [{"id": 1, "start_time": "18:00", "end_time": "19:00"}]}
    )
    fetcher = SlotAvailabilityFetcher(backend, store)

    applied = await fetcher.fetch("v1", "2026-03-01", 60)

    assert applied is True
    assert [s.id for s in store.slots] == ["1"]
    assert fetcher.loading is False
    assert fetcher.error is None
    backend.fetch_slots.assert_awaited_once_with("v1", "2026-03-01", 60)


@pytest.mark.asyncio
async def test_failure_clears_slots_and_keeps_schedule():
    store = _store()
    store.replace_slots([])
    backend = AsyncMock()
    backend.fetch_slots = AsyncMock(return_value={"success": False, "error": "boom"})
    fetcher = SlotAvailabilityFetcher(backend, store)

    await fetcher.fetch("v1", "2026-03-01", 60)

    assert store.slots == []
    assert fetcher.error == SLOTS_ERROR
    assert store.draft.date == "2026-03-01"
    assert store.draft.duration.id == "d60"


@pytest.mark.asyncio
async def test_exception_is_treated_as_failure():
    store = _store()
    backend = AsyncMock()
    backend.fetch_slots = AsyncMock(side_effect=RuntimeError("network down"))
    fetcher = SlotAvailabilityFetcher(backend, store)

    applied = await fetcher.fetch("v1", "2026-03-01", 60)

    assert applied is True
    assert fetcher.error == SLOTS_ERROR
    assert fetcher.loading is False


@pytest.mark.asyncio
async def test_stale_response_resolving_last_is_discarded():
    store = _store()
    backend = ControlledBackend()
    fetcher = SlotAvailabilityFetcher(backend, store)

    task_a = asyncio.create_task(fetcher.fetch("v1", "2026-03-01", 60))
    await asyncio.sleep(0)
    task_b = asyncio.create_task(fetcher.fetch("v1", "2026-03-02", 60))
    await asyncio.sleep(0)
    assert len(backend.pending) == 2

    # B resolves first, A resolves afterwards.
    backend.pending[1].set_result({"success": True, "data": [{"id": "b1", "start_time": "10:00"}]})
    assert await task_b is True
    backend.pending[0].set_result({"success": True, "data": [{"id": "a1", "start_time": "08:00"}]})
    assert await task_a is False

    assert [s.id for s in store.slots] == ["b1"]
    assert fetcher.loading is False


@pytest.mark.asyncio
async def test_stale_response_resolving_first_is_discarded():
    store = _store()
    backend = ControlledBackend()
    fetcher = SlotAvailabilityFetcher(backend, store)

    task_a = asyncio.create_task(fetcher.fetch("v1", "2026-03-01", 60))
    await asyncio.sleep(0)
    task_b = asyncio.create_task(fetcher.fetch("v1", "2026-03-01", 90))
    await asyncio.sleep(0)

    backend.pending[0].set_result({"success": True, "data": [{"id": "a1", "start_time": "08:00"}]})
    assert await task_a is False
    assert store.slots == []
    assert fetcher.loading is True

    backend.pending[1].set_result({"success": True, "data": [{"id": "b1", "start_time": "10:00"}]})
    assert await task_b is True
    assert [s.id for s in store.slots] == ["b1"]


@pytest.mark.asyncio
async def test_stale_failure_does_not_set_error():
    store = _store()
    backend = ControlledBackend()
    fetcher = SlotAvailabilityFetcher(backend, store)

    task_a = asyncio.create_task(fetcher.fetch("v1", "2026-03-01", 60))
    await asyncio.sleep(0)
    task_b = asyncio.create_task(fetcher.fetch("v1", "2026-03-02", 60))
    await asyncio.sleep(0)

    backend.pending[1].set_result({"success": True, "data": [{"id": "b1", "start_time": "10:00"}]})
    await task_b
    backend.pending[0].set_result({"success": False, "error": "late"})
    await task_a

    assert fetcher.error is None
    assert [s.id for s in store.slots] == ["b1"]


@pytest.mark.asyncio
async def test_close_drops_pending_response():
    store = _store()
    backend = ControlledBackend()
    fetcher = SlotAvailabilityFetcher(backend, store)

    task = asyncio.create_task(fetcher.fetch("v1", "2026-03-01", 60))
    await asyncio.sleep(0)
    fetcher.close()
    backend.pending[0].set_result({"success": True, "data": [{"id": "x", "start_time": "08:00"}]})

    assert await task is False
    assert store.slots == []
    assert await fetcher.fetch("v1", "2026-03-01", 60) is False
    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_invalidate_supersedes_in_flight_request():
    store = _store()
    backend = ControlledBackend()
    fetcher = SlotAvailabilityFetcher(backend, store)

    task = asyncio.create_task(fetcher.fetch("v1", "2026-03-01", 60))
    await asyncio.sleep(0)
    fetcher.invalidate()
    backend.pending[0].set_result({"success": True, "data": [{"id": "x", "start_time": "08:00"}]})

    assert await task is False
    assert fetcher.loading is False
