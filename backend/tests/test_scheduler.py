from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from teabooking.core.config import CleanupConfig
from teabooking.core.storage import Storage
from teabooking.models.booking import BookingCreate
from teabooking.services.scheduler import (
    CleanupScheduler,
    cleanup_old_bookings,
    next_run_after,
    start_of_day,
)

KOLKATA = ZoneInfo("Asia/Kolkata")


async def _booking_at(storage: Storage, db, created_at: str) -> str:
    booking = await storage.bookings.add(
        BookingCreate(name="Alfred", phone="9876543210", location="Library")
    )
    await db.execute_write(
        "UPDATE bookings SET createdAt = ? WHERE id = ?", (created_at, booking.id)
    )
    return booking.id


def test_start_of_day_uses_local_date() -> None:
    # 20:00 UTC on the 1st is already 01:30 on the 2nd in Kolkata.
    now = datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc)
    cutoff = start_of_day(now, KOLKATA)
    assert cutoff == datetime(2024, 3, 2, 0, 0, tzinfo=KOLKATA)
    assert cutoff.astimezone(timezone.utc) == datetime(2024, 3, 1, 18, 30, tzinfo=timezone.utc)


def test_next_run_after() -> None:
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)  # 17:30 local
    assert next_run_after(now, 0, 0, KOLKATA) == datetime(2024, 3, 2, 0, 0, tzinfo=KOLKATA)
    assert next_run_after(now, 18, 0, KOLKATA) == datetime(2024, 3, 1, 18, 0, tzinfo=KOLKATA)

    exactly = datetime(2024, 3, 1, 18, 30, tzinfo=timezone.utc)  # 00:00 local on the 2nd
    assert next_run_after(exactly, 0, 0, KOLKATA) == datetime(2024, 3, 3, 0, 0, tzinfo=KOLKATA)


async def test_cleanup_removes_bookings_before_local_midnight(storage, db) -> None:
    yesterday = await _booking_at(storage, db, "2024-03-01T18:29:59.999Z")
    today = await _booking_at(storage, db, "2024-03-01T18:30:00.000Z")

    now = datetime(2024, 3, 2, 5, 0, tzinfo=timezone.utc)
    removed = await cleanup_old_bookings(storage.bookings, KOLKATA, now=now)

    assert removed == 1
    assert await storage.bookings.get_by_id(yesterday) is None
    assert await storage.bookings.get_by_id(today) is not None


async def test_scheduler_run_once_uses_clock(storage, db, clock) -> None:
    old = await _booking_at(storage, db, "2024-01-14T10:00:00.000Z")
    scheduler = CleanupScheduler(CleanupConfig(), storage.bookings, clock=clock)

    assert await scheduler.run_once() == 1
    assert await storage.bookings.get_by_id(old) is None
    assert scheduler.get_state()["last_removed"] == 1


async def test_scheduler_start_and_stop(storage, clock) -> None:
    scheduler = CleanupScheduler(CleanupConfig(time="03:15"), storage.bookings, clock=clock)

    await scheduler.start()
    assert scheduler.is_running
    await scheduler.stop()

    assert not scheduler.is_running
    assert scheduler.next_run is None


async def test_scheduler_keeps_running_after_unexpected_error(storage, monkeypatch) -> None:
    calls = 0

    async def explode(cutoff):
        nonlocal calls
        calls += 1
        raise RuntimeError("unexpected")

    monkeypatch.setattr(storage.bookings, "delete_created_before", explode)
    # 50ms before midnight UTC, with a clock that never moves, every loop
    # iteration sleeps briefly and runs again.
    just_before_midnight = datetime(2024, 1, 15, 23, 59, 59, 950000, tzinfo=timezone.utc)
    scheduler = CleanupScheduler(
        CleanupConfig(time="00:00", timezone="UTC"),
        storage.bookings,
        clock=lambda: just_before_midnight,
    )

    await scheduler.start()
    await asyncio.sleep(0.3)
    try:
        assert calls >= 2
        assert scheduler.is_running
        assert not scheduler._task.done()
    finally:
        await scheduler.stop()
