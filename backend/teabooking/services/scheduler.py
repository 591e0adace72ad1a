from __future__ import annotations

import asyncio
from datetime import datetime, time, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Optional

from teabooking.core.logging import get_logger

if TYPE_CHECKING:
    from teabooking.core.config import CleanupConfig
    from teabooking.repositories.bookings import BookingRepository

logger = get_logger(__name__)


def start_of_day(now: datetime, tz: Any) -> datetime:
    """Return local midnight of *now*'s day in *tz*, as an aware datetime."""
    local = now.astimezone(tz)
    return datetime.combine(local.date(), time(0, 0), tzinfo=tz)


def next_run_after(now: datetime, hour: int, minute: int, tz: Any) -> datetime:
    """Return the next occurrence of ``hour:minute`` in *tz* strictly after *now*."""
    local = now.astimezone(tz)
    candidate = datetime.combine(local.date(), time(hour, minute), tzinfo=tz)
    if candidate <= local:
        candidate = datetime.combine(
            local.date() + timedelta(days=1), time(hour, minute), tzinfo=tz
        )
    return candidate


async def cleanup_old_bookings(
    bookings: BookingRepository,
    tz: Any,
    now: Optional[datetime] = None,
) -> int:
    """Delete bookings created before the start of the current day in *tz*."""
    if now is None:
        now = datetime.now(timezone.utc)
    cutoff = start_of_day(now, tz)
    removed = await bookings.delete_created_before(cutoff.astimezone(timezone.utc))
    logger.info("Cleanup removed %d bookings created before %s", removed, cutoff.isoformat())
    return removed


class CleanupScheduler:
    """Runs the booking cleanup once a day at the configured local time.

    The loop lives in a single ``asyncio.Task`` that sleeps until the next
    run time, so a missed run (process down at midnight) is not replayed.
    """

    def __init__(
        self,
        config: CleanupConfig,
        bookings: BookingRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._config = config
        self._bookings = bookings
        self._clock = clock
        self._task: Optional[asyncio.Task[None]] = None
        self._running: bool = False
        self._next_run: Optional[datetime] = None
        self._last_removed: Optional[int] = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def next_run(self) -> Optional[datetime]:
        return self._next_run

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self._running:
            logger.warning("Cleanup scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._loop(), name="scheduler-booking-cleanup")
        logger.info(
            "Daily cleanup scheduled for %s (%s)",
            self._config.time,
            self._config.timezone,
        )

    async def stop(self) -> None:
        """Cancel the cleanup task and wait for it to finish."""
        if not self._running:
            return

        self._running = False
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        self._next_run = None
        logger.info("Cleanup scheduler stopped")

    async def run_once(self) -> int:
        removed = await cleanup_old_bookings(
            self._bookings, self._config.tzinfo, now=self._clock()
        )
        self._last_removed = removed
        return removed

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _loop(self) -> None:
        while self._running:
            now = self._clock()
            self._next_run = next_run_after(
                now, self._config.hour, self._config.minute, self._config.tzinfo
            )
            delay = (self._next_run - now).total_seconds()
            logger.debug("Next booking cleanup in %.0fs", delay)
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                return

            try:
                await self.run_once()
            except asyncio.CancelledError:
                return
            except Exception:
                logger.exception("Daily booking cleanup failed")

    def get_state(self) -> dict[str, Any]:
        return {
            "running": self._running,
            "next_run": self._next_run.isoformat() if self._next_run else None,
            "last_removed": self._last_removed,
        }
