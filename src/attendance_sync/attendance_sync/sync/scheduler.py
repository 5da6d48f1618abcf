from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import Callable, Dict, Optional

from ..core.constants import BACKFILL_STREAM_ID, DEFAULT_STREAM_ID, DEFAULT_SYNC_INTERVAL_MINUTES
from ..core.enums import TickOutcome
from ..core.exceptions import ValidationError
from .model import BackfillResult, TickResult
from .service import SyncService

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Runs :meth:`SyncService.run_tick` every ``interval_minutes`` on a daemon thread.

    At most one run per stream is in flight; a request that finds its stream
    busy returns a ``skipped`` result instead of queueing.
    """

    def __init__(
        self,
        service: SyncService,
        *,
        interval_minutes: float = DEFAULT_SYNC_INTERVAL_MINUTES,
        stream_id: str = DEFAULT_STREAM_ID,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if interval_minutes <= 0:
            raise ValidationError("interval_minutes must be positive")
        self._service = service
        self._interval_seconds = float(interval_minutes) * 60.0
        self._stream_id = stream_id
        self._clock = clock or service.now

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._guards: Dict[str, threading.Lock] = {}
        self._guards_lock = threading.Lock()
        self._last: Dict[str, TickResult] = {}
        self._last_backfill: Optional[BackfillResult] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="attendance-sync", daemon=True)
        self._thread.start()
        logger.info("Sync scheduler started (stream=%s, every %.0fs)", self._stream_id, self._interval_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None
        logger.info("Sync scheduler stopped")

    def _loop(self) -> None:
        while not self._stop.is_set():
            self.run_now(stop_event=self._stop)
            if self._stop.wait(self._interval_seconds):
                break

    def _guard(self, stream_id: str) -> threading.Lock:
        with self._guards_lock:
            return self._guards.setdefault(stream_id, threading.Lock())

    def run_now(self, stream_id: Optional[str] = None, *, stop_event: Optional[threading.Event] = None) -> TickResult:
        """Run one tick now. Explicit runs get their own event, so they still
        back off and finish after :meth:`stop`; only the loop passes ``_stop``."""

        stream = stream_id or self._stream_id
        guard = self._guard(stream)
        if not guard.acquire(blocking=False):
            logger.info("Stream %s: tick already in flight, skipping", stream)
            now = self._clock()
            return TickResult(stream_id=stream, outcome=TickOutcome.SKIPPED, started_at=now, finished_at=now)
        try:
            result = self._service.run_tick(stream, stop_event=stop_event or threading.Event())
        finally:
            guard.release()
        self._last[stream] = result
        return result

    def run_backfill(
        self,
        start: date,
        end: date,
        *,
        stop_event: Optional[threading.Event] = None,
    ) -> BackfillResult:
        guard = self._guard(BACKFILL_STREAM_ID)
        if not guard.acquire(blocking=False):
            logger.info("Backfill already in flight, skipping %s..%s", start, end)
            return BackfillResult(start=start, end=end, outcome=TickOutcome.SKIPPED)
        try:
            result = self._service.backfill(start, end, stop_event=stop_event or threading.Event())
        finally:
            guard.release()
        self._last_backfill = result
        return result

    def status(self) -> dict:
        return {
            "running": self.running,
            "interval_minutes": self._interval_seconds / 60.0,
            "default_stream": self._stream_id,
            "streams": {sid: r.as_dict() for sid, r in sorted(self._last.items())},
            "last_backfill": self._last_backfill.as_dict() if self._last_backfill else None,
        }
