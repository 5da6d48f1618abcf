from __future__ import annotations

import threading
from datetime import date, datetime

import pytz

from src.attendance_sync.attendance_sync.core.enums import TickOutcome
from src.attendance_sync.attendance_sync.sync.model import BackfillResult, TickResult
from src.attendance_sync.attendance_sync.sync.scheduler import SyncScheduler

IST = pytz.timezone("Asia/Kolkata")
NOW = IST.localize(datetime(2025, 10, 8, 12, 0))


class BlockingService:
    """run_tick blocks until released, so a second request finds the stream busy."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.ticks = []

    def now(self):
        return NOW

    def run_tick(self, stream_id, *, stop_event=None):
        self.ticks.append(stream_id)
        self.entered.set()
        self.release.wait(5)
        return TickResult(stream_id=stream_id, outcome=TickOutcome.SUCCEEDED, started_at=NOW, finished_at=NOW)

    def backfill(self, start, end, *, stop_event=None):
        self.entered.set()
        self.release.wait(5)
        return BackfillResult(start=start, end=end)


def test_busy_stream_is_skipped_not_queued():
    service = BlockingService()
    scheduler = SyncScheduler(service)
    results = []

    worker = threading.Thread(target=lambda: results.append(scheduler.run_now()))
    worker.start()
    assert service.entered.wait(5)

    skipped = scheduler.run_now()
    service.release.set()
    worker.join(5)

    assert skipped.outcome == TickOutcome.SKIPPED
    assert results[0].outcome == TickOutcome.SUCCEEDED
    assert service.ticks == ["live"]


def test_distinct_streams_run_independently():
    service = BlockingService()
    service.release.set()
    scheduler = SyncScheduler(service)

    assert scheduler.run_now("live").succeeded
    assert scheduler.run_now("night").succeeded
    assert set(scheduler.status()["streams"]) == {"live", "night"}


def test_backfill_guard():
    service = BlockingService()
    scheduler = SyncScheduler(service)
    results = []

    worker = threading.Thread(target=lambda: results.append(scheduler.run_backfill(date(2025, 10, 1), date(2025, 10, 2))))
    worker.start()
    assert service.entered.wait(5)

    second = scheduler.run_backfill(date(2025, 10, 1), date(2025, 10, 2))
    service.release.set()
    worker.join(5)

    assert second.outcome == TickOutcome.SKIPPED
    assert results[0].outcome == TickOutcome.SUCCEEDED
    assert scheduler.status()["last_backfill"]["outcome"] == "succeeded"


def test_start_runs_immediately_and_stop_joins():
    service = BlockingService()
    service.release.set()
    scheduler = SyncScheduler(service, interval_minutes=60)

    scheduler.start()
    assert service.entered.wait(5)
    assert scheduler.running is True
    scheduler.stop(timeout=5)

    assert scheduler.running is False
    assert service.ticks[0] == "live"
    assert scheduler.status()["streams"]["live"]["outcome"] == "succeeded"


class RecordingService:
    """Records whether the stop event it was handed was already set."""

    def __init__(self):
        self.cancelled_on_entry = []

    def now(self):
        return NOW

    def run_tick(self, stream_id, *, stop_event=None):
        self.cancelled_on_entry.append(stop_event.is_set())
        return TickResult(stream_id=stream_id, outcome=TickOutcome.SUCCEEDED, started_at=NOW, finished_at=NOW)

    def backfill(self, start, end, *, stop_event=None):
        self.cancelled_on_entry.append(stop_event.is_set())
        return BackfillResult(start=start, end=end)


def test_explicit_runs_after_stop_are_not_cancelled():
    service = RecordingService()
    scheduler = SyncScheduler(service, interval_minutes=60)
    scheduler.start()
    scheduler.stop(timeout=5)
    service.cancelled_on_entry.clear()

    scheduler.run_now()
    scheduler.run_backfill(date(2025, 10, 1), date(2025, 10, 2))

    assert service.cancelled_on_entry == [False, False]
