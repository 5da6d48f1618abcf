from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time
from typing import Callable, List, Optional

from ..attendance.aggregator import DayAggregator
from ..attendance.service import AttendanceWriter
from ..common.datetime_utils import iter_days, localize, now_local
from ..core.constants import DEFAULT_STREAM_ID, SOURCE_VENDOR, SYNC_ACTOR
from ..core.enums import PunchDirection, TickOutcome
from ..core.exceptions import DomainError, ValidationError, VendorMalformedResponse
from ..mappings.service import IdentityResolver
from ..vendor.adapter import VendorAdapter
from ..vendor.client import TeamOfficeClient
from ..vendor.model import NormalizedBatch, PunchEvent, VendorEmployee
from .cursor import CursorToken, max_token
from .model import BackfillResult, DayRunResult, IngestStats, TickResult
from .repository import SyncCursorRepository
from .retry import RetryCancelled, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

BACKFILL_ENDPOINTS = ("inout", "punch")


class SyncService:
    """One pipeline run: fetch -> normalize -> resolve -> aggregate -> merge.

    The cursor of a stream is only saved after every day of the batch has been
    written; any failure before that leaves it where it was, so the next tick
    re-reads the same window and the merge makes the replay harmless.
    """

    def __init__(
        self,
        *,
        client: TeamOfficeClient,
        adapter: VendorAdapter,
        resolver: IdentityResolver,
        aggregator: DayAggregator,
        writer: AttendanceWriter,
        cursors: SyncCursorRepository,
        retry: Optional[RetryPolicy] = None,
        clock: Optional[Callable[[], datetime]] = None,
        wait: Optional[Callable[[float], bool]] = None,
        backfill_endpoint: str = "inout",
    ):
        if backfill_endpoint not in BACKFILL_ENDPOINTS:
            raise ValidationError(f"backfill_endpoint must be one of {BACKFILL_ENDPOINTS}")

        self._client = client
        self._adapter = adapter
        self._resolver = resolver
        self._aggregator = aggregator
        self._writer = writer
        self._cursors = cursors
        self._retry = retry or RetryPolicy()
        self._tz_name = aggregator.policy.tz_name
        self._clock = clock or (lambda: now_local(self._tz_name))
        self._wait = wait
        self._backfill_endpoint = backfill_endpoint

    def now(self) -> datetime:
        return self._clock()

    # -- live ticks -----------------------------------------------------

    def run_tick(self, stream_id: str = DEFAULT_STREAM_ID, *, stop_event: Optional[threading.Event] = None) -> TickResult:
        result = TickResult(stream_id=stream_id, outcome=TickOutcome.FAILED, started_at=self.now())
        try:
            stored = self._cursors.get(stream_id)
            token = stored.token if stored else str(CursorToken.bootstrap(result.started_at))
            result.cursor_before = token
            result.cursor_after = token

            raw, result.attempts = call_with_retry(
                lambda: self._client.download_last_punch(token),
                self._retry,
                stop_event=stop_event,
                wait=self._wait,
            )
            batch = self._adapter.normalize_batch(raw)
            result.stats = self._ingest(batch)

            observed: List[Optional[str]] = list(batch.tokens)
            observed.extend(e.cursor_token for e in batch.events)
            new_token = max_token(token, observed)

            self._cursors.save(stream_id, new_token, self.now())
            result.cursor_after = new_token
            result.outcome = TickOutcome.SUCCEEDED
        except VendorMalformedResponse as e:
            # Undecodable body: nothing to ingest, the cursor stays put.
            logger.warning("Stream %s: malformed vendor response, treating as empty batch: %s", stream_id, e)
            result.attempts = max(result.attempts, 1)
            result.outcome = TickOutcome.SUCCEEDED
        except RetryCancelled as e:
            result.error = str(e)
            logger.warning("Stream %s: tick cancelled: %s", stream_id, e)
        except DomainError as e:
            result.error = str(e)
            logger.error("Stream %s: tick failed, cursor left at %s: %s", stream_id, result.cursor_before, e)
        except Exception as e:
            result.error = str(e)
            logger.exception("Stream %s: unexpected error during tick", stream_id)

        result.finished_at = self.now()
        if result.succeeded:
            logger.info(
                "Stream %s: fetched=%d days=%d unmapped=%d skipped=%d cursor %s -> %s",
                stream_id, result.stats.fetched, result.stats.days_written, result.stats.unmapped,
                result.stats.skipped_records, result.cursor_before, result.cursor_after,
            )
        return result

    # -- backfill ---------------------------------------------------------

    def backfill(
        self,
        start: date,
        end: date,
        *,
        stop_event: Optional[threading.Event] = None,
    ) -> BackfillResult:
        """Re-ingest every day in ``[start, end]``; a failing day is recorded and skipped.

        Backfill never touches a stream cursor.
        """

        if end < start:
            raise ValidationError("end date must not be before start date")

        result = BackfillResult(start=start, end=end)
        logger.info("Backfill %s..%s via %s endpoint", start, end, self._backfill_endpoint)

        for day in iter_days(start, end):
            if stop_event is not None and stop_event.is_set():
                result.cancelled = True
                logger.warning("Backfill cancelled before %s", day)
                break
            result.days.append(self._backfill_day(day, stop_event))

        if result.failed_days or result.cancelled:
            result.outcome = TickOutcome.FAILED
        logger.info(
            "Backfill %s..%s done: %d days, %d failed",
            start, end, len(result.days), len(result.failed_days),
        )
        return result

    def _backfill_day(self, day: date, stop_event: Optional[threading.Event]) -> DayRunResult:
        day_start = localize(datetime.combine(day, time(0, 0)), self._tz_name)
        day_end = localize(datetime.combine(day, time(23, 59)), self._tz_name)
        fetch = self._client.download_inout_range if self._backfill_endpoint == "inout" else self._client.download_punch_range

        try:
            try:
                raw, _ = call_with_retry(
                    lambda: fetch(day_start, day_end),
                    self._retry,
                    stop_event=stop_event,
                    wait=self._wait,
                )
            except VendorMalformedResponse as e:
                logger.warning("Backfill %s: malformed vendor response, treating as empty: %s", day, e)
                raw = []
            stats = self._ingest(self._adapter.normalize_batch(raw))
        except (DomainError, RetryCancelled) as e:
            logger.error("Backfill %s failed: %s", day, e)
            return DayRunResult(day=day, ok=False, error=str(e))
        except Exception as e:
            logger.exception("Backfill %s failed unexpectedly", day)
            return DayRunResult(day=day, ok=False, error=str(e))

        return DayRunResult(day=day, ok=True, stats=stats)

    # -- shared ingest path ---------------------------------------------

    def _ingest(self, batch: NormalizedBatch) -> IngestStats:
        stats = IngestStats(fetched=len(batch.events), skipped_records=batch.skipped)

        usable: List[PunchEvent] = []
        for event in batch.events:
            if event.direction == PunchDirection.UNKNOWN:
                stats.unknown_direction += 1
                continue
            usable.append(event)

        if not usable:
            return stats

        lookup = self._resolver.lookup()
        for day in self._aggregator.aggregate(usable):
            user_id = lookup.get(day.emp_code)
            if user_id is None:
                stats.unmapped += 1
                stats.unmapped_codes.append(day.emp_code)
                logger.warning("No mapping for vendor employee %s (%s); skipping %s", day.emp_code, day.emp_name, day.entry_date)
                continue
            record = day.to_record(user_id, source=SOURCE_VENDOR, modified_by=SYNC_ACTOR)
            self._writer.merge(user_id, day.entry_date, record)
            stats.days_written += 1
        return stats

    def fetch_employees(self) -> List[VendorEmployee]:
        raw, _ = call_with_retry(self._client.list_employees, self._retry, wait=self._wait)
        return self._adapter.normalize_employees(raw)
