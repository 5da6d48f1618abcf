from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..core.enums import TickOutcome


@dataclass(frozen=True)
class SyncCursor:
    stream_id: str
    token: str
    last_sync_at: Optional[datetime] = None


@dataclass
class IngestStats:
    fetched: int = 0
    skipped_records: int = 0
    unknown_direction: int = 0
    unmapped: int = 0
    days_written: int = 0
    unmapped_codes: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "fetched": self.fetched,
            "skipped_records": self.skipped_records,
            "unknown_direction": self.unknown_direction,
            "unmapped": self.unmapped,
            "unmapped_codes": sorted(set(self.unmapped_codes)),
            "days_written": self.days_written,
        }


@dataclass
class TickResult:
    stream_id: str
    outcome: TickOutcome
    started_at: datetime
    finished_at: Optional[datetime] = None
    cursor_before: Optional[str] = None
    cursor_after: Optional[str] = None
    attempts: int = 0
    stats: IngestStats = field(default_factory=IngestStats)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == TickOutcome.SUCCEEDED

    def as_dict(self) -> dict:
        return {
            "stream_id": self.stream_id,
            "outcome": self.outcome.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "cursor_before": self.cursor_before,
            "cursor_after": self.cursor_after,
            "attempts": self.attempts,
            "error": self.error,
            **self.stats.as_dict(),
        }


@dataclass
class DayRunResult:
    day: date
    ok: bool
    stats: IngestStats = field(default_factory=IngestStats)
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {"day": self.day.isoformat(), "ok": self.ok, "error": self.error, **self.stats.as_dict()}


@dataclass
class BackfillResult:
    start: date
    end: date
    outcome: TickOutcome = TickOutcome.SUCCEEDED
    days: List[DayRunResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failed_days(self) -> List[date]:
        return [d.day for d in self.days if not d.ok]

    def as_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "outcome": self.outcome.value,
            "cancelled": self.cancelled,
            "failed_days": [d.isoformat() for d in self.failed_days],
            "days": [d.as_dict() for d in self.days],
        }
