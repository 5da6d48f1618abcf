from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import localize
from ..core.constants import DEFAULT_LATE_CUTOFF, DEFAULT_TIMEZONE


@dataclass(frozen=True)
class AttendancePolicy:
    """Business constants used when folding punches into a day."""

    late_cutoff: time = DEFAULT_LATE_CUTOFF
    tz_name: str = DEFAULT_TIMEZONE

    @classmethod
    def from_dict(cls, values: dict) -> "AttendancePolicy":
        cutoff = values.get("late_cutoff", DEFAULT_LATE_CUTOFF)
        if isinstance(cutoff, str):
            cutoff = datetime.strptime(cutoff, "%H:%M").time()
        return cls(late_cutoff=cutoff, tz_name=str(values.get("timezone", DEFAULT_TIMEZONE)))

    def is_late(self, check_in_at: Optional[datetime]) -> bool:
        """Late when the local check-in minute is past the cutoff (10:45:59 is not late)."""

        if check_in_at is None:
            return False
        local = localize(check_in_at, self.tz_name)
        return local.time().replace(second=0, microsecond=0) > self.late_cutoff
