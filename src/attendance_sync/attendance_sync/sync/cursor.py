"""Vendor incremental-fetch token ``MMyyyy$ID``.

Tokens order by (year, month, sequence). Comparing the sequence alone would
let a small id of a new month sort below a large id of the previous month.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from ..core.exceptions import ValidationError

_TOKEN_RE = re.compile(r"^(\d{2})(\d{4})\$(\d+)$")


@dataclass(frozen=True, order=True)
class CursorToken:
    year: int
    month: int
    sequence: int

    @classmethod
    def parse(cls, value: str) -> "CursorToken":
        m = _TOKEN_RE.match((value or "").strip())
        if not m:
            raise ValidationError(f"Invalid cursor token: {value!r}")
        month, year, seq = (int(g) for g in m.groups())
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid cursor month: {value!r}")
        return cls(year=year, month=month, sequence=seq)

    @classmethod
    def try_parse(cls, value: Optional[str]) -> Optional["CursorToken"]:
        if not value:
            return None
        try:
            return cls.parse(value)
        except ValidationError:
            return None

    @classmethod
    def bootstrap(cls, now: datetime) -> "CursorToken":
        return cls(year=now.year, month=now.month, sequence=0)

    def __str__(self) -> str:
        return f"{self.month:02d}{self.year:04d}${self.sequence}"


def max_token(current: str, observed: Iterable[Optional[str]]) -> str:
    """Highest of ``current`` and every well-formed token in ``observed``.

    Never returns something lower than ``current``; malformed tokens are ignored.
    """

    best_raw = current
    best = CursorToken.try_parse(current)
    for raw in observed:
        token = CursorToken.try_parse(raw)
        if token is None:
            continue
        if best is None or token > best:
            best = token
            best_raw = str(token)
    return best_raw
