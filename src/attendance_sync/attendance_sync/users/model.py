from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DirectoryUser:
    """Internal user as seen by the sync engine (fuzzy-match candidate)."""

    user_id: int
    full_name: str
    email: Optional[str]
    is_active: bool = True
