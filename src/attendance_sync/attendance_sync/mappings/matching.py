"""Fuzzy scoring between a vendor employee and an internal user.

score = 0.6 * name_similarity + 0.4 * [emails equal]

name_similarity is ``1 - levenshtein(a, b) / max(len(a), len(b))`` on
lower-cased, whitespace-collapsed names. When either side has no email the
email signal is unavailable and the name similarity carries the full weight.
"""

from __future__ import annotations

from typing import Optional

from ..core.constants import EMAIL_WEIGHT, NAME_WEIGHT


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(current[j - 1] + 1, previous[j] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def normalize_name(value: Optional[str]) -> str:
    return " ".join((value or "").lower().split())


def string_similarity(a: str, b: str) -> float:
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def match_score(
    vendor_name: Optional[str],
    vendor_email: Optional[str],
    user_name: Optional[str],
    user_email: Optional[str],
) -> float:
    name_part = string_similarity(normalize_name(vendor_name), normalize_name(user_name))

    v_email = (vendor_email or "").strip().lower()
    u_email = (user_email or "").strip().lower()
    if not v_email or not u_email:
        return max(0.0, min(1.0, name_part))

    score = NAME_WEIGHT * name_part + (EMAIL_WEIGHT if v_email == u_email else 0.0)
    return max(0.0, min(1.0, score))
