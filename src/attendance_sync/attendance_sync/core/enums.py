from __future__ import annotations

from enum import Enum


class PunchDirection(str, Enum):
    """Hướng chấm công đã chuẩn hoá từ dữ liệu máy chấm công."""

    IN = "in"
    OUT = "out"
    UNKNOWN = "unknown"
    # Raw punch without a direction marker; the aggregator orders it by time.
    UNSPECIFIED = "unspecified"


class DayStatus(str, Enum):
    """Trạng thái ngày công, suy ra từ giờ vào/ra (không set độc lập)."""

    ABSENT = "absent"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MappingDecision(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    REJECT = "reject"


class ReconciliationOutcome(str, Enum):
    """Kết quả đối soát cho từng nhân viên phía vendor."""

    AUTO_MAPPED = "auto_mapped"
    MANUAL_REVIEW = "manual_review"
    NO_MATCH = "no_match"
    ALREADY_MAPPED = "already_mapped"
    ERROR = "error"


class TickOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
