from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..core.enums import MappingDecision, ReconciliationOutcome


@dataclass(frozen=True)
class EmployeeMapping:
    """Vendor employee code -> internal user id.

    At most one active mapping exists per vendor code (unique key in the store).
    """

    emp_code: str
    user_id: int
    confidence: float
    is_active: bool = True
    vendor_name: Optional[str] = None
    vendor_email: Optional[str] = None
    created_at: Optional[datetime] = None
    mapping_id: Optional[int] = None

    def as_dict(self) -> dict:
        return {
            "emp_code": self.emp_code,
            "user_id": self.user_id,
            "confidence": round(self.confidence, 4),
            "is_active": self.is_active,
            "vendor_name": self.vendor_name,
            "vendor_email": self.vendor_email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class MappingCandidate:
    emp_code: str
    user_id: int
    name: str
    email: Optional[str]
    score: float
    decision: MappingDecision

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "match_score": round(self.score, 4),
            "decision": self.decision.value,
        }


@dataclass
class ReconciliationEntry:
    emp_code: str
    vendor_name: str
    outcome: ReconciliationOutcome
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    score: Optional[float] = None
    error: Optional[str] = None
    suggestions: List[MappingCandidate] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "emp_code": self.emp_code,
            "vendor_name": self.vendor_name,
            "status": self.outcome.value,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "match_score": round(self.score, 4) if self.score is not None else None,
            "error": self.error,
            "suggested_matches": [c.as_dict() for c in self.suggestions],
        }


@dataclass
class ReconciliationReport:
    success: bool = True
    total_processed: int = 0
    auto_mapped: int = 0
    manual_review: int = 0
    no_match: int = 0
    errors: int = 0
    entries: List[ReconciliationEntry] = field(default_factory=list)

    def by_outcome(self, outcome: ReconciliationOutcome) -> List[ReconciliationEntry]:
        return [e for e in self.entries if e.outcome == outcome]

    def as_dict(self) -> dict:
        return {
            "success": self.success,
            "total_processed": self.total_processed,
            "auto_mapped": self.auto_mapped,
            "manual_review": self.manual_review,
            "no_match": self.no_match,
            "errors": self.errors,
            "results": [e.as_dict() for e in self.entries],
        }
