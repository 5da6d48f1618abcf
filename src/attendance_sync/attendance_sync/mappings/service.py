from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.validators import require_non_empty, require_unit_interval
from ..core.constants import DEFAULT_AUTO_MAP_THRESHOLD, DEFAULT_MIN_MATCH_SCORE, DEFAULT_SUGGESTION_LIMIT
from ..core.enums import MappingDecision, ReconciliationOutcome
from ..core.exceptions import ValidationError
from ..users.model import DirectoryUser
from ..users.repository import UserDirectory
from ..vendor.model import VendorEmployee
from .matching import match_score
from .model import EmployeeMapping, MappingCandidate, ReconciliationEntry, ReconciliationReport
from .repository import EmployeeMappingRepository

logger = logging.getLogger(__name__)

Scorer = Callable[[VendorEmployee, DirectoryUser], float]


def default_scorer(employee: VendorEmployee, user: DirectoryUser) -> float:
    return match_score(employee.name, employee.email, user.full_name, user.email)


@dataclass(frozen=True)
class MatchingConfig:
    min_match_score: float = DEFAULT_MIN_MATCH_SCORE
    auto_map_threshold: float = DEFAULT_AUTO_MAP_THRESHOLD
    create_missing_users: bool = False
    suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT
    email_domain: str = "attendance.local"

    def __post_init__(self):
        require_unit_interval(self.min_match_score, "min_match_score")
        require_unit_interval(self.auto_map_threshold, "auto_map_threshold")
        if self.min_match_score > self.auto_map_threshold:
            raise ValidationError("min_match_score must not exceed auto_map_threshold")
        if self.suggestion_limit < 1:
            raise ValidationError("suggestion_limit must be positive")

    @classmethod
    def from_dict(cls, values: dict) -> "MatchingConfig":
        return cls(
            min_match_score=float(values.get("min_match_score", DEFAULT_MIN_MATCH_SCORE)),
            auto_map_threshold=float(values.get("auto_map_threshold", DEFAULT_AUTO_MAP_THRESHOLD)),
            create_missing_users=bool(values.get("create_missing_users", False)),
            suggestion_limit=int(values.get("suggestion_limit", DEFAULT_SUGGESTION_LIMIT)),
            email_domain=str(values.get("email_domain", "attendance.local")),
        )

    def classify(self, score: float) -> MappingDecision:
        if score >= self.auto_map_threshold:
            return MappingDecision.AUTO
        if score >= self.min_match_score:
            return MappingDecision.MANUAL
        return MappingDecision.REJECT


class MappingLookup:
    """Snapshot of active mappings for one tick (exact path, O(1) per code)."""

    def __init__(self, mappings: Sequence[EmployeeMapping]):
        self._by_code: Dict[str, EmployeeMapping] = {m.emp_code: m for m in mappings if m.is_active}

    def get(self, emp_code: str) -> Optional[int]:
        mapping = self._by_code.get(emp_code)
        return mapping.user_id if mapping else None

    def __contains__(self, emp_code: str) -> bool:
        return emp_code in self._by_code

    def __len__(self) -> int:
        return len(self._by_code)


class IdentityResolver:
    """Resolve vendor employee codes to internal user ids.

    Two paths:

    - exact: :meth:`resolve` / :meth:`lookup` read active mappings only;
    - bulk: :meth:`reconcile` scores unmapped vendor employees against the
      directory and auto-maps, queues for review, or reports no match.
    """

    def __init__(
        self,
        mappings: EmployeeMappingRepository,
        users: UserDirectory,
        *,
        config: Optional[MatchingConfig] = None,
        scorer: Optional[Scorer] = None,
        password_hasher: Callable[[str], str] = generate_password_hash,
    ):
        self._mappings = mappings
        self._users = users
        self._config = config or MatchingConfig()
        self._scorer = scorer or default_scorer
        self._password_hasher = password_hasher

    @property
    def config(self) -> MatchingConfig:
        return self._config

    # -- exact path -----------------------------------------------------

    def resolve(self, emp_code: str) -> Optional[int]:
        mapping = self._mappings.get_active(emp_code)
        return mapping.user_id if mapping else None

    def lookup(self) -> MappingLookup:
        return MappingLookup(self._mappings.list_active())

    def list_mappings(self) -> Sequence[EmployeeMapping]:
        return self._mappings.list_active()

    # -- bulk reconciliation --------------------------------------------

    def rank_candidates(
        self,
        employee: VendorEmployee,
        users: Sequence[DirectoryUser],
        *,
        config: Optional[MatchingConfig] = None,
    ) -> List[MappingCandidate]:
        """Candidates scoring at least ``min_match_score``, best first.

        Ties are broken alphabetically by candidate name, then by user id.
        """

        cfg = config or self._config
        candidates: List[MappingCandidate] = []
        for user in users:
            if not user.is_active:
                continue
            score = max(0.0, min(1.0, float(self._scorer(employee, user))))
            if score < cfg.min_match_score:
                continue
            candidates.append(
                MappingCandidate(
                    emp_code=employee.emp_code,
                    user_id=user.user_id,
                    name=user.full_name,
                    email=user.email,
                    score=score,
                    decision=cfg.classify(score),
                )
            )
        candidates.sort(key=lambda c: (-c.score, c.name.lower(), c.user_id))
        return candidates

    def reconcile(
        self,
        employees: Sequence[VendorEmployee],
        *,
        config: Optional[MatchingConfig] = None,
    ) -> ReconciliationReport:
        cfg = config or self._config
        report = ReconciliationReport()

        users = list(self._users.list_active())
        mapped_codes = {m.emp_code for m in self._mappings.list_active()}
        logger.info(
            "Reconciling %d vendor employees against %d users (%d already mapped)",
            len(employees), len(users), len(mapped_codes),
        )

        for employee in employees:
            report.total_processed += 1

            if employee.emp_code in mapped_codes:
                report.entries.append(
                    ReconciliationEntry(
                        emp_code=employee.emp_code,
                        vendor_name=employee.name,
                        outcome=ReconciliationOutcome.ALREADY_MAPPED,
                    )
                )
                continue

            try:
                entry = self._reconcile_one(employee, users, cfg)
            except Exception as e:
                logger.exception("Reconciliation failed for %s", employee.emp_code)
                entry = ReconciliationEntry(
                    emp_code=employee.emp_code,
                    vendor_name=employee.name,
                    outcome=ReconciliationOutcome.ERROR,
                    error=str(e),
                )

            if entry.outcome == ReconciliationOutcome.AUTO_MAPPED:
                report.auto_mapped += 1
                mapped_codes.add(employee.emp_code)
            elif entry.outcome == ReconciliationOutcome.MANUAL_REVIEW:
                report.manual_review += 1
            elif entry.outcome == ReconciliationOutcome.NO_MATCH:
                report.no_match += 1
            elif entry.outcome == ReconciliationOutcome.ERROR:
                report.errors += 1
            report.entries.append(entry)

        report.success = report.errors == 0
        logger.info(
            "Reconciliation done: processed=%d auto=%d manual=%d no_match=%d errors=%d",
            report.total_processed, report.auto_mapped, report.manual_review, report.no_match, report.errors,
        )
        return report

    def _reconcile_one(
        self,
        employee: VendorEmployee,
        users: List[DirectoryUser],
        cfg: MatchingConfig,
    ) -> ReconciliationEntry:
        ranked = self.rank_candidates(employee, users, config=cfg)
        suggestions = ranked[: cfg.suggestion_limit]
        best = ranked[0] if ranked else None

        if best is not None and best.decision == MappingDecision.AUTO:
            # Two candidates both above the auto threshold: a human has to pick.
            ambiguous = len(ranked) > 1 and ranked[1].decision == MappingDecision.AUTO
            if not ambiguous:
                self._mappings.create_if_absent(
                    emp_code=employee.emp_code,
                    user_id=best.user_id,
                    confidence=best.score,
                    vendor_name=employee.name,
                    vendor_email=employee.email,
                )
                logger.info("Auto-mapped %s (%s) -> %s (%.2f)", employee.name, employee.emp_code, best.name, best.score)
                return ReconciliationEntry(
                    emp_code=employee.emp_code,
                    vendor_name=employee.name,
                    outcome=ReconciliationOutcome.AUTO_MAPPED,
                    user_id=best.user_id,
                    user_name=best.name,
                    score=best.score,
                )

        if best is not None:
            logger.info("Manual review needed for %s (%s); best %s (%.2f)", employee.name, employee.emp_code, best.name, best.score)
            return ReconciliationEntry(
                emp_code=employee.emp_code,
                vendor_name=employee.name,
                outcome=ReconciliationOutcome.MANUAL_REVIEW,
                user_id=best.user_id,
                user_name=best.name,
                score=best.score,
                suggestions=suggestions,
            )

        if cfg.create_missing_users:
            user_id = self._provision_user(employee, cfg)
            self._mappings.create_if_absent(
                emp_code=employee.emp_code,
                user_id=user_id,
                confidence=1.0,
                vendor_name=employee.name,
                vendor_email=employee.email,
            )
            users.append(DirectoryUser(user_id=user_id, full_name=employee.name, email=self._provisioned_email(employee, cfg)))
            logger.info("Provisioned user %s for %s (%s)", user_id, employee.name, employee.emp_code)
            return ReconciliationEntry(
                emp_code=employee.emp_code,
                vendor_name=employee.name,
                outcome=ReconciliationOutcome.AUTO_MAPPED,
                user_id=user_id,
                user_name=employee.name,
                score=1.0,
            )

        return ReconciliationEntry(
            emp_code=employee.emp_code,
            vendor_name=employee.name,
            outcome=ReconciliationOutcome.NO_MATCH,
        )

    @staticmethod
    def _provisioned_email(employee: VendorEmployee, cfg: MatchingConfig) -> str:
        compact = "".join(employee.name.lower().split())
        return f"{compact}{employee.emp_code}@{cfg.email_domain}"

    def _provision_user(self, employee: VendorEmployee, cfg: MatchingConfig) -> int:
        full_name = require_non_empty(employee.name, "Employee name")
        email = self._provisioned_email(employee, cfg)

        existing = self._users.get_by_email(email)
        if existing:
            return existing.user_id

        return self._users.create_user(
            full_name=full_name,
            email=email,
            password_hash=self._password_hasher(secrets.token_urlsafe(16)),
        )

    # -- manual operations ----------------------------------------------

    def approve(self, emp_code: str, user_id: int, *, vendor_name: Optional[str] = None) -> EmployeeMapping:
        emp_code = require_non_empty(emp_code, "Employee code")
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            raise ValidationError(f"User {user_id} does not exist or is inactive")

        self._mappings.replace(emp_code=emp_code, user_id=user.user_id, confidence=1.0, vendor_name=vendor_name)
        logger.info("Manually mapped %s -> %s", emp_code, user.user_id)
        return EmployeeMapping(emp_code=emp_code, user_id=user.user_id, confidence=1.0, vendor_name=vendor_name)

    def deactivate(self, emp_code: str) -> bool:
        return self._mappings.deactivate(require_non_empty(emp_code, "Employee code"))


def render_report(report: ReconciliationReport) -> str:
    lines = [
        "# Employee Mapping Report",
        "",
        f"- Total processed: {report.total_processed}",
        f"- Auto-mapped: {report.auto_mapped}",
        f"- Manual review: {report.manual_review}",
        f"- No match: {report.no_match}",
        f"- Errors: {report.errors}",
    ]

    review = report.by_outcome(ReconciliationOutcome.MANUAL_REVIEW)
    if review:
        lines += ["", "## Manual review required", ""]
        for entry in review:
            lines.append(f"### {entry.vendor_name} ({entry.emp_code})")
            for c in entry.suggestions:
                lines.append(f"- {c.name} [{c.user_id}] {c.score * 100:.1f}%")
            lines.append("")

    missing = report.by_outcome(ReconciliationOutcome.NO_MATCH)
    if missing:
        lines += ["", "## No matches found", ""]
        lines += [f"- {e.vendor_name} ({e.emp_code})" for e in missing]

    failed = report.by_outcome(ReconciliationOutcome.ERROR)
    if failed:
        lines += ["", "## Errors", ""]
        lines += [f"- {e.vendor_name} ({e.emp_code}): {e.error}" for e in failed]

    return "\n".join(lines).rstrip() + "\n"
