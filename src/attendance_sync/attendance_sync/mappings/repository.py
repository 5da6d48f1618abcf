from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import EmployeeMapping


class EmployeeMappingRepository(Protocol):
    def get_active(self, emp_code: str) -> Optional[EmployeeMapping]:
        raise NotImplementedError

    def list_active(self) -> Sequence[EmployeeMapping]:
        raise NotImplementedError

    def create_if_absent(
        self,
        *,
        emp_code: str,
        user_id: int,
        confidence: float,
        vendor_name: Optional[str] = None,
        vendor_email: Optional[str] = None,
    ) -> bool:
        """Create (or re-activate) a mapping unless an active one exists.

        Returns True when a row was written. Must be safe to call concurrently.
        """

        raise NotImplementedError

    def replace(
        self,
        *,
        emp_code: str,
        user_id: int,
        confidence: float,
        vendor_name: Optional[str] = None,
        vendor_email: Optional[str] = None,
    ) -> None:
        """Manual override: point the code at ``user_id`` regardless of state."""

        raise NotImplementedError

    def deactivate(self, emp_code: str) -> bool:
        raise NotImplementedError
