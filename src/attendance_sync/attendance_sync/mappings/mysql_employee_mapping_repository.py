from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import EmployeeMapping
from .repository import EmployeeMappingRepository

_COLUMNS = "mapping_id, vendor_emp_code, vendor_name, vendor_email, user_id, confidence, is_active, created_at"


def _row_to_mapping(row: dict) -> EmployeeMapping:
    return EmployeeMapping(
        mapping_id=int(row["mapping_id"]),
        emp_code=row["vendor_emp_code"],
        user_id=int(row["user_id"]),
        confidence=float(row["confidence"]),
        is_active=as_bool(row.get("is_active")),
        vendor_name=row.get("vendor_name"),
        vendor_email=row.get("vendor_email"),
        created_at=row.get("created_at"),
    )


class MySQLEmployeeMappingRepository(EmployeeMappingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self, emp_code: str) -> Optional[EmployeeMapping]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employee_mappings WHERE vendor_emp_code=%s AND is_active=1",
                (emp_code,),
            )
            row = fetchone(cur)
            return _row_to_mapping(row) if row else None

    def list_active(self) -> Sequence[EmployeeMapping]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employee_mappings WHERE is_active=1 ORDER BY vendor_emp_code ASC"
            )
            return [_row_to_mapping(r) for r in fetchall(cur)]

    def create_if_absent(
        self,
        *,
        emp_code: str,
        user_id: int,
        confidence: float,
        vendor_name: Optional[str] = None,
        vendor_email: Optional[str] = None,
    ) -> bool:
        # MySQL evaluates the assignments left to right, so is_active goes last.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee_mappings(vendor_emp_code, vendor_name, vendor_email, user_id, confidence, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE
                    user_id = IF(is_active=1, user_id, VALUES(user_id)),
                    confidence = IF(is_active=1, confidence, VALUES(confidence)),
                    vendor_name = COALESCE(vendor_name, VALUES(vendor_name)),
                    vendor_email = COALESCE(vendor_email, VALUES(vendor_email)),
                    is_active = 1
                """,
                (emp_code, vendor_name, vendor_email, int(user_id), float(confidence)),
            )
            return cur.rowcount > 0

    def replace(
        self,
        *,
        emp_code: str,
        user_id: int,
        confidence: float,
        vendor_name: Optional[str] = None,
        vendor_email: Optional[str] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee_mappings(vendor_emp_code, vendor_name, vendor_email, user_id, confidence, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE
                    user_id = VALUES(user_id),
                    confidence = VALUES(confidence),
                    vendor_name = COALESCE(VALUES(vendor_name), vendor_name),
                    vendor_email = COALESCE(VALUES(vendor_email), vendor_email),
                    is_active = 1
                """,
                (emp_code, vendor_name, vendor_email, int(user_id), float(confidence)),
            )

    def deactivate(self, emp_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employee_mappings SET is_active=0 WHERE vendor_emp_code=%s AND is_active=1",
                (emp_code,),
            )
            return cur.rowcount > 0
