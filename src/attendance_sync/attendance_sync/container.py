from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.aggregator import DayAggregator
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import AttendancePolicy
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceWriter
from .core.constants import DEFAULT_RETRY_DELAYS, DEFAULT_STREAM_ID, DEFAULT_SYNC_INTERVAL_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .mappings.mysql_employee_mapping_repository import MySQLEmployeeMappingRepository
from .mappings.repository import EmployeeMappingRepository
from .mappings.service import IdentityResolver, MatchingConfig
from .sync.mysql_sync_cursor_repository import MySQLSyncCursorRepository
from .sync.repository import SyncCursorRepository
from .sync.retry import RetryPolicy
from .sync.scheduler import SyncScheduler
from .sync.service import SyncService
from .users.mysql_user_repository import MySQLUserDirectory
from .users.repository import UserDirectory
from .vendor.adapter import VendorAdapter
from .vendor.client import TeamOfficeClient


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserDirectory
    mappings_repo: EmployeeMappingRepository
    attendance_repo: AttendanceRepository
    cursors_repo: SyncCursorRepository

    policy: AttendancePolicy
    client: TeamOfficeClient
    adapter: VendorAdapter

    identity_resolver: IdentityResolver
    aggregator: DayAggregator
    attendance_writer: AttendanceWriter
    sync_service: SyncService
    scheduler: SyncScheduler


def retry_policy_from_config(sync_config: dict) -> RetryPolicy:
    return RetryPolicy(
        max_retries=int(sync_config.get("max_retries", len(DEFAULT_RETRY_DELAYS))),
        base_delay=float(sync_config.get("retry_base_delay", DEFAULT_RETRY_DELAYS[0])),
    )


def build_container(
    *,
    db_config: dict,
    vendor_config: dict,
    sync_config: Optional[dict] = None,
    mapping_config: Optional[dict] = None,
) -> Container:
    sync_config = sync_config or {}
    mapping_config = mapping_config or {}

    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    policy = AttendancePolicy.from_dict(sync_config)

    users_repo = MySQLUserDirectory(conn)
    mappings_repo = MySQLEmployeeMappingRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn, policy)
    cursors_repo = MySQLSyncCursorRepository(conn)

    client = TeamOfficeClient.from_config(vendor_config)
    adapter = VendorAdapter(tz_name=policy.tz_name)
    identity_resolver = IdentityResolver(mappings_repo, users_repo, config=MatchingConfig.from_dict(mapping_config))
    aggregator = DayAggregator(policy)
    attendance_writer = AttendanceWriter(attendance_repo)

    sync_service = SyncService(
        client=client,
        adapter=adapter,
        resolver=identity_resolver,
        aggregator=aggregator,
        writer=attendance_writer,
        cursors=cursors_repo,
        retry=retry_policy_from_config(sync_config),
        backfill_endpoint=str(sync_config.get("backfill_endpoint", "inout")),
    )
    scheduler = SyncScheduler(
        sync_service,
        interval_minutes=float(sync_config.get("interval_minutes", DEFAULT_SYNC_INTERVAL_MINUTES)),
        stream_id=str(sync_config.get("stream_id", DEFAULT_STREAM_ID)),
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        mappings_repo=mappings_repo,
        attendance_repo=attendance_repo,
        cursors_repo=cursors_repo,
        policy=policy,
        client=client,
        adapter=adapter,
        identity_resolver=identity_resolver,
        aggregator=aggregator,
        attendance_writer=attendance_writer,
        sync_service=sync_service,
        scheduler=scheduler,
    )
