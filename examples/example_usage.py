"""Ví dụ: dùng service layer (không qua Flask).

Chạy một tick đồng bộ rồi in lịch sử chấm công của user 1 trong 7 ngày gần nhất.
"""

import importlib
from datetime import timedelta

from config import get_settings_module

from src.attendance_sync.attendance_sync.common.datetime_utils import now_local
from src.attendance_sync.attendance_sync.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        vendor_config=settings.VENDOR_CONFIG,
        sync_config=settings.SYNC_CONFIG,
        mapping_config=settings.MAPPING_CONFIG,
    )
    print(container.sync_service.run_tick().as_dict())

    today = now_local(container.policy.tz_name).date()
    for record in container.attendance_writer.history(1, start=today - timedelta(days=7), end=today):
        print(record.as_dict())


if __name__ == "__main__":
    main()
