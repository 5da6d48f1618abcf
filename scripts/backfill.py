"""Re-ingest a closed date range day by day, e.g.

    python scripts/backfill.py --start 2025-10-01 --end 2025-10-07
"""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_sync.attendance_sync.common.datetime_utils import parse_iso_date
from src.attendance_sync.attendance_sync.common.logging_setup import configure_logging
from src.attendance_sync.attendance_sync.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description="Backfill attendance from TeamOffice")
    parser.add_argument("--start", required=True, type=parse_iso_date, help="first day, YYYY-MM-DD")
    parser.add_argument("--end", required=True, type=parse_iso_date, help="last day, YYYY-MM-DD")
    args = parser.parse_args()
    if args.end < args.start:
        parser.error("--end must not be before --start")

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=settings.DB_CONFIG,
        vendor_config=settings.VENDOR_CONFIG,
        sync_config=getattr(settings, "SYNC_CONFIG", {}),
        mapping_config=getattr(settings, "MAPPING_CONFIG", {}),
    )
    result = container.scheduler.run_backfill(args.start, args.end)
    print(json.dumps(result.as_dict(), indent=2, ensure_ascii=False))
    if result.failed_days:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
