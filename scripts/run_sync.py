"""Run one sync tick for a stream and print the result as JSON.

Exit code is non-zero when the tick failed (cursor left unchanged).
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

from src.attendance_sync.attendance_sync.common.logging_setup import configure_logging
from src.attendance_sync.attendance_sync.container import build_container
from src.attendance_sync.attendance_sync.core.constants import DEFAULT_STREAM_ID


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one TeamOffice sync tick")
    parser.add_argument("--stream", default=DEFAULT_STREAM_ID, help="sync stream id (default: %(default)s)")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=settings.DB_CONFIG,
        vendor_config=settings.VENDOR_CONFIG,
        sync_config=getattr(settings, "SYNC_CONFIG", {}),
        mapping_config=getattr(settings, "MAPPING_CONFIG", {}),
    )
    result = container.scheduler.run_now(args.stream)
    print(json.dumps(result.as_dict(), indent=2, ensure_ascii=False))
    if not result.succeeded:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
