"""Match TeamOffice employees to directory users and write a markdown report."""

from __future__ import annotations

import argparse
import importlib
import sys
from dataclasses import replace
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_sync.attendance_sync.common.logging_setup import configure_logging
from src.attendance_sync.attendance_sync.container import build_container
from src.attendance_sync.attendance_sync.mappings.service import render_report


def main() -> None:
    parser = argparse.ArgumentParser(description="Reconcile TeamOffice employees with directory users")
    parser.add_argument("--create-missing-users", action="store_true", help="provision users with no match")
    parser.add_argument("--report", type=Path, default=REPO_ROOT / "mapping-report.md", help="output file")
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
    config = container.identity_resolver.config
    if args.create_missing_users:
        config = replace(config, create_missing_users=True)

    employees = container.sync_service.fetch_employees()
    report = container.identity_resolver.reconcile(employees, config=config)

    args.report.write_text(render_report(report), encoding="utf-8")
    print(
        f"OK: processed={report.total_processed} auto={report.auto_mapped} "
        f"manual={report.manual_review} no_match={report.no_match} errors={report.errors} -> {args.report}"
    )
    if not report.success:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
