from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.enums import TickOutcome


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sync/status", methods=["GET"], endpoint="sync_status")
    def sync_status():
        return jsonify({"success": True, **container.scheduler.status()}), 200

    @app.route("/api/sync/run", methods=["POST"], endpoint="sync_run")
    def sync_run():
        data = request.get_json(silent=True) or {}
        stream = (data.get("stream") or "").strip() or None

        result = container.scheduler.run_now(stream)
        if result.outcome == TickOutcome.SKIPPED:
            return jsonify({"success": False, "message": "Sync already running", **result.as_dict()}), 409
        if not result.succeeded:
            return jsonify({"success": False, "message": result.error or "Sync failed", **result.as_dict()}), 502
        return jsonify({"success": True, **result.as_dict()}), 200

    @app.route("/api/sync/backfill", methods=["POST"], endpoint="sync_backfill")
    def sync_backfill():
        data = request.get_json(silent=True) or {}
        start_s = (data.get("start") or "").strip()
        end_s = (data.get("end") or "").strip()
        if not start_s or not end_s:
            return jsonify({"success": False, "message": "start and end are required (YYYY-MM-DD)"}), 400
        try:
            start = parse_iso_date(start_s)
            end = parse_iso_date(end_s)
        except ValueError:
            return jsonify({"success": False, "message": "Dates must be YYYY-MM-DD"}), 400
        if end < start:
            return jsonify({"success": False, "message": "end date must not be before start date"}), 400

        result = container.scheduler.run_backfill(start, end)
        if result.outcome == TickOutcome.SKIPPED:
            return jsonify({"success": False, "message": "Backfill already running", **result.as_dict()}), 409
        return jsonify({"success": result.outcome == TickOutcome.SUCCEEDED, **result.as_dict()}), 200
