from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/<int:user_id>", methods=["GET"], endpoint="attendance_history")
    def attendance_history(user_id: int):
        today = now_local(container.policy.tz_name).date()
        try:
            start = parse_iso_date(request.args.get("start") or (today - timedelta(days=30)).strftime("%Y-%m-%d"))
            end = parse_iso_date(request.args.get("end") or today.strftime("%Y-%m-%d"))
        except ValueError:
            return jsonify({"success": False, "message": "Dates must be YYYY-MM-DD"}), 400

        try:
            records = container.attendance_writer.history(user_id, start=start, end=end)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400

        return jsonify(
            {
                "success": True,
                "user_id": user_id,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "records": [r.as_dict() for r in records],
            }
        ), 200
