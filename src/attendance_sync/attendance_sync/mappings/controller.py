from __future__ import annotations

import logging
from dataclasses import replace

from flask import Flask, jsonify, request

from ..common.validators import parse_bool
from ..container import Container
from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/mappings", methods=["GET"], endpoint="mappings_list")
    def mappings_list():
        mappings = container.identity_resolver.list_mappings()
        return jsonify({"success": True, "mappings": [m.as_dict() for m in mappings]}), 200

    @app.route("/api/mappings/reconcile", methods=["POST"], endpoint="mappings_reconcile")
    def mappings_reconcile():
        data = request.get_json(silent=True) or {}
        base = container.identity_resolver.config
        try:
            config = replace(
                base,
                min_match_score=float(data.get("min_match_score", base.min_match_score)),
                auto_map_threshold=float(data.get("auto_map_threshold", base.auto_map_threshold)),
                create_missing_users=parse_bool(data.get("create_missing_users", base.create_missing_users), "create_missing_users"),
            )
        except (TypeError, ValueError, ValidationError) as e:
            return jsonify({"success": False, "message": str(e)}), 400

        try:
            employees = container.sync_service.fetch_employees()
        except DomainError as e:
            logger.error("Cannot fetch vendor employee list: %s", e)
            return jsonify({"success": False, "message": str(e)}), 502

        report = container.identity_resolver.reconcile(employees, config=config)
        return jsonify(report.as_dict()), 200

    @app.route("/api/mappings/approve", methods=["POST"], endpoint="mappings_approve")
    def mappings_approve():
        data = request.get_json(silent=True) or {}
        emp_code = str(data.get("emp_code") or "").strip()
        try:
            user_id = int(data.get("user_id"))
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "user_id must be an integer"}), 400

        try:
            mapping = container.identity_resolver.approve(emp_code, user_id, vendor_name=data.get("vendor_name"))
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        return jsonify({"success": True, "mapping": mapping.as_dict()}), 200
