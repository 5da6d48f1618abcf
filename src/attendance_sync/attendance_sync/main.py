from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_setup import configure_logging
from .container import Container, build_container
from .core.exceptions import DomainError, ValidationError
from .mappings.controller import register as register_mappings
from .sync.controller import register as register_sync

logger = logging.getLogger(__name__)


def load_settings():
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        logger.error("Request failed: %s", e)
        return jsonify({"success": False, "message": str(e)}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    sync_config = dict(getattr(settings, "SYNC_CONFIG", {}))
    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            get_settings_module(), db_config.get("user"), db_config.get("host"),
            db_config.get("port", 3306), db_config.get("database"),
        )
        container = build_container(
            db_config=db_config,
            vendor_config=getattr(settings, "VENDOR_CONFIG"),
            sync_config=sync_config,
            mapping_config=getattr(settings, "MAPPING_CONFIG", {}),
        )
        if sync_config.get("auto_start"):
            container.scheduler.start()

    app.extensions["attendance_sync"] = container

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "scheduler_running": container.scheduler.running}), 200

    register_error_handlers(app)
    register_sync(app, container)
    register_mappings(app, container)
    register_attendance(app, container)

    return app
