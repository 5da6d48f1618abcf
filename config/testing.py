import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_sync_test"),
}

VENDOR_CONFIG = {
    "base_url": "http://teamoffice.invalid/api",
    "corp_id": "test",
    "username": "test",
    "password": "test",
    "timeout_seconds": 5,
}

SYNC_CONFIG = {
    "interval_minutes": 3,
    "max_retries": 3,
    "retry_base_delay": 2,
    "timezone": "Asia/Kolkata",
    "late_cutoff": "10:45",
    "auto_start": False,
}

MAPPING_CONFIG = {
    "min_match_score": 0.3,
    "auto_map_threshold": 0.8,
    "create_missing_users": False,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
