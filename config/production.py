import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_sync"),
}

# TeamOffice (eTimeOffice) credentials
VENDOR_CONFIG = {
    "base_url": os.getenv("TEAMOFFICE_BASE_URL", "https://api.etimeoffice.com/api"),
    "corp_id": os.getenv("TEAMOFFICE_CORP_ID", ""),
    "username": os.getenv("TEAMOFFICE_USERNAME", ""),
    "password": os.getenv("TEAMOFFICE_PASSWORD", ""),
    "true_literal": os.getenv("TEAMOFFICE_TRUE_LITERAL", "true"),
    "emp_code": os.getenv("TEAMOFFICE_EMP_CODE", "ALL"),
    "timeout_seconds": float(os.getenv("TEAMOFFICE_TIMEOUT_SECONDS", "60")),
}

SYNC_CONFIG = {
    "interval_minutes": float(os.getenv("SYNC_INTERVAL_MINUTES", "3")),
    "max_retries": int(os.getenv("SYNC_MAX_RETRIES", "3")),
    "retry_base_delay": float(os.getenv("SYNC_RETRY_BASE_DELAY", "2")),
    "timezone": os.getenv("SYNC_TIMEZONE", "Asia/Kolkata"),
    "late_cutoff": os.getenv("LATE_CUTOFF", "10:45"),
    "backfill_endpoint": os.getenv("BACKFILL_ENDPOINT", "inout"),
    # Scheduler thread starts with the app
    "auto_start": bool(int(os.getenv("SYNC_AUTO_START", "1"))),
}

MAPPING_CONFIG = {
    "min_match_score": float(os.getenv("MIN_MATCH_SCORE", "0.3")),
    "auto_map_threshold": float(os.getenv("AUTO_MAP_THRESHOLD", "0.8")),
    "create_missing_users": bool(int(os.getenv("CREATE_MISSING_USERS", "0"))),
    "email_domain": os.getenv("PROVISIONED_EMAIL_DOMAIN", "attendance.local"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
