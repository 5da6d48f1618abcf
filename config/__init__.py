import os

def get_settings_module() -> str:
    # Chọn module settings theo biến APP_ENV, mặc định là 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"
