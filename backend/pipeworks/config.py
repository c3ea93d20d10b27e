from __future__ import annotations
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # In-memory SQLite by default: records live as long as the process
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional persistent location
        "sqlite://",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Attendance
    STANDARD_SHIFT_HOURS = float(os.environ.get("STANDARD_SHIFT_HOURS", "8"))
    LATE_GRACE_MINUTES = int(os.environ.get("LATE_GRACE_MINUTES", "0"))

    # Orders
    ORDER_TAX_RATE = float(os.environ.get("ORDER_TAX_RATE", "0.086"))

    # Reports
    COMPANY_NAME = os.environ.get("COMPANY_NAME", "Pipes Manufacturing")
    REPORT_PAGE_SIZE = os.environ.get("REPORT_PAGE_SIZE", "A4")

    SEED_DEMO_DATA = _env_bool("SEED_DEMO_DATA")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"
    SEED_DEMO_DATA = False
