"""
config.py
Settings for the admin dashboard (API host, timeouts, refresh interval, storage path).
"""

from __future__ import annotations

import os
from pathlib import Path


def _env_str(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw or default


def _env_float(name: str, default: float, minimum: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        value = float(raw) if raw else float(default)
    except ValueError:
        value = float(default)
    return max(minimum, value)


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        value = int(raw) if raw else int(default)
    except ValueError:
        value = int(default)
    return max(minimum, value)


def _env_csv(name: str, default_csv: str) -> tuple[str, ...]:
    raw = (os.getenv(name) or default_csv).strip()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


API_BASE_URL = _env_str("SMARTPARK_API_URL", "https://smartpark-backend.vercel.app").rstrip("/")
HTTP_TIMEOUT = _env_float("SMARTPARK_HTTP_TIMEOUT", 15.0, 1.0)

# Seconds between auto-refresh ticks for the users and active-parking views
REFRESH_SECONDS = _env_int("SMARTPARK_REFRESH_SECONDS", 30, 1)

HISTORY_PAGE_SIZE = _env_int("SMARTPARK_PAGE_SIZE", 20, 1)

DB_FILE = Path(_env_str("SMARTPARK_DB_PATH", str(Path(__file__).with_name("smartpark.db"))))

PROTECTED_PATHS = _env_csv("SMARTPARK_PROTECTED_PATHS", "/dashboard")
LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"

# Cookie that identifies a browser across reloads (set by the fronting proxy);
# without it the login lasts for the Streamlit session only
SESSION_COOKIE = _env_str("SMARTPARK_SESSION_COOKIE", "smartpark_sid")
