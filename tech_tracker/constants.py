"""Constants used across the tech-tracker package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "tech-tracker"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_LOG_PATH = Path.home() / ".local" / "state" / APP_NAME / f"{APP_NAME}.log"

DEFAULT_BASE_URL = "https://techtracker.gibbyb.com"
API_KEY_ENV_VAR = "TECH_TRACKER_API_KEY"

TECHNICIANS_PATH = "/api/technicians"
UPDATE_TECHNICIANS_PATH = "/api/update_technicians"
HISTORY_PATH = "/api/history"

# yyyy-MM-dd'T'HH:mm:ss.SSS'Z'
TIMESTAMP_PATTERN = r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]{3}Z"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

PRESET_STATUSES = (
    "In the Office",
    "At desk",
    "At lunch",
    "At Hardy",
    "At Police Department",
    "At City Hall",
    "In a meeting",
    "Out today",
    "Running late",
    "End of Shift",
)
