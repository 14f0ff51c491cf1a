"""Configuration loader for tech-tracker."""

from __future__ import annotations

import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class ApiConfig:
    base_url: str = constants.DEFAULT_BASE_URL
    api_key: Optional[str] = None
    request_timeout_seconds: Optional[float] = None  # None keeps aiohttp's default


@dataclass(slots=True)
class HistoryConfig:
    discard_stale_responses: bool = False


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = constants.DEFAULT_LOG_PATH
    log_network: bool = False


@dataclass(slots=True)
class TrackerConfig:
    api: ApiConfig
    history: HistoryConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def load_config(path: Optional[Path] = None) -> TrackerConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "api": {
                "base_url": constants.DEFAULT_BASE_URL,
                "request_timeout_seconds": "0",
            },
            "history": {
                "discard_stale_responses": "false",
            },
            "logging": {
                "level": "INFO",
                "path": str(constants.DEFAULT_LOG_PATH),
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    api_key = parser.get("api", "api_key", fallback=None) or None
    env_key = os.environ.get(constants.API_KEY_ENV_VAR)
    if env_key:
        api_key = env_key

    try:
        timeout_value = parser.getfloat("api", "request_timeout_seconds", fallback=0.0)
    except ValueError:
        timeout_value = 0.0

    api = ApiConfig(
        base_url=parser.get("api", "base_url").rstrip("/"),
        api_key=api_key,
        request_timeout_seconds=timeout_value if timeout_value > 0 else None,
    )

    history = HistoryConfig(
        discard_stale_responses=parser.getboolean(
            "history", "discard_stale_responses", fallback=False
        ),
    )

    # An empty path disables the file handler
    log_path_value = parser.get(
        "logging", "path", fallback=str(constants.DEFAULT_LOG_PATH)
    ).strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    return TrackerConfig(
        api=api,
        history=history,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: TrackerConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
