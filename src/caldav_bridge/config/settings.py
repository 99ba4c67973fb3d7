from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

APP_NAME = "caldav-bridge"
APP_AUTHOR = "CalDavBridge"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))


@dataclass(frozen=True)
class CalDavSettings:
    server_url: Optional[str]
    username: Optional[str]
    password: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.server_url)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.server_url:
            missing.append("CALDAV_SERVER_URL")
        if self.username and not self.password:
            missing.append("CALDAV_PASSWORD")
        return missing


@dataclass(frozen=True)
class RequestSettings:
    timeout_ms: int
    discovery_ttl_seconds: float
    http_timeout_seconds: float


@dataclass(frozen=True)
class ServerSettings:
    host: str
    api_port: int
    mcp_port: int


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    log_dir: Path


@dataclass(frozen=True)
class AppSettings:
    caldav: CalDavSettings
    requests: RequestSettings
    server: ServerSettings
    logging: LoggingSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    caldav = CalDavSettings(
        server_url=os.getenv("CALDAV_SERVER_URL"),
        username=os.getenv("CALDAV_USERNAME"),
        password=os.getenv("CALDAV_PASSWORD"),
    )

    requests = RequestSettings(
        timeout_ms=_int_from_env("CALDAV_TIMEOUT_MS", 30000),
        discovery_ttl_seconds=_float_from_env("CALDAV_DISCOVERY_TTL_SECONDS", 300.0),
        http_timeout_seconds=_float_from_env("CALDAV_HTTP_TIMEOUT_SECONDS", 60.0),
    )

    server = ServerSettings(
        host=os.getenv("CALDAV_BRIDGE_HOST", "127.0.0.1"),
        api_port=_int_from_env("CALDAV_BRIDGE_API_PORT", 8000),
        mcp_port=_int_from_env("CALDAV_BRIDGE_MCP_PORT", 8765),
    )

    logging = LoggingSettings(
        level=os.getenv("CALDAV_BRIDGE_LOG_LEVEL", "INFO"),
        log_dir=Path(os.getenv("CALDAV_BRIDGE_LOG_DIR") or DATA_DIR),
    )

    return AppSettings(caldav=caldav, requests=requests, server=server, logging=logging)
