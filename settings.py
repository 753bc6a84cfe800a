from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_SAMPLE_INTERVAL_ENV = "SAMPLE_INTERVAL_SECONDS"
_BATCH_SIZE_ENV = "ARCHIVE_BATCH_SIZE"
_WAIT_TIMEOUT_ENV = "ARCHIVE_WAIT_TIMEOUT_SECONDS"
_ARCHIVE_ROOT_ENV = "ARCHIVE_ROOT_PATH"
_REALTIME_ENV = "REALTIME_ENABLED"
_REALTIME_URL_ENV = "REALTIME_CLIENT_URL"
_REALTIME_WORKERS_ENV = "REALTIME_WORKER_COUNT"
_SENSOR_SOURCE_ENV = "SENSOR_SOURCE"
_I2C_BUS_ENV = "SENSOR_I2C_BUS"
_I2C_ADDRESS_ENV = "SENSOR_I2C_ADDRESS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    sample_interval: float
    batch_size: int
    wait_timeout: float
    archive_root: str
    realtime_enabled: bool
    realtime_client_url: Optional[str]
    realtime_workers: int
    sensor_source: str
    i2c_bus: int
    i2c_address: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_int(name: str, default: int, base: int = 10, minimum: int = 1) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate, base)
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        sample_interval=_read_positive_float(_SAMPLE_INTERVAL_ENV, 1.0),
        batch_size=_read_int(_BATCH_SIZE_ENV, 10),
        wait_timeout=_read_positive_float(_WAIT_TIMEOUT_ENV, 1.0),
        archive_root=_read_str_env(_ARCHIVE_ROOT_ENV, "./archive"),
        realtime_enabled=_read_bool(_REALTIME_ENV, False),
        realtime_client_url=_read_optional_env(_REALTIME_URL_ENV, None),
        realtime_workers=_read_int(_REALTIME_WORKERS_ENV, 2),
        sensor_source=_read_str_env(_SENSOR_SOURCE_ENV, "simulated").lower(),
        i2c_bus=_read_int(_I2C_BUS_ENV, 1, minimum=0),
        i2c_address=_read_int(_I2C_ADDRESS_ENV, 0x49, base=0),
        log_level=_read_log_level("INFO"),
    )
