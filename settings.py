from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_INFLUX_HOST_ENV = "INFLUX_HOST"
_INFLUX_PORT_ENV = "INFLUX_PORT"
_INFLUX_DATABASE_ENV = "INFLUX_DATABASE"
_INFLUX_PRECISION_ENV = "INFLUX_PRECISION"
_INFLUX_USERNAME_ENV = "INFLUX_USERNAME"
_INFLUX_PASSWORD_ENV = "INFLUX_PASSWORD"
_INFLUX_TIMEOUT_ENV = "INFLUX_TIMEOUT"
_SINK_BACKEND_ENV = "SINK_BACKEND"
_WORKER_COUNT_ENV = "PIPELINE_WORKER_COUNT"
_MAX_PENDING_ENV = "PIPELINE_MAX_PENDING"
_OVERFLOW_POLICY_ENV = "PIPELINE_OVERFLOW_POLICY"
_SUBMIT_TIMEOUT_ENV = "PIPELINE_SUBMIT_TIMEOUT"
_SHUTDOWN_GRACE_ENV = "PIPELINE_SHUTDOWN_GRACE"
_LOG_LEVEL_ENV = "LOG_LEVEL"

VALID_PRECISIONS = ("ns", "us", "ms", "s")
VALID_BACKENDS = ("influx", "memory")
VALID_OVERFLOW_POLICIES = ("block", "reject")


class ConfigError(ValueError):
    """Raised when the effective settings cannot be used to run the service."""


@dataclass(frozen=True)
class Settings:
    influx_host: str
    influx_port: int
    influx_database: str
    influx_precision: str
    influx_username: Optional[str]
    influx_password: Optional[str]
    influx_timeout: float
    sink_backend: str
    pipeline_workers: int
    pipeline_max_pending: int
    pipeline_overflow_policy: str
    pipeline_submit_timeout: float
    pipeline_shutdown_grace: float
    log_level: str

    @property
    def influx_url(self) -> str:
        return f"http://{self.influx_host}:{self.influx_port}"


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


def _read_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return int(candidate)
    except ValueError:
        return default


def _read_positive_int(name: str, default: int) -> int:
    parsed = _read_int_env(name, default)
    return parsed if parsed > 0 else default


def _read_float_env(name: str, default: float) -> float:
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
    return parsed if parsed >= 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def validate_settings(settings: Settings) -> Settings:
    """Check the settings are usable, raising ``ConfigError`` on the first problem."""
    if not 0 < settings.influx_port < 65536:
        raise ConfigError(f"influx port {settings.influx_port} is invalid")
    if not settings.influx_database:
        raise ConfigError(f"influx database {settings.influx_database!r} is invalid")
    if settings.influx_precision not in VALID_PRECISIONS:
        raise ConfigError(f"influx precision {settings.influx_precision!r} is invalid")
    if settings.sink_backend not in VALID_BACKENDS:
        raise ConfigError(f"sink backend {settings.sink_backend!r} is invalid")
    if settings.pipeline_overflow_policy not in VALID_OVERFLOW_POLICIES:
        raise ConfigError(
            f"pipeline overflow policy {settings.pipeline_overflow_policy!r} is invalid"
        )
    return settings


@lru_cache
def get_settings() -> Settings:
    return Settings(
        influx_host=_read_str_env(_INFLUX_HOST_ENV, "localhost"),
        influx_port=_read_int_env(_INFLUX_PORT_ENV, 8086),
        influx_database=_read_str_env(_INFLUX_DATABASE_ENV, "edgex"),
        influx_precision=_read_str_env(_INFLUX_PRECISION_ENV, "ns").lower(),
        influx_username=_read_optional_env(_INFLUX_USERNAME_ENV, None),
        influx_password=_read_optional_env(_INFLUX_PASSWORD_ENV, None),
        influx_timeout=_read_float_env(_INFLUX_TIMEOUT_ENV, 10.0),
        sink_backend=_read_str_env(_SINK_BACKEND_ENV, "influx").lower(),
        pipeline_workers=_read_positive_int(_WORKER_COUNT_ENV, 4),
        pipeline_max_pending=_read_positive_int(_MAX_PENDING_ENV, 1024),
        pipeline_overflow_policy=_read_str_env(_OVERFLOW_POLICY_ENV, "block").lower(),
        pipeline_submit_timeout=_read_float_env(_SUBMIT_TIMEOUT_ENV, 5.0),
        pipeline_shutdown_grace=_read_float_env(_SHUTDOWN_GRACE_ENV, 5.0),
        log_level=_read_log_level("INFO"),
    )
