from __future__ import annotations

from functools import lru_cache
from typing import Any

from .public_config import PublicConfig

_LOG_STREAMS = {"stderr", "stdout"}


class ConfigError(RuntimeError):
    pass


def _validate(s: PublicConfig) -> None:
    stream = str(s.log_stream or "").strip().lower()
    if stream not in _LOG_STREAMS:
        raise ConfigError(
            f"BACKGROUND_LOG_STREAM must be one of {sorted(_LOG_STREAMS)}, got {s.log_stream!r}"
        )
    if float(s.shutdown_timeout_sec) < 0:
        raise ConfigError("BACKGROUND_SHUTDOWN_TIMEOUT_SEC must be >= 0")
    if int(s.log_backup_count) < 0:
        raise ConfigError("BACKGROUND_LOG_BACKUP_COUNT must be >= 0")


def get_safe_config_report() -> dict[str, Any]:
    """
    Deterministic config report (paths are stringified for stable JSON output).
    """
    out: dict[str, Any] = {}
    for k, v in get_settings().model_dump().items():
        out[k] = str(v) if hasattr(v, "__fspath__") else v
    return out


@lru_cache(maxsize=1)
def get_settings() -> PublicConfig:
    s = PublicConfig()
    _validate(s)
    return s
