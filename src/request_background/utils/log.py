from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

from request_background.config import get_settings

LOGGER_NAME = "request_background"

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(rid: str | None) -> None:
    request_id_var.set(rid)


def add_contextvars(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    rid = request_id_var.get()
    if rid:
        event_dict.setdefault("request_id", rid)
    return event_dict


def rename_event_to_msg(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    if "msg" not in event_dict and "event" in event_dict:
        event_dict["msg"] = event_dict.pop("event")
    return event_dict


def _log_path() -> Path | None:
    s = get_settings()
    if s.log_dir is None:
        return None
    return Path(s.log_dir) / "background.log"


def _build_processors(*, json: bool) -> list[Any]:
    chain: list[Any] = [
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
        structlog.stdlib.add_log_level,
        add_contextvars,
        structlog.processors.format_exc_info,
    ]
    # ConsoleRenderer keys its first column on `event`
    if json:
        chain.append(rename_event_to_msg)
    return chain


def _configure_logger() -> structlog.stdlib.BoundLogger:
    """
    Package-scoped structlog logger.

    Handlers hang off the `request_background` stdlib logger and the processor chain is
    bound with `wrap_logger`, so the process-wide structlog config stays the host's.
    """
    s = get_settings()
    level = str(s.log_level).upper()
    json = bool(s.log_json)

    pkg = logging.getLogger(LOGGER_NAME)
    pkg.setLevel(level)

    # Avoid duplicate handlers if re-imported
    if not getattr(pkg, "_request_background_handlers_configured", False):
        renderer: Any = (
            structlog.processors.JSONRenderer()
            if json
            else structlog.dev.ConsoleRenderer(colors=False)
        )
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_build_processors(json=json),
        )

        stream = sys.stdout if str(s.log_stream).strip().lower() == "stdout" else sys.stderr
        stream_handler = logging.StreamHandler(stream)
        stream_handler.setFormatter(formatter)
        pkg.handlers.clear()
        pkg.addHandler(stream_handler)

        log_path = _log_path()
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=int(s.log_max_bytes),
                backupCount=int(s.log_backup_count),
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            pkg.addHandler(file_handler)
        pkg._request_background_handlers_configured = True

    return structlog.wrap_logger(
        pkg,
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            *_build_processors(json=json),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )


logger = _configure_logger()
