from __future__ import annotations

import logging
import sys
from contextlib import suppress
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog

from devtools_check.config import ConfigError, Settings, get_settings

LOG_FILE_NAME = "devtools-check.log"


def _settings_or_none() -> Settings | None:
    # Logging must come up even when the config is broken; the CLI reports that error itself.
    try:
        return get_settings()
    except (ConfigError, ValueError):
        return None


def rename_event_to_msg(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    if "msg" not in event_dict and "event" in event_dict:
        event_dict["msg"] = event_dict.pop("event")
    return event_dict


def _file_handler(s: Settings, formatter: logging.Formatter) -> RotatingFileHandler:
    """Raises OSError when the log dir cannot be created or the file opened."""
    log_path = s.log_dir / LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=int(s.log_max_bytes),
        backupCount=int(s.log_backup_count),
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def _configure_structlog() -> structlog.stdlib.BoundLogger:
    s = _settings_or_none()
    level = str(s.log_level if s is not None else "WARNING").strip().upper()

    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicates if re-imported
    if getattr(root, "_devtools_check_structlog_configured", False):
        return structlog.get_logger("devtools_check")

    foreign_pre_chain = [
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        rename_event_to_msg,
    ]

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=foreign_pre_chain,
    )

    # stdout carries the report; logs go to stderr.
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)

    root.handlers.clear()
    root.addHandler(stream_handler)

    file_error: OSError | None = None
    if s is not None and s.log_dir is not None:
        try:
            file_handler = _file_handler(s, formatter)
        except OSError as ex:
            file_error = ex
        else:
            root.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            rename_event_to_msg,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root._devtools_check_structlog_configured = True
    log = structlog.get_logger("devtools_check")
    if file_error is not None:
        # stderr-only; an unusable log dir must not stop the checks.
        log.warning("log_file_unavailable", log_dir=str(s.log_dir), error=str(file_error))
    return log


logger = _configure_structlog()


def set_log_level(level: str) -> None:
    """
    Best-effort runtime log level override (CLI convenience).
    Does not change handlers/formatters; only raises/lowers filtering level.
    """
    lvl = getattr(logging, str(level).upper(), None)
    if not isinstance(lvl, int):
        return
    root = logging.getLogger()
    root.setLevel(lvl)
    for h in root.handlers:
        with suppress(Exception):
            h.setLevel(lvl)
