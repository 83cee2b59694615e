"""
Structured audit logs: one JSON object per line on stderr.

Every record carries timestamp, level, logger and event_type. Account keys and
signatures passed under the identifier keys below are shortened by a processor,
so callers log the raw value:

    logger.info("audit_done", subject_id=program_id, risk_score=2, warnings=[...])

A `warnings` list also yields `warning_count`. stdout stays free for CLI output.

No backend_solaudit imports here; config and the collector both log.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

import structlog

# Keys whose values are Solana account keys or signatures
IDENTIFIER_KEYS = ("subject_id", "program_id", "signature", "identifier")
SHORT_ID_LEN = 16


def short_id(identifier: str | None) -> str:
    """Truncate an account key or signature for log output."""
    identifier = identifier or ""
    return identifier[:SHORT_ID_LEN] + "..." if len(identifier) > SHORT_ID_LEN else identifier


def _shorten_identifiers(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in IDENTIFIER_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = short_id(value)
    return event_dict


def _count_warnings(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    warnings = event_dict.get("warnings")
    if isinstance(warnings, (list, tuple)):
        event_dict["warnings"] = list(warnings)
        event_dict.setdefault("warning_count", len(warnings))
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type."""
    if "event" in event_dict:
        event_dict.setdefault("event_type", event_dict.pop("event"))
    return event_dict


def configure_structlog(
    level: str | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    (Re)configure audit logging. Defaults come from LOG_LEVEL (INFO) and
    LOG_FORMAT ("json", anything else renders for the console).
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.getenv("LOG_FORMAT", "json")).strip().lower()
    stream = stream or sys.stderr

    renderer: Any
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.format_exc_info,
            _event_type,
            _shorten_identifiers,
            _count_warnings,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """Structured logger with `logger=name` bound."""
    return structlog.get_logger(name).bind(logger=name)


def bind_subject(subject_id: str, subject_type: str | None = None) -> structlog.BoundLogger:
    """Logger with the audited subject bound to every record."""
    bound = get_logger("backend_solaudit.audit").bind(subject_id=subject_id)
    if subject_type:
        bound = bound.bind(subject_type=subject_type)
    return bound
