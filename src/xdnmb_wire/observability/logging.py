"""Structured logging setup with JSON-lines output and redaction support.

The decoding layer emits events through ``structlog.get_logger(__name__)``.
``setup_logging`` routes those events into stdlib ``logging`` so that every
record, whichever API produced it, leaves through one redacting formatter.
"""

from __future__ import annotations

import json
import logging
import math
import re
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import IO, Final

import structlog

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

_REDACTED_VALUE: Final[str] = "***REDACTED***"
_DEFAULT_LOGGER_NAME: Final[str] = "xdnmb_wire"

_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "cookie",
    "userhash",
    "feed_uuid",
    "token",
    "password",
    "secret",
    "authorization",
)

# Cookie values show up in request dumps as ``userhash=...``.
_COOKIE_ASSIGNMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(userhash|cookie|token|password)\b\s*([:=])\s*([^\s,;]+)"
)

_STANDARD_LOG_RECORD_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)


class _JsonLineFormatter(logging.Formatter):
    """Formatter that emits canonical JSON objects per log line."""

    def __init__(self, *, redact: bool) -> None:
        super().__init__()
        self._redact = redact

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": _iso8601z_from_epoch(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": self._scrub(record.getMessage()),
        }
        extras = _extract_extra_fields(record)
        if extras:
            event["fields"] = self._scrub_value(extras)
        if record.exc_info is not None:
            event["exception"] = self._scrub(self.formatException(record.exc_info))
        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    def _scrub(self, text: str) -> str:
        return _redact_string(text) if self._redact else text

    def _scrub_value(self, value: JSONValue) -> JSONValue:
        return default_log_redactor(value) if self._redact else value


class _TextFormatter(logging.Formatter):
    """Human-readable single-line formatter; extras are appended as key=value."""

    def __init__(self, *, redact: bool) -> None:
        super().__init__("%(levelname)s %(name)s: %(message)s")
        self._redact = redact

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if self._redact:
            line = _redact_string(line)
        extras = _extract_extra_fields(record)
        if extras:
            if self._redact:
                extras = default_log_redactor(extras)
            rendered = " ".join(
                f"{key}={json.dumps(extras[key], ensure_ascii=False)}" for key in sorted(extras)
            )
            line = f"{line} {rendered}"
        return line


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    logger_name: str = _DEFAULT_LOGGER_NAME,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure the package logger from an ``[observability]`` mapping and return it.

    Parameters
    ----------
    observability_config:
        Mapping compatible with ``[observability]`` settings in ``xdnmb.toml``.
    logger_name:
        Logger name to configure; decoder modules log beneath ``xdnmb_wire``.
    stream:
        Output stream, ``sys.stderr`` by default so CLI stdout stays clean.
    """

    cfg = dict(observability_config or {})
    level = _parse_log_level(cfg.get("log_level", "WARNING"))
    redact = bool(cfg.get("redact_secrets", True))
    log_format = cfg.get("log_format", "json")

    formatter: logging.Formatter
    if log_format == "text":
        formatter = _TextFormatter(redact=redact)
    else:
        formatter = _JsonLineFormatter(redact=redact)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return logger


def shutdown_logging(logger_name: str = _DEFAULT_LOGGER_NAME) -> None:
    """Detach and close handlers installed by ``setup_logging``."""

    logger = logging.getLogger(logger_name)
    for existing in list(logger.handlers):
        existing.flush()
        logger.removeHandler(existing)
        existing.close()
    structlog.reset_defaults()


def default_log_redactor(value: JSONValue) -> JSONValue:
    """Deep redaction for cookies, feed ids and tokens."""

    return _redact_value(value, key_context=None)


def _parse_log_level(value: object) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")
    parsed = logging.getLevelName(value.strip().upper())
    if isinstance(parsed, int):
        return parsed
    raise ValueError(f"unsupported logging level {value!r}")


def _iso8601z_from_epoch(epoch_seconds: float) -> str:
    timestamp = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _extract_extra_fields(record: logging.LogRecord) -> dict[str, JSONValue]:
    fields: dict[str, JSONValue] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_LOG_RECORD_FIELDS or key.startswith("_"):
            continue
        fields[key] = _normalize_json_value(value)
    return fields


def _normalize_json_value(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        return repr(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _normalize_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_json_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_normalize_json_value(item) for item in value), key=repr)
    return repr(value)


def _redact_value(value: JSONValue, *, key_context: str | None) -> JSONValue:
    if key_context is not None and _requires_redaction_for_key(key_context):
        return _REDACTED_VALUE
    if isinstance(value, str):
        return _redact_string(value)
    if isinstance(value, list):
        return [_redact_value(item, key_context=None) for item in value]
    if isinstance(value, dict):
        return {key: _redact_value(item, key_context=key) for key, item in value.items()}
    return value


def _requires_redaction_for_key(key: str) -> bool:
    key_lower = key.lower()
    return any(term in key_lower for term in _SENSITIVE_KEY_TERMS)


def _redact_string(text: str) -> str:
    return _COOKIE_ASSIGNMENT_PATTERN.sub(
        lambda match: f"{match.group(1)}{match.group(2)}{_REDACTED_VALUE}", text
    )


__all__ = [
    "JSONScalar",
    "JSONValue",
    "default_log_redactor",
    "setup_logging",
    "shutdown_logging",
]
