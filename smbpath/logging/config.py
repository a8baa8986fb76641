from __future__ import annotations

import json
import logging
from typing import IO, Any, Optional

from smbpath.lib.redaction import redact
from smbpath.services.settings import load_log_level

JSON_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
SENSITIVE_KEYS = {"password", "pwd", "secret", "token", "path", "ciphertext"}
REDACTED_VALUE = "***REDACTED***"
_STANDARD_RECORD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
}


class SensitiveDataFilter(logging.Filter):
    """Redact sensitive keys and inline share credentials from log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for key in SENSITIVE_KEYS:
            if hasattr(record, key):
                setattr(record, key, REDACTED_VALUE)
        if isinstance(record.args, dict):
            record.args = {
                key: (REDACTED_VALUE if key in SENSITIVE_KEYS else value)
                for key, value in record.args.items()
            }
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # left for the handler to report via handleError
            return True
        scrubbed = redact(message)
        if scrubbed != message:
            record.msg = scrubbed
            record.args = ()
        return True


class JsonFormatter(logging.Formatter):
    """Emit log records as compact JSON for deterministic parsing."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = self._extract_extras(record)
        if extras:
            payload["context"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=True)

    def _extract_extras(self, record: logging.LogRecord) -> dict[str, Any]:
        extras: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS or key.startswith("_"):
                continue
            if key in SENSITIVE_KEYS:
                extras[key] = REDACTED_VALUE
            else:
                extras[key] = self._stringify(value)
        return extras

    @staticmethod
    def _stringify(value: Any) -> Any:
        if isinstance(value, (str, int, float, bool)) or value is None:
            return value
        return str(value)


def configure_logging(
    stream: Optional[IO[str]] = None,
    *,
    level: Optional[int] = None,
) -> logging.Logger:
    """Configure root logger with structured output and credential scrubbing.

    ``level`` defaults to SMBPATH_LOG_LEVEL from the environment.
    """

    root = logging.getLogger()
    root.setLevel(load_log_level() if level is None else level)

    if not any(isinstance(f, SensitiveDataFilter) for f in root.filters):
        root.addFilter(SensitiveDataFilter())

    if not _has_json_handler(root.handlers):
        stream_handler = logging.StreamHandler(stream)
        stream_handler.setFormatter(JsonFormatter(JSON_LOG_FORMAT))
        stream_handler.addFilter(SensitiveDataFilter())
        root.addHandler(stream_handler)

    return root


def _has_json_handler(handlers: list[logging.Handler]) -> bool:
    return any(
        isinstance(handler, logging.StreamHandler) and isinstance(handler.formatter, JsonFormatter)
        for handler in handlers
    )


__all__ = ["JsonFormatter", "configure_logging", "SensitiveDataFilter", "REDACTED_VALUE"]
