"""Logging helpers (formatter, trace-context filter, dictConfig builder)."""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from enum import Enum
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace

_PACKAGE_LOGGER_ROOT = "mediaroom_client"


def _should_emit_json_payload(force: bool) -> bool:
    # Managed runtimes parse JSON lines into structured payloads.
    return force or bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


def _structured_payload(record: logging.LogRecord) -> dict[str, Any]:
    record_dict = record.__dict__
    payload: dict[str, Any] = {
        "message": record.getMessage(),
        "severity": record.levelname,
        "logger": record.name,
        "timestamp": (
            f"{time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))}"
            f".{int(record.msecs):03d}Z"
        ),
    }
    if record_dict.get("data"):
        payload["data"] = _sanitize_for_json(record_dict["data"])
    otel = record_dict.get("otel")
    if otel:
        payload["otel"] = otel
    if record.exc_info:
        payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
    return payload


class ExtrasFormatter(logging.Formatter):
    """Append structured ``data`` payloads when present."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        *,
        json_output: bool = False,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        if _should_emit_json_payload(self._json_output):
            return json.dumps(_structured_payload(record), sort_keys=True, separators=(",", ":"))

        formatted = super().format(record)
        record_data = record.__dict__.get("data")
        if record_data:
            encoded = json.dumps(
                _sanitize_for_json(record_data), sort_keys=True, separators=(",", ":")
            )
            return f"{formatted} | data={encoded}"
        return formatted


class OtelContextLogFilter(logging.Filter):
    """Attach the active OpenTelemetry trace/span ids to the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.__dict__["otel"] = {
                "trace_id": f"{span_context.trace_id:032x}",
                "span_id": f"{span_context.span_id:016x}",
            }
        return True


def _sanitize_for_json(value: Any, depth: int = 10) -> Any:
    """Return a JSON-serializable copy; fall back to ``str`` for unknowns."""
    if depth <= 0:
        return "<depth_exceeded>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if is_dataclass(value) and not isinstance(value, type):
        return _sanitize_for_json(asdict(value), depth - 1)
    if isinstance(value, Mapping):
        return {str(k): _sanitize_for_json(v, depth - 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_sanitize_for_json(item, depth - 1) for item in value]
    return str(value)


def build_log_config(
    *,
    level: str = "INFO",
    json_output: bool = False,
    extra_loggers: Mapping[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""
    loggers: dict[str, dict[str, Any]] = {
        "httpx": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        "httpcore": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        "mediaroom_client.gateway.calls": {
            "level": os.getenv("MEDIAROOM_GATEWAY_LOG_LEVEL", "WARNING").upper(),
            "handlers": ["console"],
            "propagate": False,
        },
    }
    if extra_loggers:
        loggers.update(extra_loggers)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
                "json_output": json_output,
            }
        },
        "filters": {"otel_context": {"()": OtelContextLogFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stdout",
                "filters": ["otel_context"],
            }
        },
        "root": {"level": level.upper(), "handlers": ["console"]},
        "loggers": loggers,
    }


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = False,
    extra_loggers: Mapping[str, dict[str, Any]] | None = None,
) -> None:
    """Apply the logging config and reset package loggers to inherit from root."""
    config = build_log_config(level=level, json_output=json_output, extra_loggers=extra_loggers)
    dictConfig(config)
    explicit = set(config["loggers"])
    for name, entry in logging.Logger.manager.loggerDict.items():
        if not isinstance(entry, logging.Logger) or name in explicit:
            continue
        if name == _PACKAGE_LOGGER_ROOT or name.startswith(f"{_PACKAGE_LOGGER_ROOT}."):
            entry.setLevel(logging.NOTSET)


__all__ = ["ExtrasFormatter", "OtelContextLogFilter", "build_log_config", "configure_logging"]
