"""
Logging configuration for MRZ tooling.

Parser log records may carry the MRZ format and the offending range through
``extra={"mrz_format": ..., "mrz_range": ...}``. Both the text and the JSON
output render that context, next to the service name and, when a span is
recording, the OpenTelemetry trace and span ids.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from opentelemetry import trace

MRZ_CONTEXT_FIELDS = ("mrz_format", "mrz_range")

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(service_name)s] %(name)s: %(message)s%(mrz_context)s"

LOG_OFF_LEVEL = "OFF"


class MRZContextFilter(logging.Filter):
    """Stamp service name, MRZ context and trace ids on every record of a handler.

    Fields are always set, to ``None`` when absent, so format strings may
    reference them unconditionally.
    """

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name

        for name in MRZ_CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        record.mrz_context = _context_suffix(record)

        span = trace.get_current_span()
        span_context = span.get_span_context()
        recording = span.is_recording()
        record.trace_id = format(span_context.trace_id, "032x") if recording else None
        record.span_id = format(span_context.span_id, "016x") if recording else None
        return True


def _context_suffix(record: logging.LogRecord) -> str:
    parts = [str(getattr(record, name)) for name in MRZ_CONTEXT_FIELDS if getattr(record, name, None)]
    return f" ({' '.join(parts)})" if parts else ""


class MRZJSONFormatter(logging.Formatter):
    """One JSON object per line; MRZ context and trace ids only when set."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service_name", None),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in (*MRZ_CONTEXT_FIELDS, "trace_id", "span_id"):
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(
    service_name: str = "icao-mrz",
    log_level: str = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
) -> None:
    """
    Configure the root logger with a single stderr handler.

    Args:
        service_name: Name stamped on every record
        log_level: Level name, or "OFF" to silence logging; unknown names mean INFO
        log_format: A ``logging`` format string, or "json"
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level_name = log_level.upper()
    if level_name == LOG_OFF_LEVEL:
        root_logger.setLevel(logging.CRITICAL + 1)
        return

    level = logging.getLevelName(level_name)
    root_logger.setLevel(level if isinstance(level, int) else logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(MRZJSONFormatter() if log_format.lower() == "json" else logging.Formatter(log_format))
    handler.addFilter(MRZContextFilter(service_name))
    root_logger.addHandler(handler)

    logging.getLogger(__name__).debug("Logging configured for %s at %s", service_name, level_name)
