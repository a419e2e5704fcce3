"""Root logger setup and the two output formats.

``json`` writes one object per line for log collectors. ``key-value`` writes
a readable line followed by ``key=value`` pairs for the extra fields. Both
formats carry the fields pushed with ``log_context`` through ContextualFilter.
"""

import json
import logging
import sys
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, Literal, Optional, TextIO, Tuple

from .context import get_log_context

LogFormat = Literal["json", "key-value"]

SERVICE_NAME = "talent-match"
KEY_VALUE_LAYOUT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
KEY_VALUE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else came from ``extra`` or context
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_STATIC_FIELDS = frozenset({"service", "environment"})


def to_primitive(value: Any) -> Any:
    """Reduce enums, dates and containers to JSON-friendly values."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_primitive(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_primitive(item) for item in value]
    return str(value)


def extra_fields(record: logging.LogRecord, skip: frozenset = frozenset()) -> Iterator[Tuple[str, Any]]:
    """Yield the non-standard attributes of ``record`` in name order."""
    for key in sorted(record.__dict__):
        if key in _RECORD_ATTRS or key in skip or key.startswith("_"):
            continue
        yield key, to_primitive(record.__dict__[key])


class ContextualFilter(logging.Filter):
    """Stamp service and environment on records and copy in the active log context.

    Fields passed explicitly through ``extra`` are never overwritten by context.
    """

    def __init__(self, service: str = SERVICE_NAME, environment: str = "local"):
        super().__init__()
        self.service = service
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.environment = self.environment
        for key, value in get_log_context().items():
            record.__dict__.setdefault(key, value)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, timestamps in UTC with a ``Z`` suffix."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        moment = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(extra_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class KeyValueFormatter(logging.Formatter):
    """``timestamp [LEVEL] logger: message key=value ...``

    Service and environment are left out since they never change within a process.
    """

    def __init__(self, fmt: str = KEY_VALUE_LAYOUT, datefmt: str = KEY_VALUE_DATEFMT):
        super().__init__(fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = [f"{key}={self.render_value(value)}" for key, value in extra_fields(record, _STATIC_FIELDS)]
        return " ".join([line, *pairs]) if pairs else line

    @staticmethod
    def render_value(value: Any) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (list, dict)):
            return json.dumps(value, ensure_ascii=False)
        text = str(value)
        if isinstance(value, str) and any(sep in text for sep in (" ", "=", ",")):
            return f'"{text}"'
        return text


def configure_logging(
    level: str = "INFO",
    format_type: LogFormat = "key-value",
    environment: str = "local",
    service: str = SERVICE_NAME,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Replace the root logger's handlers with a single configured stream handler.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'json' or 'key-value'
        environment: Environment label stamped on every record
        service: Service name stamped on every record
        stream: Output stream (default: stdout)

    Raises:
        ValueError: If level or format_type is invalid
    """
    level_name = str(getattr(level, "value", level)).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    format_name = getattr(format_type, "value", format_type)
    formatters = {"json": JSONFormatter, "key-value": KeyValueFormatter}
    if format_name not in formatters:
        raise ValueError(f"Invalid log format: {format_name}. Must be 'json' or 'key-value'")

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatters[format_name]())
    handler.addFilter(ContextualFilter(service=service, environment=environment))

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "event": "logging.configured",
            "component": "logging",
            "log_level": level_name,
            "log_format": format_name,
        },
    )
