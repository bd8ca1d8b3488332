"""
Log formatters for request records.

Request records carry their fields as ``extra=`` attributes (request_id,
method, path, body, ...). Both formatters pick those up from the record so
they work with any stdlib logger.
"""

import json
import logging
import traceback
from datetime import datetime
from typing import Any

# Attributes every LogRecord has; anything else came in through ``extra=``
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra=`` fields of a record in insertion order."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


def _sanitize(value: Any) -> Any:
    """Ensure a value is JSON serializable."""
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


class JSONFormatter(logging.Formatter):
    """
    Formatter that converts log records to one JSON object per line.

    Output fields: timestamp, level, logger, message, the record's extra
    fields at the top level, and exception when exc_info is set.
    """

    def __init__(
        self,
        timestamp_format: str = "iso",
        pretty_print: bool = False,
        custom_fields: dict[str, Any] | None = None,
    ):
        """
        Initialize JSON formatter.

        Args:
            timestamp_format: Format for timestamps ("iso", "unix", "epoch")
            pretty_print: Whether to format JSON with indentation
            custom_fields: Additional static fields added to every record
        """
        super().__init__()
        self.timestamp_format = timestamp_format
        self.pretty_print = pretty_print
        self.custom_fields = custom_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        try:
            return self._dict_to_json(self._record_to_dict(record))
        except Exception as e:
            # Fallback to basic JSON if formatting fails
            fallback_data = {
                "timestamp": self._format_timestamp(record),
                "level": record.levelname,
                "logger": record.name,
                "message": str(record.msg),
                "error": f"JSON formatting failed: {e}",
            }
            return self._dict_to_json(fallback_data)

    def _record_to_dict(self, record: logging.LogRecord) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": self._format_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record_extras(record).items():
            data[key] = _sanitize(value)
        if record.exc_info:
            data["exception"] = "".join(traceback.format_exception(*record.exc_info))
        data.update(self.custom_fields)
        return data

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        if self.timestamp_format == "unix":
            return str(record.created)
        if self.timestamp_format == "epoch":
            return str(int(record.created))
        return datetime.fromtimestamp(record.created).isoformat()

    def _dict_to_json(self, data: dict[str, Any]) -> str:
        if self.pretty_print:
            return json.dumps(data, indent=2, ensure_ascii=False)
        return json.dumps(data, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter: standard prefix plus ``[key:value]`` extras.

    Example output:
        2026-01-01 12:00:00,000 INFO bodylog.http HTTP Request [method:POST] [status:200]
    """

    def __init__(self, fmt: str = "%(asctime)s %(levelname)s %(name)s %(message)s"):
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if not extras:
            return line

        parts = [f"[{key}:{value}]" for key, value in extras.items()]
        head, sep, tail = line.partition("\n")
        return f"{head} {' '.join(parts)}{sep}{tail}"
