"""Structured logging for the ADMS core.

Every record is stamped with the current operation id. JSON output carries
the ``extra=`` fields (document_id, matter_id, transfer_id, duration_ms, ...)
at the top level so audit and transfer failures can be correlated per
operation.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable
from uuid import UUID

from .operation_id import get_operation_id

# Attributes every LogRecord has; anything else arrived through ``extra=``
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "operation_id"}

TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(operation_id)s - %(name)s.%(funcName)s - %(message)s"

NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def _json_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, datetime)):
        return str(value)
    return value


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields a caller attached to the record with ``extra=``."""
    return {
        key: _json_value(value)
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS
    }


class OperationIDFilter(logging.Filter):
    """Stamp records with the operation id of the running coroutine."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.operation_id = get_operation_id()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "operation_id": getattr(record, "operation_id", "no-operation-id"),
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["error"] = str(record.exc_info[1])
            log_data["traceback"] = self.formatException(record.exc_info)

        for key, value in extra_fields(record).items():
            log_data.setdefault(key, value)

        return json.dumps(log_data, default=str)


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines if True, ``TEXT_FORMAT`` otherwise
        quiet_loggers: Third-party loggers capped at WARNING
    """
    numeric_level = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    handler.addFilter(OperationIDFilter())
    root_logger.addHandler(handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
