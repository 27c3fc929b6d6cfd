"""Observability module for ADMS.

Provides structured logging, operation ids and operation outcome logging.
"""

from .logging_config import configure_logging
from .operation_id import (
    operation_id_var,
    generate_operation_id,
    get_operation_id,
    set_operation_id,
    reset_operation_id,
)
from .operations import logged_operation

__all__ = [
    # Logging
    "configure_logging",
    # Operation ID
    "operation_id_var",
    "generate_operation_id",
    "get_operation_id",
    "set_operation_id",
    "reset_operation_id",
    # Operations
    "logged_operation",
]
