"""Operation ID management for log correlation.

Every public service operation runs under one operation id, propagated across
awaits through a ContextVar.
"""

import uuid
from contextvars import ContextVar, Token
from typing import Optional

# Context variable for operation_id (async-safe)
operation_id_var: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)


def generate_operation_id() -> str:
    """Generate a new unique operation ID (UUID v4)."""
    return str(uuid.uuid4())


def get_operation_id() -> str:
    """Get current operation ID from context.

    Returns:
        str: Current operation ID or "no-operation-id" if not set
    """
    return operation_id_var.get() or "no-operation-id"


def set_operation_id(operation_id: str) -> Token:
    """Set operation ID in current context.

    Returns:
        Token to restore the previous value with ``reset_operation_id``
    """
    return operation_id_var.set(operation_id)


def reset_operation_id(token: Token) -> None:
    operation_id_var.reset(token)
