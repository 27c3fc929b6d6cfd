"""Operation logging for service entry points.

Wraps an async service method so that it runs under an operation id and its
outcome is logged with the entity ids it was called with and its elapsed time.
A result of ``None`` or ``False`` is an expected failure and logs a warning.
"""

import asyncio
import functools
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Dict, TypeVar

from .operation_id import generate_operation_id, operation_id_var, reset_operation_id, set_operation_id

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def _entity_ids(signature: inspect.Signature, args: tuple, kwargs: dict) -> Dict[str, str]:
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return {}
    ids = {
        name: str(value)
        for name, value in bound.arguments.items()
        if name.endswith("_id") and value is not None
    }
    actor = bound.arguments.get("actor")
    if actor is not None and getattr(actor, "id", None) is not None:
        ids["user_id"] = str(actor.id)
    return ids


def logged_operation(name: str) -> Callable[[F], F]:
    """Decorator for public async service operations.

    Nested operations reuse the caller's operation id.
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            token = None
            if operation_id_var.get() is None:
                token = set_operation_id(generate_operation_id())

            extra: Dict[str, Any] = {"operation": name, **_entity_ids(signature, args, kwargs)}
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
                extra["duration_ms"] = _elapsed_ms(start_time)
                if result is None or result is False:
                    logger.warning(f"Operation {name} failed", extra=extra)
                else:
                    logger.info(f"Operation {name} completed", extra=extra)
                return result
            except asyncio.CancelledError:
                extra["duration_ms"] = _elapsed_ms(start_time)
                logger.info(f"Operation {name} cancelled", extra=extra)
                raise
            except Exception as e:
                extra["duration_ms"] = _elapsed_ms(start_time)
                extra["error_type"] = type(e).__name__
                logger.error(f"Operation {name} raised: {e}", extra=extra, exc_info=True)
                raise
            finally:
                if token is not None:
                    reset_operation_id(token)

        return wrapper  # type: ignore[return-value]

    return decorator


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)
