"""
Utility decorators for engine operation logging.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

# Arguments copied into the log context when an operation takes them
_CONTEXT_PARAMS = ("asset", "position_id", "close_price", "order", "prices")

F = TypeVar("F", bound=Callable[..., Any])


def _loggable(value: Any) -> Any:
    """Convert an argument into a plain value for the log record."""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _loggable(item) for key, item in value.items()}
    if hasattr(value, "asset") and hasattr(value, "leverage"):
        # OpenOrder
        return f"{value.asset} x{value.leverage}"
    return value


def _operation_context(func: Callable[..., Any], args: tuple, kwargs: dict) -> dict[str, Any]:
    """Build the log context shared by every record of one call."""
    bound = inspect.signature(func).bind(*args, **kwargs)
    bound.apply_defaults()

    context: dict[str, Any] = {"correlation_id": uuid.uuid4().hex[:8]}
    for name in _CONTEXT_PARAMS:
        if name in bound.arguments:
            context[name] = _loggable(bound.arguments[name])
    return context


def _summarize_result(result: Any) -> Any:
    """Short form of a return value: scalars as-is, typed results by status."""
    if isinstance(result, bool | int | float | str):
        return result
    status = getattr(result, "status", None)
    if isinstance(status, Enum):
        return status.value
    return None


def log_operation(func: F) -> F:
    """Decorator to log engine operations with correlation IDs.

    Logs entry at INFO, completion at SUCCESS and failure at ERROR, then
    re-raises. Each record carries the call's context in ``extra``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        from loguru import logger

        name = func.__name__
        context = _operation_context(func, args, kwargs)
        logger.info(f"Engine operation started: {name}", extra=context)
        started = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"Engine operation failed: {name}",
                extra={
                    **context,
                    "success": False,
                    "execution_time_ms": round((time.perf_counter() - started) * 1000, 2),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise

        success_context = {
            **context,
            "success": True,
            "execution_time_ms": round((time.perf_counter() - started) * 1000, 2),
            "result_type": type(result).__name__,
        }
        summary = _summarize_result(result)
        if summary is not None:
            success_context["result"] = summary
        logger.success(f"Engine operation completed: {name}", extra=success_context)
        return result

    return wrapper  # type: ignore
