"""Logging setup and tracing utilities."""

import inspect
import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from erp.core.config import settings

# Logger
logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the API process."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # matplotlib is chatty about font discovery at INFO
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


def _log_start(function_name: str) -> float:
    logger.info(f"Starting {function_name}", extra={"function": function_name})
    return time.perf_counter()


def _log_success(function_name: str, start_time: float) -> None:
    logger.info(
        f"Completed {function_name}",
        extra={
            "function": function_name,
            "duration": time.perf_counter() - start_time,
            "status": "success",
        },
    )


def _log_failure(function_name: str, start_time: float, error: Exception) -> None:
    logger.error(
        f"Failed {function_name}",
        extra={
            "function": function_name,
            "duration": time.perf_counter() - start_time,
            "status": "error",
            "error": str(error),
        },
        exc_info=True,
    )


def trace_function(name: str | None = None) -> Callable[[F], F]:
    """Decorator to trace function execution."""
    def decorator(func: F) -> F:
        function_name = name or f"{func.__module__}.{func.__name__}"

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = _log_start(function_name)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _log_failure(function_name, start_time, e)
                raise
            _log_success(function_name, start_time)
            return result

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = _log_start(function_name)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_failure(function_name, start_time, e)
                raise
            _log_success(function_name, start_time)
            return result

        # Return appropriate wrapper based on function type
        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
