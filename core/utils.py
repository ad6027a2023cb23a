import functools
import inspect
import logging
import re
from collections.abc import Callable
from typing import Any

from googleapiclient.errors import HttpError

from core.errors import (
    CapabilityUnavailable,
    ConversionWarning,
    Md2DocError,
    SinkFailure,
    capability_unavailable,
)

logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def validate_hex_color(value: str, param_name: str = "color") -> str:
    """Validate a #RRGGBB colour string and return it upper-cased."""
    if not isinstance(value, str) or not _HEX_COLOR_RE.match(value.strip()):
        raise ValueError(f"{param_name} must be a hex string in the form #RRGGBB, got {value!r}")
    return value.strip().upper()


def best_effort(operation: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> ConversionWarning | None:
    """
    Run an optional cosmetic host operation.

    Only `CapabilityUnavailable` is absorbed: it is logged and returned as a
    warning. Every other exception propagates to the caller.

    Args:
        operation: Human-readable name of the operation, used in the warning.
        func: The sink method to call.

    Returns:
        None on success, otherwise a CAPABILITY_UNAVAILABLE warning.
    """
    try:
        func(*args, **kwargs)
    except CapabilityUnavailable as e:
        logger.warning(f"Skipping {operation}: {e}")
        return capability_unavailable(f"{operation} skipped: {e}")
    return None


def _to_sink_failure(operation: str, error: Exception) -> SinkFailure:
    if isinstance(error, HttpError):
        status = getattr(error.resp, "status", None)
        message = f"Host rejected {operation}: {error}"
        logger.error(message, exc_info=True)
        return SinkFailure(message, status_code=int(status) if status is not None else None)

    message = f"An unexpected error occurred in {operation}: {error}"
    logger.exception(message)
    return SinkFailure(message)


def handle_host_errors(operation: str):
    """
    A decorator translating host API errors into `SinkFailure`.

    Works on both plain methods and coroutines. md2doc errors (including
    `CapabilityUnavailable`) pass through untouched. No retries are attempted.

    Args:
        operation (str): Name of the decorated operation (e.g., 'commit').
    """

    def decorator(func):
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except Md2DocError:
                    raise
                except Exception as e:
                    raise _to_sink_failure(operation, e) from e

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Md2DocError:
                raise
            except Exception as e:
                raise _to_sink_failure(operation, e) from e

        return wrapper

    return decorator
