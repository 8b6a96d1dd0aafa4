"""
Standardized Error Handling for Stowage
=======================================

This module provides the error taxonomy shared by every storage backend and
the logging helpers used around backend operations.

Only one condition is normalized across backends: a missing key always
surfaces as ``NotFoundError``. Every other backend failure (``OSError``,
``botocore.exceptions.ClientError``, ``redis.exceptions.RedisError``) is
passed through unchanged.
"""

import functools
import logging
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base exception for all storage-related errors."""

    log_level = logging.ERROR

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.context = context or {}
        super().__init__(message)

        # Log error with context for debugging
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        logger.log(
            self.log_level,
            f"Storage error: {message}" + (f" ({context_str})" if context_str else ""),
        )


class NotFoundError(StorageError):
    """Raised when no object exists under the requested key.

    Callers routinely branch on this to tell "create" from "update", so it is
    logged at debug level only.
    """

    log_level = logging.DEBUG

    def __init__(self, key: str, context: Optional[Dict[str, Any]] = None):
        self.key = key
        error_context = {"key": key}
        error_context.update(context or {})
        super().__init__("Not found", error_context)


class MalformedResponseError(StorageError):
    """Raised when a backend reply has a shape the adapter cannot interpret."""

    pass


class StorageConfigurationError(StorageError, ValueError):
    """Raised when storage configuration is invalid."""

    pass


def log_storage_performance(func: Callable) -> Callable:
    """Decorator to log timing for storage operations.

    ``NotFoundError`` is an expected outcome and is not reported as a failure.
    Other ``StorageError``s log themselves when raised, so they are only
    traced at debug level here.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()

        try:
            result = func(*args, **kwargs)
        except NotFoundError:
            duration = time.time() - start_time
            logger.debug(f"Storage operation {func.__name__} missed in {duration:.3f}s")
            raise
        except StorageError as e:
            duration = time.time() - start_time
            logger.debug(
                f"Storage operation {func.__name__} raised "
                f"{type(e).__name__} after {duration:.3f}s"
            )
            raise
        except Exception as e:
            duration = time.time() - start_time
            logger.warning(
                f"Storage operation {func.__name__} failed after {duration:.3f}s: {e}"
            )
            raise

        duration = time.time() - start_time
        logger.debug(f"Storage operation {func.__name__} completed in {duration:.3f}s")
        return result

    return wrapper


def handle_missing_dependency(module_name: str, required_for: str) -> None:
    """
    Raise a configuration error for an optional client library that is not installed.

    Args:
        module_name: Distribution name to install (e.g. "boto3")
        required_for: Which backend needs it

    Raises:
        StorageConfigurationError: Always
    """
    error_msg = f"Missing dependency '{module_name}' required for {required_for}"
    logger.error(f"{error_msg}. Install with: pip install {module_name}")
    raise StorageConfigurationError(
        error_msg, {"module_name": module_name, "required_for": required_for}
    )
