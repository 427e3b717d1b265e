"""Logging utility functions."""

import functools
import logging
import time
from typing import Any, Callable, Dict, Optional, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Additional context fields (slug, version, duration_ms, etc.)

    Example:
        log_with_context(
            logger, logging.INFO, "Download complete",
            artifact=artifact.name,
            bytes_copied=copied,
        )
    """
    logger.log(level, msg, extra=kwargs)


def log_exception(
    logger: logging.Logger,
    exc: Exception,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log exception with context and optional traceback.

    Automatically extracts error_category from ArtifactStoreError subclasses.

    Args:
        logger: Logger instance
        exc: Exception to log
        msg: Context message
        level: Log level (default: ERROR)
        include_traceback: Include full traceback (default: True)
        **kwargs: Additional context fields
    """
    error_category = kwargs.get("error_category")
    if error_category is None and hasattr(exc, "category"):
        cat = exc.category
        error_category = cat.value if hasattr(cat, "value") else str(cat)
        kwargs["error_category"] = error_category

    error_msg = str(exc)
    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."
    kwargs["error_message"] = error_msg

    if include_traceback:
        logger.log(level, msg, exc_info=exc, extra=kwargs)
    else:
        logger.log(level, msg, extra=kwargs)


def _extract_instance_context(obj: Any) -> Dict[str, Any]:
    """
    Extract loggable context from instance attributes.

    Looks for common identifier fields.
    """
    ctx: Dict[str, Any] = {}

    for attr in ["bucket", "path"]:
        if hasattr(obj, attr):
            value = getattr(obj, attr)
            if value:
                ctx[attr] = value

    return ctx


def logged_operation(
    level: int = logging.DEBUG,
    log_start: bool = False,
    operation_name: Optional[str] = None,
) -> Callable[[F], F]:
    """
    Decorator for automatic operation logging on class methods.

    Failures are logged without traceback at WARNING and re-raised; the
    caller decides what an error means.

    Args:
        level: Log level for completion message
        log_start: Also log when operation starts
        operation_name: Override operation name (default: method_name)

    Example:
        class S3Client:
            @logged_operation(level=logging.DEBUG)
            def get_all_product_versions(self, slug):
                ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            _logger = getattr(self, "_logger", None) or get_logger(
                self.__class__.__module__
            )
            op_name = operation_name or func.__name__
            full_op = f"{self.__class__.__name__}.{op_name}"
            ctx = _extract_instance_context(self)

            if log_start:
                log_with_context(_logger, level, f"{full_op} starting", **ctx)

            start = time.perf_counter()
            try:
                result = func(self, *args, **kwargs)
            except Exception as e:
                log_exception(
                    _logger,
                    e,
                    f"{full_op} failed",
                    level=logging.WARNING,
                    include_traceback=False,
                    operation=full_op,
                    **ctx,
                )
                raise
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            log_with_context(
                _logger,
                level,
                f"{full_op} completed",
                operation=full_op,
                duration_ms=duration_ms,
                **ctx,
            )
            return result

        return wrapper  # type: ignore

    return decorator
