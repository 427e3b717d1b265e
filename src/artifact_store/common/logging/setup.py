"""
Opt-in log output for applications embedding artifact_store.

The library only emits records under the "artifact_store" logger, which
carries a NullHandler from import time. An application that wants the
package's own formatting calls configure_logging() once:

    configure_logging(level=logging.DEBUG, json_format=True, bucket="releases")

Handlers are attached to the package logger only; the root logger and
any handlers the application installed are left alone.
"""

import logging
import secrets
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from artifact_store.common.logging.constants import (
    DEFAULT_LEVEL,
    NOISY_LOGGERS,
    PACKAGE_LOGGER,
)
from artifact_store.common.logging.context import clear_log_context, set_log_context
from artifact_store.common.logging.formatters import ConsoleFormatter, JSONFormatter

# Marks handlers installed here so reconfiguring replaces only those
_OWNED = "_artifact_store_owned"


def configure_logging(
    level: int = DEFAULT_LEVEL,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
    log_file: Optional[Path] = None,
    bucket: Optional[str] = None,
    run_id: Optional[str] = None,
    quiet_backends: bool = True,
) -> logging.Logger:
    """
    Send artifact_store records to a stream and, optionally, a file.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Level for the package logger
        json_format: JSON lines on the stream instead of console text
        stream: Output stream (default: sys.stderr, read at call time)
        log_file: Also append JSON lines to this file
        bucket: Bucket name injected into every record
        run_id: Run identifier injected into every record (generated if omitted)
        quiet_backends: Raise boto3/botocore/urllib3 loggers to WARNING

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    _remove_owned_handlers(logger)

    set_log_context(bucket=bucket, run_id=run_id or generate_run_id())

    stream_handler = logging.StreamHandler(stream or sys.stderr)
    stream_handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    handlers: List[logging.Handler] = [stream_handler]

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _OWNED, True)
        logger.addHandler(handler)

    logger.setLevel(level)
    # Records would otherwise print twice when the application logs at root too
    logger.propagate = False

    if quiet_backends:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def reset_logging() -> None:
    """Undo configure_logging(): drop its handlers and hand records back to the root logger."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    _remove_owned_handlers(logger)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    clear_log_context()


def _remove_owned_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _OWNED, False):
            logger.removeHandler(handler)
            handler.close()


def generate_run_id() -> str:
    """
    Generate unique run identifier.

    Format: r-YYYYMMDD-HHMMSS-XXXX where XXXX is random hex.
    """
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    return f"r-{ts}-{secrets.token_hex(2)}"
