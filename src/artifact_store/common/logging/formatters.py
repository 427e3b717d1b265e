"""Log formatters for JSON and console output."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from artifact_store.common.logging.context import get_log_context


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter with context injection.

    Produces one JSON object per line for easy parsing with jq/grep.
    """

    # Fields to extract from LogRecord extras
    EXTRA_FIELDS = [
        # Artifact identity
        "slug",
        "version",
        "glob",
        "artifact",
        "path",
        # Store
        "bucket",
        "endpoint",
        "file_count",
        "match_count",
        # Transfer
        "bytes_total",
        "bytes_copied",
        "duration_ms",
        # Errors
        "error_category",
        "error_message",
        "operation",
    ]

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3]
            + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        ctx = get_log_context()
        if ctx["run_id"]:
            log_entry["run_id"] = ctx["run_id"]
        if ctx["bucket"]:
            log_entry["bucket"] = ctx["bucket"]

        # Add source location for DEBUG/ERROR
        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter.

    Includes context when available.
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_log_context()

        parts = [
            datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            record.levelname,
        ]

        if ctx["bucket"]:
            parts.append(f"[{ctx['bucket']}]")

        prefix = " - ".join(parts)

        slug = getattr(record, "slug", None)
        if slug:
            return f"{prefix} - [{slug}] {record.getMessage()}"

        return f"{prefix} - {record.getMessage()}"
