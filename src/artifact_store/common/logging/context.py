"""Log context variables injected into every formatted record."""

from contextvars import ContextVar
from typing import Dict, Optional

_bucket: ContextVar[Optional[str]] = ContextVar("bucket", default=None)
_run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def set_log_context(
    bucket: Optional[str] = None,
    run_id: Optional[str] = None,
) -> None:
    """Set context values. Arguments left as None are not changed."""
    if bucket is not None:
        _bucket.set(bucket)
    if run_id is not None:
        _run_id.set(run_id)


def get_log_context() -> Dict[str, Optional[str]]:
    return {"bucket": _bucket.get(), "run_id": _run_id.get()}


def clear_log_context() -> None:
    _bucket.set(None)
    _run_id.set(None)
