"""
Common infrastructure shared across artifact_store.

Provides:
- exceptions: Error hierarchy and classification
- logging: Logger setup, formatters and structured logging helpers
- metrics: Prometheus counters for listing, resolution and download
"""

from artifact_store.common.exceptions import (
    AmbiguousMatchError,
    ArtifactStoreError,
    ConfigurationError,
    ErrorCategory,
    InvalidEndpointError,
    NotFoundError,
    NotFoundKind,
    PermanentError,
    TransientError,
    TransportError,
    UnsupportedError,
    ValidationError,
    wrap_exception,
)

__all__ = [
    "AmbiguousMatchError",
    "ArtifactStoreError",
    "ConfigurationError",
    "ErrorCategory",
    "InvalidEndpointError",
    "NotFoundError",
    "NotFoundKind",
    "PermanentError",
    "TransientError",
    "TransportError",
    "UnsupportedError",
    "ValidationError",
    "wrap_exception",
]
