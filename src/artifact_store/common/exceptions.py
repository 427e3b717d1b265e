"""
Common exception types and error classification for artifact_store.

Provides:
- ErrorCategory enum for retry decisions made by callers
- NotFoundKind enum naming the filter stage that came up empty
- Typed exception hierarchy for resolution and download errors
- wrap_exception() for lifting backend errors into the hierarchy
"""

from enum import Enum
from typing import List, Optional


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Nothing in this package retries. The category only tells the caller
    whether a retry layered above the client could plausibly succeed.

    Categories:
        TRANSIENT: I/O failures talking to the object store
                   (e.g., connection reset, throttling, 5xx)
        PERMANENT: Failures that won't change on retry
                   (e.g., bad configuration, unknown slug, ambiguous glob)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class NotFoundKind(Enum):
    """Which lookup stage found zero candidates."""

    NO_FILES_FOR_SLUG = "no_files_for_slug"
    NO_PREFIX_MATCH = "no_prefix_match"
    GLOB_MATCHES_NONE = "glob_matches_none"
    NO_SUCH_KEY = "no_such_key"


class ArtifactStoreError(Exception):
    """
    Base exception for all artifact_store errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict (slug, version, glob, endpoint...)
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether a caller-level retry could succeed."""
        return self.category in (ErrorCategory.TRANSIENT, ErrorCategory.UNKNOWN)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Transient Errors
# =============================================================================


class TransientError(ArtifactStoreError):
    """Base class for transient errors."""

    category = ErrorCategory.TRANSIENT


class TransportError(TransientError):
    """Connecting, listing or streaming from the object store failed."""

    pass


# =============================================================================
# Permanent Errors
# =============================================================================


class PermanentError(ArtifactStoreError):
    """Base class for permanent errors."""

    category = ErrorCategory.PERMANENT


class ValidationError(PermanentError):
    """Configuration or input validation failed."""

    @property
    def fields(self) -> List[str]:
        """Names of the fields that failed validation."""
        return list(self.context.get("fields", []))


class ConfigurationError(PermanentError):
    """Configuration file missing or unreadable."""

    pass


class NotFoundError(PermanentError):
    """A lookup stage matched nothing."""

    def __init__(
        self,
        message: str,
        kind: NotFoundKind,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message, cause, context)
        self.kind = kind


class AmbiguousMatchError(PermanentError):
    """A glob matched more than one file."""

    def __init__(
        self,
        message: str,
        matches: List[str],
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message, cause, context)
        self.matches = list(matches)


class InvalidEndpointError(PermanentError):
    """Bucket could not be resolved through a configured custom endpoint."""

    def __init__(
        self,
        endpoint: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        detail = cause.message if isinstance(cause, ArtifactStoreError) else str(cause)
        message = INVALID_ENDPOINT_MESSAGE_TEMPLATE % (endpoint, detail)
        ctx = {"endpoint": endpoint}
        ctx.update(context or {})
        super().__init__(message, cause, ctx)
        self.endpoint = endpoint

    def __str__(self) -> str:
        # Message already embeds the cause
        return self.message


class UnsupportedError(PermanentError):
    """Requested capability is not implemented by this backend."""

    pass


INVALID_ENDPOINT_MESSAGE_TEMPLATE = "Could not reach provided endpoint: '%s': %s"


def wrap_exception(
    exc: Exception,
    context: Optional[dict] = None,
) -> ArtifactStoreError:
    """
    Wrap a generic exception in the package hierarchy.

    Package errors pass through (with context merged in). Anything else
    is an I/O failure from the backend or the destination and becomes a
    TransportError carrying the original message and cause.

    Args:
        exc: Exception to wrap
        context: Additional context to include

    Returns:
        ArtifactStoreError instance
    """
    if isinstance(exc, ArtifactStoreError):
        if context:
            exc.context.update(context)
        return exc

    return TransportError(str(exc), cause=exc, context=context)
