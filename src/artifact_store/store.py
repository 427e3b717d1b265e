"""
Per-call access to the configured bucket.

Every list or open dials a fresh location and resolves the container;
nothing is cached between calls.
"""

import logging
from typing import BinaryIO, List, Optional, Protocol, Tuple

from artifact_store.common import metrics
from artifact_store.common.exceptions import (
    ArtifactStoreError,
    InvalidEndpointError,
    wrap_exception,
)
from artifact_store.common.logging.utilities import get_logger, log_with_context
from artifact_store.gateway.base import (
    DEFAULT_PAGE_SIZE,
    NO_PREFIX,
    ConfigMap,
    Container,
    Item,
    Location,
)
from artifact_store.gateway.s3 import CONFIG_ENDPOINT, KIND

logger = get_logger(__name__)


class Stower(Protocol):
    """What BucketStore needs from a gateway."""

    def dial(self, kind: str, config: ConfigMap) -> Location:
        ...

    def walk(self, container: Container, prefix: str, page_size: int):
        ...


class LocationStream:
    """Readable stream that closes its location when closed."""

    def __init__(self, stream: BinaryIO, location: Location):
        self._stream = stream
        self._location = location
        self.closed = False

    def read(self, size: Optional[int] = None) -> bytes:
        if size is None or size < 0:
            return self._stream.read()
        return self._stream.read(size)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._stream.close()
        finally:
            self._location.close()

    def __getattr__(self, name: str):
        return getattr(self._stream, name)


class BucketStore:
    """
    Lists and opens objects in one bucket.

    A failure to resolve the bucket while a custom endpoint is configured
    is raised as InvalidEndpointError; without an endpoint the transport
    error propagates unchanged.
    """

    def __init__(
        self,
        stower: Stower,
        bucket: str,
        config: ConfigMap,
        kind: str = KIND,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.stower = stower
        self.bucket = bucket
        self.config = config
        self.kind = kind
        self.page_size = page_size

    def list_files(self) -> List[str]:
        """All keys in the bucket, in listing order. May be empty."""
        try:
            location = self.stower.dial(self.kind, self.config)
            try:
                container = self._container(location)
                paths = [
                    item.id
                    for item in self.stower.walk(container, NO_PREFIX, self.page_size)
                ]
            finally:
                location.close()
        except Exception as e:
            metrics.record_listing(0, success=False)
            raise wrap_exception(e, context={"bucket": self.bucket})

        metrics.record_listing(len(paths))
        log_with_context(
            logger,
            logging.DEBUG,
            "Listed bucket",
            bucket=self.bucket,
            file_count=len(paths),
        )
        return paths

    def open(self, name: str) -> Tuple[BinaryIO, int]:
        """
        Open an object for reading.

        The location stays open until the returned stream is closed.

        Returns:
            (stream, size); size is 0 when the backend can't report it
        """
        try:
            location = self.stower.dial(self.kind, self.config)
            try:
                container = self._container(location)
                item: Item = container.item(name)
                size = item.size()
                stream = item.open()
            except Exception:
                location.close()
                raise
        except Exception as e:
            raise wrap_exception(e, context={"bucket": self.bucket, "artifact": name})
        return LocationStream(stream, location), size

    def _container(self, location: Location) -> Container:
        try:
            return location.container(self.bucket)
        except Exception as e:
            endpoint, _ = self.config.config(CONFIG_ENDPOINT)
            if endpoint:
                cause = e if isinstance(e, ArtifactStoreError) else wrap_exception(e)
                raise InvalidEndpointError(
                    endpoint, cause=cause, context={"bucket": self.bucket}
                ) from e
            raise
