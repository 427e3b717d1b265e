"""
In-memory blob store backend.

Holds buckets as plain dicts of key -> bytes. Used for tests and local
dry runs; every failure mode of the S3 backend can be injected.

Usage:
    gateway = InMemoryGateway({"releases": {"rel/[db,1.2.0]linux.tgz": b"..."}})
    client = S3Client(gateway, config)
"""

import io
from typing import BinaryIO, Dict, List, Optional, Tuple

from artifact_store.common.exceptions import NotFoundError, NotFoundKind, TransportError
from artifact_store.gateway.base import CURSOR_START, BlobStoreGateway, ConfigMap

Buckets = Dict[str, Dict[str, bytes]]


class MemoryItem:
    def __init__(self, key: str, data: bytes, report_size: bool = True):
        self._key = key
        self._data = data
        self._report_size = report_size

    @property
    def id(self) -> str:
        return self._key

    def size(self) -> int:
        return len(self._data) if self._report_size else 0

    def open(self) -> BinaryIO:
        return io.BytesIO(self._data)


class MemoryContainer:
    def __init__(self, name: str, objects: Dict[str, bytes], report_size: bool = True):
        self._name = name
        self._objects = objects
        self._report_size = report_size
        self.page_requests: List[Tuple[str, str, int]] = []

    @property
    def id(self) -> str:
        return self._name

    def item(self, key: str) -> MemoryItem:
        if key not in self._objects:
            raise NotFoundError(
                f"object '{key}' not found in bucket '{self._name}'",
                kind=NotFoundKind.NO_SUCH_KEY,
                context={"bucket": self._name, "artifact": key},
            )
        return MemoryItem(key, self._objects[key], self._report_size)

    def items(self, prefix: str, cursor: str, count: int) -> Tuple[List[MemoryItem], str]:
        self.page_requests.append((prefix, cursor, count))
        keys = [k for k in self._objects if k.startswith(prefix)]
        start = int(cursor) if cursor != CURSOR_START else 0
        page = keys[start:start + count]
        end = start + len(page)
        next_cursor = str(end) if end < len(keys) else CURSOR_START
        return [MemoryItem(k, self._objects[k], self._report_size) for k in page], next_cursor


class MemoryLocation:
    def __init__(self, gateway: "InMemoryGateway", config: ConfigMap):
        self._gateway = gateway
        self.config = config
        self.closed = False

    def container(self, name: str) -> MemoryContainer:
        if self._gateway.container_error is not None:
            raise self._gateway.container_error
        if name not in self._gateway.buckets:
            raise TransportError(
                f"bucket '{name}' does not exist", context={"bucket": name}
            )
        container = MemoryContainer(
            name, self._gateway.buckets[name], self._gateway.report_size
        )
        self._gateway.containers.append(container)
        return container

    def close(self) -> None:
        self.closed = True


class InMemoryGateway(BlobStoreGateway):
    """
    Gateway whose every backend kind resolves to in-memory buckets.

    Attributes:
        buckets: bucket name -> {key: bytes}; insertion order is listing order
        dial_error: raised from dial() when set
        container_error: raised from container resolution when set
        report_size: when False, items report size 0 (unknown)
        dials: kinds dialed so far, in order
        locations: locations handed out so far, in order
        containers: containers resolved so far, in order
    """

    def __init__(
        self,
        buckets: Optional[Buckets] = None,
        dial_error: Optional[Exception] = None,
        container_error: Optional[Exception] = None,
        report_size: bool = True,
    ):
        super().__init__(backends={})
        self.buckets: Buckets = buckets if buckets is not None else {}
        self.dial_error = dial_error
        self.container_error = container_error
        self.report_size = report_size
        self.dials: List[str] = []
        self.locations: List[MemoryLocation] = []
        self.containers: List[MemoryContainer] = []

    def dial(self, kind: str, config: ConfigMap) -> MemoryLocation:
        self.dials.append(kind)
        if self.dial_error is not None:
            raise self.dial_error
        location = MemoryLocation(self, config)
        self.locations.append(location)
        return location
