"""
Capability interface for blob store backends.

Provides:
- ConfigMap: string settings handed to a backend when dialing
- Item, Container, Location: protocols a backend implements
- BlobStoreGateway: backend registry plus paged listing (walk)

Every operation here is read-only.
"""

from typing import (
    BinaryIO,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

from artifact_store.common.exceptions import TransportError

NO_PREFIX = ""
CURSOR_START = ""
DEFAULT_PAGE_SIZE = 100


class ConfigMap(Dict[str, str]):
    """
    Backend settings keyed by name.

    Mirrors the lookup style backends expect: config() reports whether a
    value was present at all, separately from the value.
    """

    def config(self, name: str) -> Tuple[str, bool]:
        if name in self:
            return self[name], True
        return "", False

    def set(self, name: str, value: str) -> None:
        self[name] = value


@runtime_checkable
class Item(Protocol):
    """A single stored object."""

    @property
    def id(self) -> str:
        """Full key of the object."""
        ...

    def size(self) -> int:
        """Size in bytes; 0 when the backend can't tell."""
        ...

    def open(self) -> BinaryIO:
        """Open a readable byte stream. Caller closes it."""
        ...


@runtime_checkable
class Container(Protocol):
    """A named bucket within a location."""

    @property
    def id(self) -> str:
        ...

    def item(self, key: str) -> Item:
        ...

    def items(self, prefix: str, cursor: str, count: int) -> Tuple[List[Item], str]:
        """
        One page of items.

        Returns:
            (items, next_cursor); next_cursor is CURSOR_START when exhausted
        """
        ...


@runtime_checkable
class Location(Protocol):
    """A connected backend."""

    def container(self, name: str) -> Container:
        ...

    def close(self) -> None:
        ...


DialFunc = Callable[[ConfigMap], Location]


class BlobStoreGateway:
    """
    Dials backends by kind and walks containers page by page.

    Backends register a dial function under a kind name ("s3", ...).
    The S3 backend is registered by default.

    Usage:
        gateway = BlobStoreGateway()
        location = gateway.dial("s3", config_map)
        container = location.container("my-bucket")
        for item in gateway.walk(container, NO_PREFIX, 100):
            print(item.id)
    """

    def __init__(self, backends: Optional[Dict[str, DialFunc]] = None):
        if backends is None:
            from artifact_store.gateway.s3 import KIND, dial

            backends = {KIND: dial}
        self._backends: Dict[str, DialFunc] = dict(backends)

    def register(self, kind: str, dial: DialFunc) -> None:
        self._backends[kind] = dial

    @property
    def kinds(self) -> List[str]:
        return sorted(self._backends)

    def dial(self, kind: str, config: ConfigMap) -> Location:
        try:
            dial = self._backends[kind]
        except KeyError:
            raise TransportError(
                f"unknown blob store kind '{kind}'",
                context={"kind": kind, "registered": self.kinds},
            )
        return dial(config)

    def walk(
        self,
        container: Container,
        prefix: str = NO_PREFIX,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Iterator[Item]:
        """Yield every item in the container, fetching page_size items at a time."""
        cursor = CURSOR_START
        while True:
            items, cursor = container.items(prefix, cursor, page_size)
            yield from items
            if cursor == CURSOR_START:
                return
