"""
Blob store gateway.

The only layer that performs real I/O. Backends:
    - s3: boto3, AWS S3 and S3-compatible endpoints
    - memory: dict-backed buckets for tests and dry runs
"""

from artifact_store.gateway.base import (
    DEFAULT_PAGE_SIZE,
    NO_PREFIX,
    BlobStoreGateway,
    ConfigMap,
    Container,
    Item,
    Location,
)
from artifact_store.gateway.memory import InMemoryGateway

__all__ = [
    "BlobStoreGateway",
    "ConfigMap",
    "Container",
    "DEFAULT_PAGE_SIZE",
    "InMemoryGateway",
    "Item",
    "Location",
    "NO_PREFIX",
]
