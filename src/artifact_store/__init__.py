"""
artifact_store: resolve and download versioned product files from S3.

Product files are stored as `<path>/[<slug>,<version>]<filename>`.
"""

import logging

from artifact_store.client import S3Client
from artifact_store.common.logging.setup import configure_logging, reset_logging
from artifact_store.config import S3Configuration, load_config
from artifact_store.gateway import BlobStoreGateway, InMemoryGateway
from artifact_store.models import FileArtifact

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BlobStoreGateway",
    "FileArtifact",
    "InMemoryGateway",
    "S3Client",
    "S3Configuration",
    "configure_logging",
    "load_config",
    "reset_logging",
]
