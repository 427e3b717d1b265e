"""
S3 product source client.

Ties configuration, bucket access, resolution and download together:

    client = S3Client(BlobStoreGateway(), load_config(Path("s3.yml")))
    versions = client.get_all_product_versions("elastic-runtime")
    artifact = client.get_latest_product_file("elastic-runtime", versions[-1], "srt-*.pivotal")
    with open("srt.pivotal", "wb") as f:
        client.download_product_to_file(artifact, f)
"""

import logging
import sys
from typing import Any, BinaryIO, List, Mapping, Optional, TextIO, Union

from artifact_store.common.exceptions import UnsupportedError
from artifact_store.common.logging.utilities import get_logger, logged_operation
from artifact_store.config import S3Configuration, parse_configuration
from artifact_store.downloader import ArtifactDownloader
from artifact_store.models import FileArtifact
from artifact_store.progress import ProgressFactory
from artifact_store.resolver import ArtifactResolver
from artifact_store.store import BucketStore, Stower


class S3Client:
    """
    Resolves and downloads product files kept in an S3 bucket.

    Configuration is validated before anything touches the network; an
    invalid configuration raises ValidationError from the constructor.

    Args:
        stower: Gateway used to dial the store (BlobStoreGateway in production)
        config: S3Configuration or a mapping with the YAML key names
        progress_writer: Where the download notice and progress bar go
        progress_factory: Builds the progress sink (rich bar by default)
    """

    def __init__(
        self,
        stower: Stower,
        config: Union[S3Configuration, Mapping[str, Any]],
        progress_writer: Optional[TextIO] = None,
        progress_factory: Optional[ProgressFactory] = None,
    ):
        self.settings = parse_configuration(config)
        self.config = self.settings.to_config_map()
        self.bucket = self.settings.bucket
        self.path = self.settings.path
        self._logger = get_logger(__name__)

        self._store = BucketStore(stower, self.bucket, self.config)
        self._resolver = ArtifactResolver(self._store, self.path)
        self._downloader = ArtifactDownloader(
            self._store,
            progress_writer=progress_writer or sys.stderr,
            progress_factory=progress_factory,
        )

    @logged_operation(level=logging.DEBUG)
    def get_all_product_versions(self, slug: str) -> List[str]:
        return self._resolver.list_versions(slug)

    @logged_operation(level=logging.DEBUG)
    def get_latest_product_file(self, slug: str, version: str, glob: str) -> FileArtifact:
        return self._resolver.resolve(slug, version, glob)

    @logged_operation(level=logging.INFO, log_start=True)
    def download_product_to_file(self, artifact: FileArtifact, destination: BinaryIO) -> int:
        return self._downloader.download(artifact, destination)

    def download_product_stemcell(self, artifact: FileArtifact):
        raise UnsupportedError(
            "downloading stemcells for s3 is not supported at this time",
            context={"artifact": artifact.name},
        )
