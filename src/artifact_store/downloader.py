"""
Streams a resolved product file into a caller-owned destination.

The destination is only written to; opening and closing it stays with the
caller. The progress sink is finished whether or not the copy succeeds.
"""

import logging
import shutil
import sys
import time
from typing import BinaryIO, Optional, Protocol, TextIO, Tuple

from artifact_store.common import metrics
from artifact_store.common.exceptions import wrap_exception
from artifact_store.common.logging.utilities import get_logger, log_with_context
from artifact_store.models import FileArtifact
from artifact_store.progress import (
    ProgressFactory,
    ProgressReader,
    ProgressSink,
    rich_progress,
)

logger = get_logger(__name__)

DOWNLOAD_NOTICE = "Downloading product from s3..."
COPY_BUFFER_SIZE = 1024 * 1024  # 1MB


class BlobOpener(Protocol):
    def open(self, name: str) -> Tuple[BinaryIO, int]:
        ...


class ArtifactDownloader:
    """
    Copies a FileArtifact's bytes from the store to a destination.

    Args:
        store: Anything with open(name) -> (stream, size)
        progress_writer: Text stream for the notice and the progress bar
        progress_factory: Builds a ProgressSink bound to progress_writer
    """

    def __init__(
        self,
        store: BlobOpener,
        progress_writer: Optional[TextIO] = None,
        progress_factory: Optional[ProgressFactory] = None,
    ):
        self.store = store
        self.progress_writer = progress_writer or sys.stderr
        self.progress_factory = progress_factory or rich_progress

    def download(self, artifact: FileArtifact, destination: BinaryIO) -> int:
        """
        Stream the artifact into destination.

        Returns:
            Number of bytes copied

        Raises:
            TransportError: If opening or copying fails
            NotFoundError: If the key no longer exists
        """
        stream, size = self.store.open(artifact.name)
        try:
            progress = self.progress_factory(self.progress_writer)
            reader = ProgressReader(stream, progress)
            self._copy(artifact, reader, progress, size, destination)
        finally:
            stream.close()

        log_with_context(
            logger,
            logging.INFO,
            "Download complete",
            artifact=artifact.name,
            bytes_total=size,
            bytes_copied=reader.consumed,
        )
        return reader.consumed

    def _copy(
        self,
        artifact: FileArtifact,
        reader: ProgressReader,
        progress: ProgressSink,
        size: int,
        destination: BinaryIO,
    ) -> None:
        started = time.perf_counter()
        success = False
        try:
            progress.set_total(size)
            self.progress_writer.write(DOWNLOAD_NOTICE)
            progress.start()
            shutil.copyfileobj(reader, destination, COPY_BUFFER_SIZE)
            success = True
        except Exception as e:
            raise wrap_exception(e, context={"artifact": artifact.name})
        finally:
            progress.finish()
            metrics.record_download(
                reader.consumed, time.perf_counter() - started, success=success
            )
