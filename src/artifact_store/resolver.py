"""
Product file resolution over a bucket listing.

Two queries:
    - list_versions(slug): distinct versions present for a product
    - resolve(slug, version, glob): the one file for a product version
      whose base name matches a shell-style glob

Resolution filters twice: first by the exact [slug,version] tag, then by
glob on the base filename (syntax in naming.compile_glob). This lets
callers pick among variants of one release (linux/windows builds, ...)
without knowing exact names.
"""

import logging
from typing import Dict, List, Protocol

from artifact_store.common import metrics
from artifact_store.common.exceptions import (
    AmbiguousMatchError,
    NotFoundError,
    NotFoundKind,
    ValidationError,
)
from artifact_store.common.logging.utilities import get_logger, log_with_context
from artifact_store.models import FileArtifact
from artifact_store.naming import ProductFileNaming, compile_glob

logger = get_logger(__name__)

NO_PREFIX_MATCH_MESSAGE = (
    "no product files with expected prefix [%s,%s] found. Please ensure the "
    "file you're trying to download was initially persisted from Pivotal Network "
    "using an appropriately configured download-product command"
)


class FileLister(Protocol):
    def list_files(self) -> List[str]:
        ...


class ArtifactResolver:
    """
    Answers version and file queries for products stored under `path`.

    Args:
        store: Anything with list_files() -> List[str]
        path: Bucket-internal prefix (may be empty)
    """

    def __init__(self, store: FileLister, path: str = ""):
        self.store = store
        self.path = path or ""

    def list_versions(self, slug: str) -> List[str]:
        """
        Distinct versions of a product, in the order first seen in the listing.

        Raises:
            ValidationError: If slug is empty
            NotFoundError: If no key belongs to the product
            TransportError: If listing fails
        """
        if not slug:
            raise ValidationError("product slug cannot be empty", context={"fields": ["slug"]})

        naming = ProductFileNaming(self.path, slug)
        versions: Dict[str, None] = {}
        for key in self.store.list_files():
            version = naming.match_version(key)
            if version is not None:
                versions.setdefault(version, None)

        if not versions:
            raise NotFoundError(
                f"no files matching pivnet-product-slug {slug} found",
                kind=NotFoundKind.NO_FILES_FOR_SLUG,
                context={"slug": slug, "path": self.path},
            )

        log_with_context(
            logger,
            logging.DEBUG,
            "Found product versions",
            slug=slug,
            match_count=len(versions),
        )
        return list(versions)

    def resolve(self, slug: str, version: str, glob: str) -> FileArtifact:
        """
        The single file tagged [slug,version] whose base name matches glob.

        Raises:
            ValidationError: If the glob is malformed
            NotFoundError: No file carries the tag, or none matches the glob
            AmbiguousMatchError: More than one tagged file matches the glob
            TransportError: If listing fails
        """
        naming = ProductFileNaming(self.path, slug)
        pattern = compile_glob(glob)
        context = {"slug": slug, "version": version, "glob": glob, "path": self.path}

        prefixed = [key for key in self.store.list_files() if naming.matches(key, version)]
        if not prefixed:
            metrics.record_resolution(NotFoundKind.NO_PREFIX_MATCH.value)
            raise NotFoundError(
                NO_PREFIX_MATCH_MESSAGE % (slug, version),
                kind=NotFoundKind.NO_PREFIX_MATCH,
                context=context,
            )

        matched = [key for key in prefixed if pattern.fullmatch(_base_name(key))]

        if len(matched) > 1:
            metrics.record_resolution("ambiguous")
            raise AmbiguousMatchError(
                "the glob '%s' matches multiple files. Write your glob to match "
                "exactly one of the following:\n  %s" % (glob, "\n  ".join(matched)),
                matches=matched,
                context=context,
            )

        if not matched:
            metrics.record_resolution(NotFoundKind.GLOB_MATCHES_NONE.value)
            raise NotFoundError(
                f"the glob '{glob}' matches no file",
                kind=NotFoundKind.GLOB_MATCHES_NONE,
                context=context,
            )

        metrics.record_resolution("resolved")
        log_with_context(
            logger,
            logging.INFO,
            "Resolved product file",
            slug=slug,
            version=version,
            glob=glob,
            artifact=matched[0],
        )
        return FileArtifact(name=matched[0])


def _base_name(key: str) -> str:
    return key.rsplit("/", 1)[-1]
