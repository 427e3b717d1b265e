"""Values passed between resolution and download."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FileArtifact:
    """A single product file selected for download.

    Attributes:
        name: Full key of the file in the bucket
    """

    name: str
