"""
Prometheus metrics for artifact resolution and download.

Provides instrumentation for:
- Bucket listings
- Resolution outcomes by failure stage
- Download counts, bytes and duration
"""

from prometheus_client import Counter, Histogram

listings_total = Counter(
    "artifact_store_listings_total",
    "Total number of bucket listings",
    ["status"],  # status: success, error
)

listed_files_total = Counter(
    "artifact_store_listed_files_total",
    "Total number of keys returned by bucket listings",
)

resolutions_total = Counter(
    "artifact_store_resolutions_total",
    "Total number of artifact resolutions by outcome",
    ["outcome"],  # outcome: resolved, no_prefix_match, glob_matches_none, ambiguous
)

downloads_total = Counter(
    "artifact_store_downloads_total",
    "Total number of artifact downloads",
    ["status"],  # status: success, error
)

download_bytes_total = Counter(
    "artifact_store_download_bytes_total",
    "Total bytes copied from the object store",
)

download_duration_seconds = Histogram(
    "artifact_store_download_duration_seconds",
    "Time spent streaming an artifact to its destination",
    buckets=(0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0, 1800.0),
)


def record_listing(file_count: int, success: bool = True) -> None:
    """
    Record a bucket listing.

    Args:
        file_count: Number of keys listed
        success: Whether the listing succeeded
    """
    status = "success" if success else "error"
    listings_total.labels(status=status).inc()
    if success:
        listed_files_total.inc(file_count)


def record_resolution(outcome: str) -> None:
    """
    Record a resolution outcome.

    Args:
        outcome: resolved, no_prefix_match, glob_matches_none or ambiguous
    """
    resolutions_total.labels(outcome=outcome).inc()


def record_download(bytes_copied: int, duration_seconds: float, success: bool = True) -> None:
    """
    Record a download.

    Args:
        bytes_copied: Bytes written to the destination
        duration_seconds: Wall time of the copy
        success: Whether the download completed
    """
    status = "success" if success else "error"
    downloads_total.labels(status=status).inc()
    download_bytes_total.inc(bytes_copied)
    download_duration_seconds.observe(duration_seconds)


__all__ = [
    "listings_total",
    "listed_files_total",
    "resolutions_total",
    "downloads_total",
    "download_bytes_total",
    "download_duration_seconds",
    "record_listing",
    "record_resolution",
    "record_download",
]
