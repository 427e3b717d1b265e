"""Tests for BucketStore listing, opening and endpoint error reclassification."""

import io

import pytest

from artifact_store.common.exceptions import (
    InvalidEndpointError,
    NotFoundError,
    NotFoundKind,
    TransportError,
)
from artifact_store.downloader import ArtifactDownloader
from artifact_store.gateway.base import ConfigMap
from artifact_store.gateway.memory import InMemoryGateway
from artifact_store.models import FileArtifact
from artifact_store.store import BucketStore


def make_config(endpoint=""):
    return ConfigMap(
        {
            "access_key_id": "AKIATEST",
            "secret_key": "secret",
            "region": "us-east-1",
            "endpoint": endpoint,
            "disable_ssl": "false",
            "v2_signing": "false",
        }
    )


class TestListFiles:
    def test_lists_all_keys_in_order(self, release_gateway):
        store = BucketStore(release_gateway, "releases", make_config())

        assert store.list_files() == [
            "rel/[db,1.2.0]linux.tgz",
            "rel/[db,1.2.0]windows.tgz",
            "rel/[db,2.0.0]linux.tgz",
        ]

    def test_dials_s3_backend(self, release_gateway):
        BucketStore(release_gateway, "releases", make_config()).list_files()

        assert release_gateway.dials == ["s3"]

    def test_pages_through_listing(self):
        objects = {f"rel/[db,1.0.{i}]a.tgz": b"x" for i in range(250)}
        gateway = InMemoryGateway({"releases": objects})
        store = BucketStore(gateway, "releases", make_config())

        files = store.list_files()

        assert len(files) == 250
        container = gateway.containers[0]
        assert [count for _, _, count in container.page_requests] == [100, 100, 100]
        assert [cursor for _, cursor, _ in container.page_requests] == ["", "100", "200"]

    def test_empty_bucket_lists_nothing(self):
        gateway = InMemoryGateway({"releases": {}})

        assert BucketStore(gateway, "releases", make_config()).list_files() == []

    def test_each_listing_dials_again(self, release_gateway):
        store = BucketStore(release_gateway, "releases", make_config())

        store.list_files()
        store.list_files()

        assert release_gateway.dials == ["s3", "s3"]

    def test_dial_failure_is_transport_error(self):
        gateway = InMemoryGateway(dial_error=TransportError("no credentials"))
        store = BucketStore(gateway, "releases", make_config())

        with pytest.raises(TransportError, match="no credentials"):
            store.list_files()

    def test_foreign_exception_wrapped(self):
        gateway = InMemoryGateway(dial_error=OSError("network unreachable"))
        store = BucketStore(gateway, "releases", make_config())

        with pytest.raises(TransportError) as exc_info:
            store.list_files()

        assert isinstance(exc_info.value.cause, OSError)
        assert exc_info.value.context["bucket"] == "releases"


class TestEndpointReclassification:
    def test_container_failure_with_endpoint_is_invalid_endpoint(self):
        gateway = InMemoryGateway(
            {"releases": {}},
            container_error=TransportError("dial tcp: lookup minio.local: no such host"),
        )
        store = BucketStore(gateway, "releases", make_config("https://minio.local:9000"))

        with pytest.raises(InvalidEndpointError) as exc_info:
            store.list_files()

        err = exc_info.value
        assert err.endpoint == "https://minio.local:9000"
        assert str(err) == (
            "Could not reach provided endpoint: 'https://minio.local:9000': "
            "dial tcp: lookup minio.local: no such host"
        )

    def test_container_failure_without_endpoint_is_transport_error(self):
        failure = TransportError("dial tcp: lookup minio.local: no such host")
        gateway = InMemoryGateway({"releases": {}}, container_error=failure)
        store = BucketStore(gateway, "releases", make_config())

        with pytest.raises(TransportError) as exc_info:
            store.list_files()

        assert exc_info.value is failure
        assert not isinstance(exc_info.value, InvalidEndpointError)

    def test_missing_bucket_with_endpoint(self):
        gateway = InMemoryGateway({})
        store = BucketStore(gateway, "releases", make_config("http://127.0.0.1:9000"))

        with pytest.raises(InvalidEndpointError, match="127.0.0.1:9000"):
            store.list_files()

    def test_open_reclassifies_too(self):
        gateway = InMemoryGateway(
            {"releases": {}}, container_error=TransportError("timeout")
        )
        store = BucketStore(gateway, "releases", make_config("https://s3.example.com"))

        with pytest.raises(InvalidEndpointError, match="s3.example.com"):
            store.open("rel/[db,1.2.0]linux.tgz")

    def test_foreign_container_exception_with_endpoint(self):
        gateway = InMemoryGateway(
            {"releases": {}}, container_error=ConnectionRefusedError("refused")
        )
        store = BucketStore(gateway, "releases", make_config("https://s3.example.com"))

        with pytest.raises(InvalidEndpointError) as exc_info:
            store.list_files()

        assert "refused" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, TransportError)


class TestOpen:
    def test_open_returns_stream_and_size(self, release_gateway):
        store = BucketStore(release_gateway, "releases", make_config())

        stream, size = store.open("rel/[db,2.0.0]linux.tgz")

        assert stream.read() == b"linux build of db 2.0.0"
        assert size == len(b"linux build of db 2.0.0")

    def test_open_missing_key(self, release_gateway):
        store = BucketStore(release_gateway, "releases", make_config())

        with pytest.raises(NotFoundError) as exc_info:
            store.open("rel/[db,9.9.9]linux.tgz")

        assert exc_info.value.kind == NotFoundKind.NO_SUCH_KEY
        assert exc_info.value.context["artifact"] == "rel/[db,9.9.9]linux.tgz"


class TestLocationLifetime:
    def test_listing_closes_location(self, release_gateway):
        BucketStore(release_gateway, "releases", make_config()).list_files()

        assert [location.closed for location in release_gateway.locations] == [True]

    def test_failed_listing_closes_location(self):
        gateway = InMemoryGateway({}, container_error=TransportError("timeout"))

        with pytest.raises(TransportError):
            BucketStore(gateway, "releases", make_config()).list_files()

        assert gateway.locations[0].closed is True

    def test_open_keeps_location_until_stream_closed(self, release_gateway):
        store = BucketStore(release_gateway, "releases", make_config())

        stream, _ = store.open("rel/[db,2.0.0]linux.tgz")

        location = release_gateway.locations[0]
        assert location.closed is False
        stream.close()
        assert location.closed is True
        assert stream.closed is True

    def test_failed_open_closes_location(self, release_gateway):
        store = BucketStore(release_gateway, "releases", make_config())

        with pytest.raises(NotFoundError):
            store.open("rel/[db,9.9.9]linux.tgz")

        assert release_gateway.locations[0].closed is True

    def test_download_closes_every_location(self, release_gateway, progress_writer, recorded_progress):
        store = BucketStore(release_gateway, "releases", make_config())
        downloader = ArtifactDownloader(store, progress_writer, recorded_progress)

        store.list_files()
        downloader.download(FileArtifact(name="rel/[db,1.2.0]linux.tgz"), io.BytesIO())

        assert len(release_gateway.locations) == 2
        assert all(location.closed for location in release_gateway.locations)
