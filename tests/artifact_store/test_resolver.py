"""Tests for ArtifactResolver version listing and file resolution."""

import pytest

from artifact_store.common.exceptions import (
    AmbiguousMatchError,
    ErrorCategory,
    NotFoundError,
    NotFoundKind,
    TransportError,
    ValidationError,
)
from artifact_store.models import FileArtifact
from artifact_store.resolver import ArtifactResolver


class StaticLister:
    """Serves a fixed listing and counts calls."""

    def __init__(self, files):
        self.files = list(files)
        self.calls = 0

    def list_files(self):
        self.calls += 1
        return list(self.files)


class FailingLister:
    def list_files(self):
        raise TransportError("connection reset by peer")


RELEASES = [
    "rel/[db,1.2.0]linux.tgz",
    "rel/[db,1.2.0]windows.tgz",
    "rel/[db,2.0.0]linux.tgz",
]


@pytest.fixture
def resolver():
    return ArtifactResolver(StaticLister(RELEASES), path="rel")


class TestListVersions:
    def test_distinct_versions_in_listing_order(self, resolver):
        assert resolver.list_versions("db") == ["1.2.0", "2.0.0"]

    def test_first_occurrence_order(self):
        files = [
            "rel/[db,2.0.0]a.tgz",
            "rel/[db,1.0.0]a.tgz",
            "rel/[db,2.0.0]b.tgz",
            "rel/[db,1.5.0]a.tgz",
            "rel/[db,1.0.0]b.tgz",
        ]
        resolver = ArtifactResolver(StaticLister(files), path="rel")

        assert resolver.list_versions("db") == ["2.0.0", "1.0.0", "1.5.0"]

    def test_ignores_other_products_and_prefixes(self):
        files = [
            "rel/[cache,9.9.9]a.tgz",
            "other/[db,8.8.8]a.tgz",
            "rel/readme.md",
            "rel/[db,1.0.0]a.tgz",
        ]
        resolver = ArtifactResolver(StaticLister(files), path="rel")

        assert resolver.list_versions("db") == ["1.0.0"]

    def test_unknown_slug_raises_not_found(self, resolver):
        with pytest.raises(NotFoundError) as exc_info:
            resolver.list_versions("cache")

        assert exc_info.value.kind == NotFoundKind.NO_FILES_FOR_SLUG
        assert "cache" in str(exc_info.value)
        assert exc_info.value.context["slug"] == "cache"
        assert exc_info.value.category == ErrorCategory.PERMANENT

    def test_empty_listing_raises_not_found(self):
        resolver = ArtifactResolver(StaticLister([]), path="rel")

        with pytest.raises(NotFoundError) as exc_info:
            resolver.list_versions("db")

        assert exc_info.value.kind == NotFoundKind.NO_FILES_FOR_SLUG

    def test_empty_slug_rejected(self, resolver):
        with pytest.raises(ValidationError):
            resolver.list_versions("")

    def test_listing_failure_propagates(self):
        resolver = ArtifactResolver(FailingLister(), path="rel")

        with pytest.raises(TransportError, match="connection reset"):
            resolver.list_versions("db")


class TestResolve:
    def test_glob_selects_single_variant(self, resolver):
        artifact = resolver.resolve("db", "1.2.0", "*linux*")

        assert artifact == FileArtifact(name="rel/[db,1.2.0]linux.tgz")

    def test_glob_question_mark_and_class(self, resolver):
        assert resolver.resolve("db", "1.2.0", "*[w]indows.tg?").name == (
            "rel/[db,1.2.0]windows.tgz"
        )

    def test_glob_is_case_sensitive(self, resolver):
        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve("db", "1.2.0", "*LINUX*")

        assert exc_info.value.kind == NotFoundKind.GLOB_MATCHES_NONE

    def test_glob_matches_base_name_only(self):
        files = ["rel/[db,1.0.0]linux.tgz"]
        resolver = ArtifactResolver(StaticLister(files), path="rel")

        with pytest.raises(NotFoundError):
            resolver.resolve("db", "1.0.0", "rel/*")

    def test_ambiguous_glob_lists_every_match(self, resolver):
        with pytest.raises(AmbiguousMatchError) as exc_info:
            resolver.resolve("db", "1.2.0", "*.tgz")

        err = exc_info.value
        assert err.matches == ["rel/[db,1.2.0]linux.tgz", "rel/[db,1.2.0]windows.tgz"]
        assert "rel/[db,1.2.0]linux.tgz" in str(err)
        assert "rel/[db,1.2.0]windows.tgz" in str(err)
        assert "rel/[db,2.0.0]linux.tgz" not in str(err)
        assert "matches multiple files" in str(err)

    def test_unknown_version_fails_before_glob(self, resolver):
        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve("db", "3.0.0", "*")

        err = exc_info.value
        assert err.kind == NotFoundKind.NO_PREFIX_MATCH
        assert "[db,3.0.0]" in str(err)
        assert "download-product" in str(err)
        assert err.context == {"slug": "db", "version": "3.0.0", "glob": "*", "path": "rel"}

    def test_version_is_matched_literally(self):
        files = ["rel/[db,1x2x0]linux.tgz"]
        resolver = ArtifactResolver(StaticLister(files), path="rel")

        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve("db", "1.2.0", "*")

        assert exc_info.value.kind == NotFoundKind.NO_PREFIX_MATCH

    def test_glob_matches_none(self, resolver):
        with pytest.raises(NotFoundError) as exc_info:
            resolver.resolve("db", "2.0.0", "*windows*")

        assert exc_info.value.kind == NotFoundKind.GLOB_MATCHES_NONE
        assert str(exc_info.value) == "the glob '*windows*' matches no file"

    def test_each_query_lists_afresh(self):
        lister = StaticLister(RELEASES)
        resolver = ArtifactResolver(lister, path="rel")

        resolver.list_versions("db")
        resolver.resolve("db", "2.0.0", "*")

        assert lister.calls == 2

    def test_negated_class_selects_other_variant(self):
        files = ["rel/[db,1.0]linux.tgz", "rel/[db,1.0]windows.tgz"]
        resolver = ArtifactResolver(StaticLister(files), path="rel")

        assert resolver.resolve("db", "1.0", "[^l]*").name == "rel/[db,1.0]windows.tgz"

    def test_escaped_wildcard_is_literal(self):
        files = ["rel/[db,1.0]build-*.tgz", "rel/[db,1.0]build-2.tgz"]
        resolver = ArtifactResolver(StaticLister(files), path="rel")

        assert resolver.resolve("db", "1.0", "build-\\*.tgz").name == "rel/[db,1.0]build-*.tgz"

    def test_malformed_glob_rejected_before_listing(self):
        lister = StaticLister(RELEASES)
        resolver = ArtifactResolver(lister, path="rel")

        with pytest.raises(ValidationError, match="malformed"):
            resolver.resolve("db", "1.2.0", "[linux")

        assert lister.calls == 0
