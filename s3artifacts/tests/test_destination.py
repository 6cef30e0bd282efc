"""
Unit Tests: Destination Resolution

Tests:
    - Unmanaged keys (prefix stripping, flatten)
    - Managed keys namespaced by build and profile
    - Record lookup and file names
    - Base name extraction
"""

import pytest

from s3artifacts.core.types import ArtifactRef, BuildIdentity, base_name
from s3artifacts.storage.destination import Destination, managed_prefix


@pytest.fixture
def build():
    return BuildIdentity("app", 12, start_time_ms=1_700_000_000_000)


class TestUnmanaged:
    """Tests for keys derived from the artifact's path."""

    def test_strips_search_root(self):
        """The search root prefix is removed from the key."""
        dest = Destination.unmanaged("b", "build/out/app.jar", 6)

        assert dest.bucket_name == "b"
        assert dest.object_name == "out/app.jar"

    def test_flatten_keeps_base_name(self):
        """Flattening drops every directory component."""
        dest = Destination.unmanaged("b", "build/out/app.jar", 6, flatten=True)

        assert dest.object_name == "app.jar"

    def test_zero_length_keeps_full_path(self):
        dest = Destination.unmanaged("b", "out/app.jar", 0)

        assert dest.object_name == "out/app.jar"


class TestManaged:
    """Tests for build-namespaced keys."""

    def test_managed_layout(self, build):
        """Managed keys live under jobs/<name>/<number>/<profile>."""
        dest = Destination.managed("b", build, "default", "build/out/app.jar")

        assert dest.object_name == "jobs/app/12/default/app.jar"

    def test_prefix(self, build):
        assert managed_prefix(build, "default") == "jobs/app/12/default"

    def test_deterministic(self, build):
        """Equal inputs resolve to equal destinations."""
        a = Destination.managed("b", build, "default", "out/app.jar")
        b = Destination.managed("b", build, "default", "out/app.jar")

        assert a == b
        assert hash(a) == hash(b)

    def test_for_record_uses_artifact_bucket(self, build):
        artifact = ArtifactRef(bucket="artifacts", name="out/app.jar")
        dest = Destination.for_record(build, "default", artifact)

        assert dest.bucket_name == "artifacts"
        assert dest.object_name == "jobs/app/12/default/app.jar"

    def test_file_name(self, build):
        dest = Destination.managed("b", build, "default", "out/app.jar")

        assert dest.file_name == "app.jar"

    def test_str(self):
        dest = Destination("b", "k/app.jar")

        assert str(dest) == "bucket=b, objectName=k/app.jar"


class TestBaseName:
    """Tests for base name extraction."""

    @pytest.mark.parametrize("path,expected", [
        ("app.jar", "app.jar"),
        ("out/app.jar", "app.jar"),
        ("a\\b.jar", "a\\b.jar"),
        ("out/app.jar ", "app.jar "),
    ])
    def test_base_name(self, path, expected):
        assert base_name(path) == expected

    def test_flatten_keeps_name_byte_for_byte(self):
        """Names differing only in whitespace or backslashes get distinct keys."""
        keys = {
            Destination.unmanaged("b", path, 6, flatten=True).object_name
            for path in ("build/out/app.jar", "build/out/app.jar ", "build/out/a\\b.jar")
        }

        assert keys == {"app.jar", "app.jar ", "a\\b.jar"}

    def test_managed_keeps_name_byte_for_byte(self, build):
        dest = Destination.managed("b", build, "default", "out/a\\b.jar ")

        assert dest.object_name == "jobs/app/12/default/a\\b.jar "
