"""
Destination Resolver
====================

Maps build and artifact identity to a ``(bucket, object key)`` pair.

Key Layout:
-----------
- Unmanaged: the artifact's path relative to the search root
  (``path[search_path_length:]``), or only its base name when flattened.
- Managed: ``jobs/<display name>/<build number>/<profile name>/<base name>``,
  so artifacts can be found again from build identity alone.

Resolution is pure: no I/O, and equal inputs always give equal keys, which
keeps re-uploads idempotent and lets download/delete address the same object
later.
"""

from __future__ import annotations

from dataclasses import dataclass

from s3artifacts.core import constants as C
from s3artifacts.core.types import ArtifactRef, BuildIdentity, base_name


def managed_prefix(build: BuildIdentity, profile_name: str) -> str:
    """Namespace holding every managed artifact of ``build`` for a profile."""
    return f"{C.MANAGED_ROOT}/{build.display_name}/{build.number}/{profile_name}"


@dataclass(frozen=True, slots=True)
class Destination:
    """
    Resolved storage location of one artifact.

    Attributes:
        bucket_name: Target bucket.
        object_name: Object key inside the bucket.
    """

    bucket_name: str
    object_name: str

    @classmethod
    def unmanaged(
        cls,
        bucket_name: str,
        path: str,
        search_path_length: int,
        flatten: bool = False,
    ) -> Destination:
        """Key from the artifact's own path layout."""
        if flatten:
            return cls(bucket_name, base_name(path))
        return cls(bucket_name, path[search_path_length:])

    @classmethod
    def managed(
        cls,
        bucket_name: str,
        build: BuildIdentity,
        profile_name: str,
        artifact_name: str,
    ) -> Destination:
        """Key namespaced by build identity."""
        return cls(
            bucket_name,
            f"{managed_prefix(build, profile_name)}/{base_name(artifact_name)}",
        )

    @classmethod
    def for_record(
        cls,
        build: BuildIdentity,
        profile_name: str,
        artifact: ArtifactRef,
    ) -> Destination:
        """Managed location of a previously uploaded artifact."""
        return cls.managed(artifact.bucket, build, profile_name, artifact.name)

    @property
    def file_name(self) -> str:
        """Final path segment of the object key."""
        return base_name(self.object_name)

    def __str__(self) -> str:
        return f"bucket={self.bucket_name}, objectName={self.object_name}"
