"""
Artifact Transfer Tasks
=======================

Serialisable units of work executed by an execution agent at the location
holding the data. Each task builds its own S3 client from the credentials it
carries, because it may run in a different process than the caller.

Upload:
-------
1. MD5 of the local file (fingerprint of the original content), and the
   produced flag from its mtime when the key is build-managed
2. Optional gzip into a temporary file, sent with ``Content-Encoding: gzip``
3. ``upload_file`` with user metadata, storage class and optional SSE
4. Returns a FingerprintRecord carrying the produced flag

Download:
---------
1. ``download_file`` into the target path (parent directories created)
2. MD5 of the downloaded file
3. Returns a FingerprintRecord with ``produced=False``
"""

from __future__ import annotations

import gzip
import hashlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from s3artifacts.core import constants as C
from s3artifacts.core.config import Credentials, ProxyConfig
from s3artifacts.core.types import ArtifactRef, BuildIdentity, FingerprintRecord
from s3artifacts.storage.destination import Destination
from s3artifacts.storage.session import ClientFactory, build_client

logger = logging.getLogger(__name__)


def md5_of(path: Path) -> str:
    """Hex MD5 digest of a file, read in chunks."""
    digest = hashlib.md5()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(C.DIGEST_CHUNK_BYTES), b""):
            digest.update(chunk)
    return digest.hexdigest()


def mtime_ms(path: Path) -> int:
    """Last-modified time of ``path`` in milliseconds since the epoch."""
    return os.stat(path).st_mtime_ns // 1_000_000


def is_produced(build: BuildIdentity, file_mtime_ms: int) -> bool:
    """True if the build started no later than the file's mtime plus tolerance."""
    return build.start_time_ms <= file_mtime_ms + C.PRODUCED_TOLERANCE_MS


def gzip_to_temp(path: Path) -> Path:
    """Compress ``path`` into a new temporary file and return its path."""
    fd, tmp_name = tempfile.mkstemp(prefix="s3artifacts-", suffix=".gz")
    os.close(fd)
    with open(path, "rb") as src, gzip.open(tmp_name, "wb") as dst:
        shutil.copyfileobj(src, dst)
    return Path(tmp_name)


@dataclass(frozen=True)
class UploadTask:
    """
    Upload one file to its resolved destination.

    Attributes:
        credentials: Explicit key pair or ambient role.
        destination: Resolved bucket/key.
        user_metadata: User-defined object metadata.
        storage_class: S3 storage class (e.g. "STANDARD"); empty for default.
        region: Region selector for the client and the record.
        server_side_encryption: Request AES256 server-side encryption.
        gzip_files: Compress before upload.
        produced_by: Managed uploads only: the uploading build, checked
            against the file's mtime where the file resides.
        proxy: Proxy to use where the task runs.
        client_factory: Client constructor; must be picklable.
    """

    credentials: Credentials
    destination: Destination
    user_metadata: Mapping[str, str] = field(default_factory=dict)
    storage_class: str = ""
    region: str = ""
    server_side_encryption: bool = False
    gzip_files: bool = False
    produced_by: Optional[BuildIdentity] = None
    proxy: Optional[ProxyConfig] = None
    client_factory: ClientFactory = field(default=build_client, compare=False, repr=False)

    def extra_args(self) -> dict[str, Any]:
        extra: dict[str, Any] = {}
        if self.user_metadata:
            extra["Metadata"] = dict(self.user_metadata)
        if self.storage_class:
            extra["StorageClass"] = self.storage_class
        if self.server_side_encryption:
            extra["ServerSideEncryption"] = C.SERVER_SIDE_ENCRYPTION
        if self.gzip_files:
            extra["ContentEncoding"] = "gzip"
        return extra

    def __call__(self, path: Path) -> FingerprintRecord:
        path = Path(path)
        md5 = md5_of(path)
        produced = (
            self.produced_by is not None
            and is_produced(self.produced_by, mtime_ms(path))
        )
        client = self.client_factory("s3", self.credentials, self.proxy, self.region or None)

        source = gzip_to_temp(path) if self.gzip_files else path
        try:
            client.upload_file(
                str(source),
                self.destination.bucket_name,
                self.destination.object_name,
                ExtraArgs=self.extra_args(),
            )
        finally:
            if source != path:
                source.unlink(missing_ok=True)

        logger.debug("Uploaded %s to %s", path, self.destination)
        return FingerprintRecord(
            produced=produced,
            artifact=ArtifactRef(
                bucket=self.destination.bucket_name,
                name=self.destination.object_name,
                region=self.region,
            ),
            md5sum=md5,
        )


@dataclass(frozen=True)
class DownloadTask:
    """Download one stored artifact into the target path."""

    credentials: Credentials
    destination: Destination
    artifact: ArtifactRef
    proxy: Optional[ProxyConfig] = None
    client_factory: ClientFactory = field(default=build_client, compare=False, repr=False)

    def __call__(self, target: Path) -> FingerprintRecord:
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        client = self.client_factory(
            "s3", self.credentials, self.proxy, self.artifact.region or None
        )
        client.download_file(
            self.destination.bucket_name,
            self.destination.object_name,
            str(target),
        )
        logger.debug("Downloaded %s to %s", self.destination, target)
        return FingerprintRecord(produced=False, artifact=self.artifact, md5sum=md5_of(target))
