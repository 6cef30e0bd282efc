"""
Artifact Profile
================

Build-facing operations for one storage profile.

Operations:
-----------
| Operation        | Retry | Failure model                               |
|------------------|-------|---------------------------------------------|
| upload           | yes   | Err(InvalidInput) or Err(ExhaustedRetries)  |
| invalidate       | yes   | Err(ExhaustedRetries)                       |
| list             | no    | Err(StorageError)                           |
| download_all     | no    | per-item failures collected, never aborts   |
| delete           | no    | Err(StorageError); missing key is success   |
| get_download_url | no    | Err(StorageError)                           |
| check            | no    | Err(StorageError)                           |

Execution Model:
----------------
Synchronous and thread-per-caller. Agent dispatch and retry waits block the
calling thread. Parallelising many artifacts is the caller's concern.

Example:
    >>> config = ProfileConfig.create("default", "AKIA...", "secret")
    >>> session = StorageSession.open(config).unwrap()
    >>> profile = ArtifactProfile(session)
    >>> build = BuildIdentity("app", 12, start_time_ms=1700000000000)
    >>> result = profile.upload(build, "my-bucket", "build/out/app.jar", 6)
"""

from __future__ import annotations

import fnmatch
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence, TextIO, TypeVar, Union

from s3artifacts.core.errors import ArtifactError, StorageError, TransferError
from s3artifacts.core.types import (
    ArtifactRef,
    BuildIdentity,
    FingerprintRecord,
    Result,
    Ok,
    Err,
)
from s3artifacts.execution.agents import ExecutionAgent, LocalAgent, ProcessAgent, TaskFailure
from s3artifacts.observability.logging import StructuredLogger
from s3artifacts.reliability.retry import RetryPolicy, attempt, retry_fixed
from s3artifacts.storage.destination import Destination, managed_prefix
from s3artifacts.storage.invalidation import InvalidationTask
from s3artifacts.storage.session import StorageSession
from s3artifacts.storage.transfer import DownloadTask, UploadTask

T = TypeVar("T")

PathLike = Union[str, Path]


def _as_exception(result: Result[T, TaskFailure]) -> Result[T, Exception]:
    """Agent results carry TaskFailure; the retry loop works on exceptions."""
    if result.is_err():
        return Err(result.error.to_exception())
    return result


# =============================================================================
# BULK DOWNLOAD REPORT
# =============================================================================
@dataclass(frozen=True, slots=True)
class DownloadFailure:
    """One artifact that could not be downloaded."""
    artifact: ArtifactRef
    error: str


@dataclass(frozen=True, slots=True)
class DownloadReport:
    """
    Outcome of a bulk download.

    ``records`` follows input order (filtered); ``failures`` lists the
    artifacts that were skipped after an error.
    """
    records: tuple[FingerprintRecord, ...] = ()
    failures: tuple[DownloadFailure, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.failures


# =============================================================================
# ARTIFACT PROFILE
# =============================================================================
class ArtifactProfile:
    """
    Upload, list, download, delete, invalidate and sign artifacts for one
    storage profile.

    Args:
        session: Opened storage session for the profile.
        agent: Agent that runs work where the data lives (agent uploads and
            all downloads). Defaults to a single-worker ProcessAgent owned
            by the profile and shut down by ``close()``.
        sleep: Blocking sleep used between retry attempts.
        clock: Wall clock in seconds, used for signed-URL expiry.
    """

    __slots__ = ("_session", "_agent", "_owns_agent", "_local", "_sleep", "_clock", "_log")

    def __init__(
        self,
        session: StorageSession,
        agent: Optional[ExecutionAgent] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._session = session
        self._owns_agent = agent is None
        self._agent: ExecutionAgent = ProcessAgent() if agent is None else agent
        self._local = LocalAgent()
        self._sleep = sleep
        self._clock = clock
        self._log = StructuredLogger(__name__).with_extra(profile=session.config.name)

    @property
    def name(self) -> str:
        return self._session.config.name

    @property
    def session(self) -> StorageSession:
        return self._session

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy.from_profile(self._session.config)

    @property
    def _client(self) -> Any:
        return self._session.client

    def close(self) -> None:
        """Shut down the default agent. Caller-supplied agents are left open."""
        if self._owns_agent and isinstance(self._agent, ProcessAgent):
            self._agent.close()

    def __enter__(self) -> ArtifactProfile:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # CONNECTIVITY
    # -------------------------------------------------------------------------

    def check(self) -> Result[None, StorageError]:
        """Verify credentials and connectivity by listing buckets."""
        match attempt(self._client.list_buckets):
            case Err(e):
                return Err(StorageError.request_failed("list buckets", self.name, e))
        return Ok(None)

    # -------------------------------------------------------------------------
    # UPLOAD / INVALIDATE (retried)
    # -------------------------------------------------------------------------

    def upload(
        self,
        build: BuildIdentity,
        bucket_name: str,
        path: PathLike,
        search_path_length: int,
        user_metadata: Optional[Mapping[str, str]] = None,
        storage_class: str = "",
        region: str = "",
        *,
        upload_from_agent: bool = False,
        managed_artifacts: bool = False,
        server_side_encryption: bool = False,
        flatten: bool = False,
        gzip_files: bool = False,
    ) -> Result[FingerprintRecord, ArtifactError]:
        """
        Upload one artifact.

        Args:
            build: Identity of the uploading build.
            bucket_name: Target bucket.
            path: Local file to upload.
            search_path_length: Prefix length stripped for unmanaged keys.
            user_metadata: Object metadata.
            storage_class: S3 storage class selector.
            region: Region selector.
            upload_from_agent: Run the transfer through the execution agent
                (where the file resides) instead of in this process.
            managed_artifacts: Namespace the key by build identity.
            server_side_encryption: Request AES256 encryption at rest.
            flatten: Drop directory structure from unmanaged keys.
            gzip_files: Compress before upload.

        Returns:
            Ok(FingerprintRecord), Err(TransferError) for a directory, or
            Err(ReliabilityError) once all attempts have failed.
        """
        source = Path(path)
        if source.is_dir():
            return Err(TransferError.is_directory(str(path)))

        destination = Destination.unmanaged(bucket_name, str(path), search_path_length, flatten)
        produced_by = None
        if managed_artifacts:
            destination = Destination.managed(bucket_name, build, self.name, str(path))
            produced_by = build

        task = UploadTask(
            credentials=self._session.credentials,
            destination=destination,
            user_metadata=dict(user_metadata or {}),
            storage_class=storage_class,
            region=region,
            server_side_encryption=server_side_encryption,
            gzip_files=gzip_files,
            produced_by=produced_by,
            proxy=self._session.proxy,
            client_factory=self._session.client_factory,
        )
        agent = self._agent if upload_from_agent else self._local

        with self._log.context(build=str(build), key=destination.object_name):
            self._log.info("Uploading artifact", bucket=bucket_name, source=str(path))
            result = retry_fixed(
                lambda: _as_exception(agent.run(task, source)),
                self.retry_policy,
                f"put {destination}",
                sleep=self._sleep,
            )
            if result.is_err():
                self._log.error("Upload failed", error=str(result.error))
        return result

    def invalidate(
        self,
        build: BuildIdentity,
        bucket_name: str,
        search_path_length: int,
        paths: Sequence[PathLike],
    ) -> Result[list[str], ArtifactError]:
        """
        Invalidate CDN caches for ``paths`` with the upload retry policy.

        Returns:
            Ok(invalidation ids) or Err(ReliabilityError).
        """
        path_strs = tuple(str(p) for p in paths)
        task = InvalidationTask(
            credentials=self._session.credentials,
            bucket=bucket_name,
            paths=path_strs,
            search_path_length=search_path_length,
            proxy=self._session.proxy,
            client_factory=self._session.client_factory,
        )

        with self._log.context(build=str(build)):
            self._log.info("Invalidating paths", bucket=bucket_name, count=len(path_strs))
            result = retry_fixed(
                lambda: _as_exception(self._local.run(task, Path("."))),
                self.retry_policy,
                f"invalidate paths {list(path_strs)}",
                sleep=self._sleep,
            )
            if result.is_err():
                self._log.error("Invalidation failed", error=str(result.error))
        return result

    # -------------------------------------------------------------------------
    # LISTING
    # -------------------------------------------------------------------------

    def list(
        self,
        build: BuildIdentity,
        bucket: str,
        expanded_filter: str = "",
    ) -> Result[list[str], StorageError]:
        """
        List every object key under the build's managed namespace.

        Pages are followed by marker until the listing is no longer
        truncated. ``expanded_filter`` is accepted but not applied; callers
        filter the returned keys themselves.
        """
        prefix = managed_prefix(build, self.name)
        files: list[str] = []
        request: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}

        try:
            while True:
                listing = self._client.list_objects(**request)
                contents = listing.get("Contents", [])
                files.extend(obj["Key"] for obj in contents)
                if not listing.get("IsTruncated", False):
                    break
                marker = listing.get("NextMarker") or (contents[-1]["Key"] if contents else None)
                if marker is None:
                    break
                request["Marker"] = marker
        except Exception as e:
            return Err(StorageError.request_failed("list", f"{bucket}/{prefix}", e))

        return Ok(files)

    # -------------------------------------------------------------------------
    # DOWNLOAD (best effort)
    # -------------------------------------------------------------------------

    def download_all(
        self,
        build: BuildIdentity,
        artifacts: Sequence[FingerprintRecord],
        expanded_filter: str,
        target_dir: PathLike,
        flatten: bool = False,
        console: Optional[TextIO] = None,
    ) -> DownloadReport:
        """
        Download every record whose base name matches ``expanded_filter``.

        Each artifact lands at ``target_dir/<base name>``. A failing artifact
        is reported to ``console`` and in the report, and the remaining
        artifacts are still attempted. ``flatten`` is accepted for interface
        parity; downloads are always written by base name.
        """
        console = console if console is not None else sys.stderr
        target_root = Path(target_dir)
        records: list[FingerprintRecord] = []
        failures: list[DownloadFailure] = []

        for record in artifacts:
            artifact = record.artifact
            if not fnmatch.fnmatchcase(artifact.base_name, expanded_filter):
                continue

            destination = Destination.for_record(build, self.name, artifact)
            target = target_root / artifact.base_name
            task = DownloadTask(
                credentials=self._session.credentials,
                destination=destination,
                artifact=artifact,
                proxy=self._session.proxy,
                client_factory=self._session.client_factory,
            )
            match self._agent.run(task, target):
                case Ok(fingerprint):
                    records.append(fingerprint)
                case Err(failure):
                    error = TransferError.remote_failure(
                        "get", str(destination), failure.to_exception()
                    )
                    print(f"Failed to download {destination}: {failure}", file=console)
                    self._log.warning(
                        "Download failed",
                        key=destination.object_name,
                        error_id=error.error_id,
                        error=str(failure),
                    )
                    failures.append(DownloadFailure(artifact=artifact, error=str(error)))

        return DownloadReport(records=tuple(records), failures=tuple(failures))

    # -------------------------------------------------------------------------
    # DELETE / SIGN
    # -------------------------------------------------------------------------

    def delete(self, build: BuildIdentity, record: FingerprintRecord) -> Result[None, StorageError]:
        """Delete one managed artifact. Deleting a missing key succeeds."""
        destination = Destination.for_record(build, self.name, record.artifact)
        deleted = attempt(lambda: self._client.delete_object(
            Bucket=destination.bucket_name,
            Key=destination.object_name,
        ))
        if deleted.is_err():
            return Err(StorageError.request_failed("delete", str(destination), deleted.error))
        self._log.info("Deleted artifact", key=destination.object_name)
        return Ok(None)

    def get_download_url(
        self,
        build: BuildIdentity,
        record: FingerprintRecord,
    ) -> Result[str, StorageError]:
        """
        Sign a short-lived download link for one managed artifact.

        The link carries a Content-Disposition override so a browser saves
        the file under its base name rather than the full object key.
        """
        destination = Destination.for_record(build, self.name, record.artifact)
        expiry_seconds = self._session.config.signed_url_expiry_seconds
        expires_at = datetime.fromtimestamp(self._clock() + expiry_seconds, tz=timezone.utc)

        signed = attempt(lambda: self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={
                "Bucket": destination.bucket_name,
                "Key": destination.object_name,
                "ResponseContentDisposition": content_disposition(destination),
            },
            ExpiresIn=expiry_seconds,
        ))

        match signed:
            case Ok(url):
                self._log.debug(
                    "Signed download URL",
                    key=destination.object_name,
                    expires_at=expires_at.isoformat(),
                )
                return Ok(str(url))
            case Err(e):
                return Err(StorageError.request_failed("sign", str(destination), e))


def content_disposition(destination: Destination) -> str:
    return f'attachment; filename="{destination.file_name.strip()}"'
