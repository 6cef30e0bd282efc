"""
Storage Module: Artifact Storage on S3
======================================

Provides:
- Destination resolution (unmanaged and build-namespaced keys)
- Storage session (boto3 client, credentials, proxy selection)
- Transfer and invalidation tasks for execution agents
- ArtifactProfile: the build-facing operations

Example:
    >>> from s3artifacts.core.config import ProfileConfig
    >>> session = StorageSession.open(ProfileConfig.create("default", "", "", use_role=True))
    >>> profile = ArtifactProfile(session.unwrap())
"""

from s3artifacts.storage.destination import Destination, managed_prefix
from s3artifacts.storage.session import StorageSession, build_client, client_config
from s3artifacts.storage.transfer import DownloadTask, UploadTask
from s3artifacts.storage.invalidation import InvalidationTask
from s3artifacts.storage.profile import (
    ArtifactProfile,
    DownloadFailure,
    DownloadReport,
)

__all__ = [
    "Destination",
    "managed_prefix",
    "StorageSession",
    "build_client",
    "client_config",
    "DownloadTask",
    "UploadTask",
    "InvalidationTask",
    "ArtifactProfile",
    "DownloadFailure",
    "DownloadReport",
]
