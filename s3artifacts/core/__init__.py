"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions for artifact storage:
- Result/Either monad for explicit control flow
- Build, artifact and fingerprint value types
- Error hierarchy with classmethod constructors
- Profile and proxy configuration with defaults
"""

from s3artifacts.core.types import (
    Result,
    Ok,
    Err,
    BuildIdentity,
    ArtifactRef,
    FingerprintRecord,
)
from s3artifacts.core.errors import (
    ErrorCode,
    ArtifactError,
    StorageError,
    TransferError,
    ReliabilityError,
    ConfigurationError,
)
from s3artifacts.core.config import (
    AmbientRole,
    Credentials,
    ExplicitCredentials,
    ProfileConfig,
    ProxyConfig,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "BuildIdentity",
    "ArtifactRef",
    "FingerprintRecord",
    "ErrorCode",
    "ArtifactError",
    "StorageError",
    "TransferError",
    "ReliabilityError",
    "ConfigurationError",
    "AmbientRole",
    "Credentials",
    "ExplicitCredentials",
    "ProfileConfig",
    "ProxyConfig",
]
