"""
Build Artifact Storage on S3

Uploads build artifacts to S3-compatible object storage and manages them
afterwards:
- Deterministic object keys derived from build identity (Destination rules)
- Bounded, fixed-wait retry for uploads and CDN invalidations
- Transfers executed where the data lives through execution agents
- Paginated listing, deletion and presigned download links
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from s3artifacts.core.types import (
    Result,
    Ok,
    Err,
    BuildIdentity,
    ArtifactRef,
    FingerprintRecord,
)
from s3artifacts.core.errors import (
    ArtifactError,
    StorageError,
    TransferError,
    ReliabilityError,
    ConfigurationError,
)
from s3artifacts.core.config import ProfileConfig, ProxyConfig
from s3artifacts.storage import (
    ArtifactProfile,
    Destination,
    DownloadReport,
    StorageSession,
)
from s3artifacts.execution import LocalAgent, ProcessAgent
from s3artifacts.reliability import RetryPolicy, retry_fixed

__all__ = [
    "__version__",
    # Result monad
    "Result",
    "Ok",
    "Err",
    # Value types
    "BuildIdentity",
    "ArtifactRef",
    "FingerprintRecord",
    # Errors
    "ArtifactError",
    "StorageError",
    "TransferError",
    "ReliabilityError",
    "ConfigurationError",
    # Config
    "ProfileConfig",
    "ProxyConfig",
    # Storage
    "ArtifactProfile",
    "Destination",
    "DownloadReport",
    "StorageSession",
    # Execution
    "LocalAgent",
    "ProcessAgent",
    # Reliability
    "RetryPolicy",
    "retry_fixed",
]
