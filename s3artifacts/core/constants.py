"""
System-Wide Constants for Build Artifact Storage

All magic numbers and configuration defaults centralized here.
"""

from typing import Final

# =============================================================================
# TIME UNITS
# =============================================================================
SECOND_MS: Final[int] = 1000

# =============================================================================
# PROFILE DEFAULTS
# =============================================================================
DEFAULT_MAX_UPLOAD_RETRIES: Final[int] = 5
DEFAULT_RETRY_WAIT_SECONDS: Final[int] = 5
DEFAULT_SIGNED_URL_EXPIRY_SECONDS: Final[int] = 60
# Configurations saved before the expiry became configurable were signed for 4s
LEGACY_SIGNED_URL_EXPIRY_SECONDS: Final[int] = 4

# =============================================================================
# KEY LAYOUT
# =============================================================================
MANAGED_ROOT: Final[str] = "jobs"

# =============================================================================
# TRANSFER
# =============================================================================
# Clock skew allowed between the build host and the machine holding the file
PRODUCED_TOLERANCE_MS: Final[int] = 2 * SECOND_MS
SERVER_SIDE_ENCRYPTION: Final[str] = "AES256"
DIGEST_CHUNK_BYTES: Final[int] = 1024 * 1024

# =============================================================================
# NETWORK
# =============================================================================
S3_HOSTNAME: Final[str] = "s3.amazonaws.com"
ENV_PREFIX: Final[str] = "S3ARTIFACTS"
