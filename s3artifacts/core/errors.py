"""
Error Hierarchy for Build Artifact Storage

Design Principles:
- Errors travel inside Err values rather than being raised across the API
- Carry full error context (target, attempts, cause) for audit trails
- Never include credentials in messages or context

Each error type includes:
- Unique error code for programmatic handling
- Human-readable message for logging
- Optional cause for root cause analysis
- Timestamp for correlation with build logs

Usage:
    result = profile.upload(...)
    match result:
        case Ok(record):
            archive(record)
        case Err(ReliabilityError() as error):
            report_terminal_failure(error)
        case Err(TransferError() as error) if error.code is ErrorCode.TRANSFER_INVALID_INPUT:
            reject(error)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by subsystem:
    - 1xxx: Storage requests (list, delete, sign, check)
    - 2xxx: Artifact transfer
    - 6xxx: Reliability
    - 9xxx: Internal/configuration errors
    """

    # Storage errors (1xxx)
    STORAGE_REQUEST_FAILED = 1001

    # Transfer errors (2xxx)
    TRANSFER_INVALID_INPUT = 2001
    TRANSFER_REMOTE_FAILURE = 2002

    # Reliability errors (6xxx)
    RELIABILITY_RETRY_EXHAUSTED = 6002

    # Internal errors (9xxx)
    INTERNAL_CONFIGURATION_ERROR = 9002


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class ArtifactError(Exception):
    """
    Base class for all artifact storage errors.

    Provides common infrastructure for error handling:
    - Unique error ID for correlation
    - Error code for programmatic handling
    - Timestamp (nanoseconds since epoch)
    - Cause chain for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp_nanos: int = field(default_factory=time.time_ns)
    cause: Optional[BaseException] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize error to dictionary for logging.

        Note: The cause is reduced to its string form.
        """
        return {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp_nanos": self.timestamp_nanos,
            "cause": str(self.cause) if self.cause is not None else None,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# STORAGE ERRORS
# =============================================================================
@dataclass
class StorageError(ArtifactError):
    """Errors from single, non-retried storage requests."""

    @classmethod
    def request_failed(
        cls,
        operation: str,
        target: str,
        cause: Optional[BaseException] = None,
    ) -> StorageError:
        """A storage request (list, delete, sign, check) failed."""
        return cls(
            code=ErrorCode.STORAGE_REQUEST_FAILED,
            message=f"{operation} {target}: {cause}",
            cause=cause,
            context={"operation": operation, "target": target},
        )


# =============================================================================
# TRANSFER ERRORS
# =============================================================================
@dataclass
class TransferError(ArtifactError):
    """
    Errors from the upload/download path.

    Covers invalid input (never retried) and wrapped remote failures.
    """

    @classmethod
    def is_directory(cls, path: str) -> TransferError:
        """A directory was supplied where a file was expected."""
        return cls(
            code=ErrorCode.TRANSFER_INVALID_INPUT,
            message=f"{path} is a directory",
            context={"path": path},
        )

    @classmethod
    def remote_failure(
        cls,
        operation: str,
        target: str,
        cause: Optional[BaseException] = None,
    ) -> TransferError:
        """A remote transfer call failed."""
        return cls(
            code=ErrorCode.TRANSFER_REMOTE_FAILURE,
            message=f"{operation} {target}: {cause}",
            cause=cause,
            context={"operation": operation, "target": target},
        )


# =============================================================================
# RELIABILITY ERRORS
# =============================================================================
@dataclass
class ReliabilityError(ArtifactError):
    """Errors from the retry subsystem."""

    @classmethod
    def retry_exhausted(
        cls,
        target: str,
        attempts: int,
        last_error: BaseException,
    ) -> ReliabilityError:
        """All retry attempts exhausted."""
        return cls(
            code=ErrorCode.RELIABILITY_RETRY_EXHAUSTED,
            message=f"{target}: {last_error}:: Failed after {attempts} tries.",
            cause=last_error,
            context={
                "target": target,
                "attempts": attempts,
                "last_error": str(last_error),
            },
        )

    @property
    def attempts(self) -> int:
        return int(self.context.get("attempts", 0))


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================
@dataclass
class ConfigurationError(ArtifactError):
    """Invalid profile or proxy configuration."""

    @classmethod
    def invalid(cls, field_name: str, value: Any, reason: str) -> ConfigurationError:
        return cls(
            code=ErrorCode.INTERNAL_CONFIGURATION_ERROR,
            message=f"Invalid value for '{field_name}': {reason}",
            context={"field": field_name, "value": str(value)[:100], "reason": reason},
        )
