"""
Core Type Definitions for Build Artifact Storage

Implements the Result/Either monad used for control flow across the package,
plus the immutable value types exchanged with the build host.

Design Principles:
- Never use null for absence (use Optional or Result)
- Enforce exhaustive pattern matching for all variants
- Value types are frozen so they can cross process boundaries safely

Complexity: O(1) for all type operations
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    Literal,
    TypeVar,
    Union,
)

# =============================================================================
# TYPE VARIABLES FOR GENERIC CONTAINERS
# =============================================================================
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transform result type


# =============================================================================
# RESULT MONAD: ZERO-EXCEPTION CONTROL FLOW
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Success variant of Result monad.

    Immutable, hashable container for successful computation results.
    """

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """
        Extract value. Safe to call after is_ok() check.

        Returns:
            T: The wrapped success value
        """
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return value, ignoring default."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply transformation to success value."""
        return Ok(fn(self.value))

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Monadic bind for chaining fallible operations."""
        return fn(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failure variant of Result monad.

    Immutable container for error information.
    Carries full error context for exhaustive handling.
    """

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Attempting to unwrap an error is a programming error.

        Raises:
            RuntimeError: Always, with error context
        """
        raise RuntimeError(f"Called unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Return default value on error."""
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        """No-op on error variant - propagates error unchanged."""
        return self

    def flat_map(self, fn: Callable[[Any], Result[U, E]]) -> Err[E]:
        """Propagate error through monadic chain."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Union type for pattern matching
Result = Union[Ok[T], Err[E]]


def base_name(path: str) -> str:
    """Final "/"-separated segment of ``path``, kept byte for byte."""
    return posixpath.basename(path)


# =============================================================================
# BUILD IDENTITY
# =============================================================================
@dataclass(frozen=True, slots=True)
class BuildIdentity:
    """
    Identity of one build, as reported by the build host.

    Only used to derive namespaced object keys and the produced flag.

    Attributes:
        display_name: Job / display name of the build.
        number: Numeric build id.
        start_time_ms: Build start time, milliseconds since the epoch.
    """

    display_name: str
    number: int
    start_time_ms: int = 0

    def __str__(self) -> str:
        return f"{self.display_name} #{self.number}"


# =============================================================================
# ARTIFACT REFERENCE
# =============================================================================
@dataclass(frozen=True, slots=True)
class ArtifactRef:
    """
    A logical artifact stored for a build.

    Attributes:
        bucket: Bucket the artifact was uploaded to.
        name: Object name as recorded at upload time.
        region: Region selector used for the upload.
    """

    bucket: str
    name: str
    region: str = ""

    @property
    def base_name(self) -> str:
        return base_name(self.name)


# =============================================================================
# FINGERPRINT RECORD
# =============================================================================
@dataclass(frozen=True, slots=True)
class FingerprintRecord:
    """
    Result of a successful transfer.

    Binds an artifact to its MD5 checksum. For uploads, ``produced`` marks
    whether this build is the origin of the artifact rather than a re-upload
    of a pre-existing file.
    """

    produced: bool
    artifact: ArtifactRef
    md5sum: str

    @property
    def name(self) -> str:
        return self.artifact.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "produced": self.produced,
            "bucket": self.artifact.bucket,
            "name": self.artifact.name,
            "region": self.artifact.region,
            "md5sum": self.md5sum,
        }
