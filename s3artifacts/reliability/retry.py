"""
Retry Policy: Bounded Attempts with Fixed Wait

Implements the retry strategy shared by uploads and CDN invalidations:
- Fixed attempt bound taken from the profile (max_upload_retries)
- Fixed blocking sleep between attempts (retry_wait_seconds)
- No exponential backoff, no jitter, no global deadline

Each attempt yields an explicit Result; the loop matches on it instead of
catching exceptions, so retryability is a plain predicate over the error.
Every error is retryable by default.

Retried operations are re-run wholesale. Callers must tolerate duplicate
writes, which holds for object-store PUT semantics.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from s3artifacts.core.types import Result, Ok, Err
from s3artifacts.core.errors import ReliabilityError
from s3artifacts.core.config import ProfileConfig
from s3artifacts.core import constants as C

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration."""

    max_attempts: int = C.DEFAULT_MAX_UPLOAD_RETRIES
    wait_seconds: float = C.DEFAULT_RETRY_WAIT_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.wait_seconds < 0:
            raise ValueError(f"wait_seconds must be >= 0, got {self.wait_seconds}")

    @classmethod
    def from_profile(cls, config: ProfileConfig) -> RetryPolicy:
        return cls(
            max_attempts=max(1, config.max_upload_retries),
            wait_seconds=max(0, config.retry_wait_seconds),
        )


@dataclass
class RetryStats:
    """Retry attempt statistics."""
    total_attempts: int = 0
    failed_attempts: int = 0
    total_wait_seconds: float = 0.0
    last_error: Optional[str] = None


def attempt(fn: Callable[[], T]) -> Result[T, Exception]:
    """Run one attempt, turning a raised exception into an Err."""
    try:
        return Ok(fn())
    except Exception as e:
        return Err(e)


def always_retry(error: Exception) -> bool:
    return True


def retry_fixed(
    operation: Callable[[], Result[T, Exception]],
    policy: RetryPolicy,
    target: str,
    *,
    is_retryable: Callable[[Exception], bool] = always_retry,
    sleep: Callable[[float], None] = time.sleep,
    stats: Optional[RetryStats] = None,
) -> Result[T, ReliabilityError]:
    """
    Run ``operation`` until it succeeds or the attempt bound is reached.

    Args:
        operation: One attempt, returning Ok(value) or Err(exception).
        policy: Attempt bound and fixed wait.
        target: Names what is being operated on, for the terminal error.
        is_retryable: Decides whether an error may be retried.
        sleep: Blocking sleep; injectable for tests.
        stats: Optional accumulator for attempt statistics.

    Returns:
        Ok with the operation's value, or Err(ReliabilityError) naming the
        target, the last underlying error and the number of attempts.
    """
    if stats is None:
        stats = RetryStats()

    while True:
        stats.total_attempts += 1
        match operation():
            case Ok(value):
                return Ok(value)
            case Err(error):
                stats.failed_attempts += 1
                stats.last_error = str(error)
                logger.warning(
                    "%s: attempt %d/%d failed: %s",
                    target, stats.total_attempts, policy.max_attempts, error,
                )
                if not is_retryable(error) or stats.total_attempts >= policy.max_attempts:
                    return Err(ReliabilityError.retry_exhausted(
                        target=target,
                        attempts=stats.total_attempts,
                        last_error=error,
                    ))

        stats.total_wait_seconds += policy.wait_seconds
        sleep(policy.wait_seconds)
