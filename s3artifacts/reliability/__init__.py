"""
Reliability module: bounded fixed-wait retry.
"""

from s3artifacts.reliability.retry import RetryPolicy, RetryStats, attempt, retry_fixed

__all__ = [
    "RetryPolicy",
    "RetryStats",
    "attempt",
    "retry_fixed",
]
