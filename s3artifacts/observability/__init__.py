"""
Observability module: structured logging.
"""

from s3artifacts.observability.logging import StructuredLogger, LogLevel, setup_logging

__all__ = [
    "StructuredLogger",
    "LogLevel",
    "setup_logging",
]
