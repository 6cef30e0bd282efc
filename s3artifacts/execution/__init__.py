"""
Execution module: agents that run serialisable tasks where the data lives.
"""

from s3artifacts.execution.agents import (
    ExecutionAgent,
    LocalAgent,
    ProcessAgent,
    RemoteTaskError,
    TaskFailure,
)

__all__ = [
    "ExecutionAgent",
    "LocalAgent",
    "ProcessAgent",
    "RemoteTaskError",
    "TaskFailure",
]
