"""
Execution Agents: Run Work Where the Data Lives
===============================================

A transfer task is a picklable callable ``task(location) -> result``. An
agent executes it at the location that holds the file (or target directory)
and hands back either the result or a serialisable failure.

Boundary Contract:
------------------
- Only the pickled task and location go in
- Only the pickled result or a ``TaskFailure`` comes back
- The caller's thread blocks until the task completes (RPC, not
  fire-and-forget)

Agents:
-------
- ``LocalAgent``: invokes the task in the calling process.
- ``ProcessAgent``: ships the task to a worker process through
  ``concurrent.futures.ProcessPoolExecutor``; nothing is shared with the
  caller except the serialised messages.
"""

from __future__ import annotations

import logging
import pickle
import traceback
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, TypeVar, runtime_checkable

from s3artifacts.core.types import Result, Ok, Err

logger = logging.getLogger(__name__)

T = TypeVar("T")

Task = Callable[[Path], T]


@dataclass(frozen=True, slots=True)
class TaskFailure:
    """
    Serialisable description of a failed task.

    Attributes:
        error_type: Qualified name of the exception raised by the task.
        message: ``str()`` of the exception.
        traceback: Formatted traceback from where the task ran.
    """

    error_type: str
    message: str
    traceback: str = ""

    @classmethod
    def from_exception(cls, error: BaseException) -> TaskFailure:
        return cls(
            error_type=f"{type(error).__module__}.{type(error).__qualname__}",
            message=str(error),
            traceback="".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
        )

    def to_exception(self) -> RemoteTaskError:
        return RemoteTaskError(self)

    def __str__(self) -> str:
        return f"{self.error_type}: {self.message}"


class RemoteTaskError(Exception):
    """A task failed inside an agent; carries the TaskFailure."""

    def __init__(self, failure: TaskFailure) -> None:
        super().__init__(str(failure))
        self.failure = failure


def run_task(task: Task[T], location: Path) -> Result[T, TaskFailure]:
    """Invoke a task, converting any exception into a TaskFailure."""
    try:
        return Ok(task(location))
    except Exception as e:
        return Err(TaskFailure.from_exception(e))


@runtime_checkable
class ExecutionAgent(Protocol):
    """Executes a task at the location holding its data."""

    def run(self, task: Task[T], location: Path) -> Result[T, TaskFailure]:
        ...


class LocalAgent:
    """Runs tasks in the calling process against already-resident files."""

    def run(self, task: Task[T], location: Path) -> Result[T, TaskFailure]:
        return run_task(task, location)

    def __repr__(self) -> str:
        return "LocalAgent()"


class ProcessAgent:
    """
    Runs tasks in a separate worker process.

    Tasks, locations and results must be picklable. A task that cannot be
    pickled, or a worker that dies, is reported as a TaskFailure like any
    other task error.
    """

    __slots__ = ("_max_workers", "_executor")

    def __init__(self, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._max_workers = max_workers
        self._executor: Optional[ProcessPoolExecutor] = None

    def _ensure_executor(self) -> ProcessPoolExecutor:
        if self._executor is None:
            self._executor = ProcessPoolExecutor(max_workers=self._max_workers)
        return self._executor

    def run(self, task: Task[T], location: Path) -> Result[T, TaskFailure]:
        try:
            payload = pickle.dumps((task, location))
        except Exception as e:
            return Err(TaskFailure.from_exception(e))

        try:
            future = self._ensure_executor().submit(_run_pickled, payload)
            result: Result[Any, TaskFailure] = pickle.loads(future.result())
        except Exception as e:
            # Broken pool: drop it so the next call starts a fresh worker
            logger.warning("Execution agent failure: %s", e)
            self.close()
            return Err(TaskFailure.from_exception(e))
        return result

    def close(self) -> None:
        """Shut down the worker pool. Safe to call multiple times."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> ProcessAgent:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ProcessAgent(max_workers={self._max_workers})"


def _run_pickled(payload: bytes) -> bytes:
    """Worker-side entry point: unpickle, run, pickle the Result."""
    task, location = pickle.loads(payload)
    result = run_task(task, location)
    try:
        return pickle.dumps(result)
    except Exception as e:
        return pickle.dumps(Err(TaskFailure.from_exception(e)))
