"""Task queue protocol and an embedded in-memory implementation.

The in-memory queue mimics the external task semantics the workers rely
on: a fetched task is locked for the fetching worker until its lock
expires, completing removes it, and failing with retries left makes it
available again while failing with no retries left raises an incident.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol, runtime_checkable

from attrs import define, field, frozen
from beartype import beartype

from ..models.task import ExternalTask


@runtime_checkable
class TaskQueue(Protocol):
    """Operations the worker framework needs from the external task queue."""

    async def fetch_and_lock(
        self, topic: str, max_tasks: int, lock_duration_ms: int
    ) -> list[ExternalTask]: ...

    async def complete(self, task: ExternalTask, variables: dict[str, Any]) -> None: ...

    async def fail(
        self,
        task: ExternalTask,
        error_message: str,
        error_details: str,
        retries: int,
        retry_timeout_ms: int,
    ) -> None: ...


@frozen
class FailureReport:
    """A failure reported for a task."""

    task_id: str
    error_message: str
    error_details: str
    retries: int
    retry_timeout_ms: int


@define
class _QueuedTask:
    task: ExternalTask
    locked_until: datetime | None = None


@define
class InMemoryTaskQueue:
    """Process-local task queue for tests and local runs."""

    worker_id: str = "in-memory-worker"
    _tasks: dict[str, _QueuedTask] = field(factory=dict, init=False)
    completed: dict[str, dict[str, Any]] = field(factory=dict, init=False)
    failures: list[FailureReport] = field(factory=list, init=False)
    incidents: dict[str, FailureReport] = field(factory=dict, init=False)
    _lock: asyncio.Lock = field(factory=asyncio.Lock, init=False)

    @beartype
    def add_task(
        self,
        topic: str,
        variables: dict[str, Any] | None = None,
        *,
        retries: int | None = None,
        task_id: str | None = None,
    ) -> ExternalTask:
        """Enqueue a new task on ``topic``."""
        task = ExternalTask(
            id=task_id or str(uuid.uuid4()),
            topic_name=topic,
            retries=retries,
            variables=dict(variables or {}),
        )
        self._tasks[task.id] = _QueuedTask(task)
        return task

    @property
    def pending(self) -> list[ExternalTask]:
        """Tasks not yet completed and not in incident."""
        return [queued.task for queued in self._tasks.values()]

    @beartype
    async def fetch_and_lock(
        self, topic: str, max_tasks: int, lock_duration_ms: int
    ) -> list[ExternalTask]:
        """Lock up to ``max_tasks`` unlocked (or lock-expired) tasks of ``topic``."""
        now = datetime.now(timezone.utc)
        lock_until = now + timedelta(milliseconds=lock_duration_ms)
        locked = []
        async with self._lock:
            for queued in self._tasks.values():
                if len(locked) >= max_tasks:
                    break
                if queued.task.topic_name != topic:
                    continue
                if queued.locked_until is not None and queued.locked_until > now:
                    continue
                queued.locked_until = lock_until
                queued.task = queued.task.model_copy(
                    update={"worker_id": self.worker_id, "lock_expiration_time": lock_until}
                )
                locked.append(queued.task)
        return locked

    @beartype
    async def complete(self, task: ExternalTask, variables: dict[str, Any]) -> None:
        """Complete a locked task."""
        async with self._lock:
            self._require_locked(task)
            del self._tasks[task.id]
            self.completed[task.id] = dict(variables)

    @beartype
    async def fail(
        self,
        task: ExternalTask,
        error_message: str,
        error_details: str,
        retries: int,
        retry_timeout_ms: int,
    ) -> None:
        """Record a failure; zero retries turns the task into an incident."""
        report = FailureReport(
            task_id=task.id,
            error_message=error_message,
            error_details=error_details,
            retries=retries,
            retry_timeout_ms=retry_timeout_ms,
        )
        async with self._lock:
            queued = self._require_locked(task)
            self.failures.append(report)
            if retries <= 0:
                del self._tasks[task.id]
                self.incidents[task.id] = report
                return
            queued.task = queued.task.model_copy(update={"retries": retries})
            queued.locked_until = datetime.now(timezone.utc) + timedelta(
                milliseconds=retry_timeout_ms
            )

    def _require_locked(self, task: ExternalTask) -> _QueuedTask:
        queued = self._tasks.get(task.id)
        if queued is None or queued.locked_until is None:
            raise RuntimeError(f"Task {task.id} is not locked")
        return queued
