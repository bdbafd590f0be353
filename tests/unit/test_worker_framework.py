"""Unit tests for the worker base class, the in-memory queue and the runner."""

import asyncio
import logging
from typing import Any

import pytest

from claim_workers.core.config import Settings
from claim_workers.models.task import ExternalTask, TaskVariables
from claim_workers.workers.base import (
    BaseWorker,
    TaskExecutionError,
    require_claim_id,
    require_claim_type,
    require_positive_amount,
)
from claim_workers.workers.runner import WorkerRunner
from claim_workers.workers.task_queue import InMemoryTaskQueue, TaskQueue


class EchoWorker(BaseWorker):
    """Publishes its input back, or fails on request."""

    topic_name = "echo"

    async def execute(self, task: ExternalTask, variables: TaskVariables) -> dict[str, Any]:
        failure = variables.get_str("fail_with")
        if failure == "value":
            raise ValueError("Claim ID cannot be null")
        if failure == "runtime":
            raise TaskExecutionError("Claims API unavailable")
        return {"echo": variables.get_int("n")}


class BlankTopicWorker(EchoWorker):
    """Worker that forgot its topic."""

    topic_name = "  "


class PaddedTopicWorker(EchoWorker):
    """Worker whose topic carries stray whitespace."""

    topic_name = " echo "


class FlakyQueue:
    """Queue whose first polls fail before delegating to an in-memory queue."""

    def __init__(self, inner: InMemoryTaskQueue, failures: int = 1) -> None:
        self.inner = inner
        self.failures_left = failures
        self.polls = 0

    async def fetch_and_lock(
        self, topic: str, max_tasks: int, lock_duration_ms: int
    ) -> list[ExternalTask]:
        self.polls += 1
        if self.failures_left > 0:
            self.failures_left -= 1
            raise ConnectionError("engine unreachable")
        return await self.inner.fetch_and_lock(topic, max_tasks, lock_duration_ms)

    async def complete(self, task: ExternalTask, variables: dict[str, Any]) -> None:
        await self.inner.complete(task, variables)

    async def fail(
        self,
        task: ExternalTask,
        error_message: str,
        error_details: str,
        retries: int,
        retry_timeout_ms: int,
    ) -> None:
        await self.inner.fail(task, error_message, error_details, retries, retry_timeout_ms)


class BrokenCompletionQueue(InMemoryTaskQueue):
    """Queue that cannot record completions."""

    async def complete(self, task: ExternalTask, variables: dict[str, Any]) -> None:
        raise ConnectionError("engine unreachable")


class TestVariableGuards:
    """Test the shared variable guards."""

    def test_claim_id(self) -> None:
        """Claim ids must be present and positive."""
        assert require_claim_id(TaskVariables({"claim_id": "7"})) == 7
        with pytest.raises(ValueError, match="^Claim ID cannot be null$"):
            require_claim_id(TaskVariables())
        with pytest.raises(ValueError, match="greater than zero, but was: -3"):
            require_claim_id(TaskVariables({"claim_id": -3}))

    def test_claim_type(self) -> None:
        """Claim types are parsed leniently."""
        assert require_claim_type(TaskVariables({"claim_type": " auto "})).value == "AUTO"
        with pytest.raises(ValueError, match="Claim type cannot be null or empty"):
            require_claim_type(TaskVariables())

    def test_positive_amount(self) -> None:
        """Amounts must be present and positive."""
        variables = TaskVariables({"invoice_amount": 0})

        with pytest.raises(ValueError, match="Invoice amount must be greater than zero"):
            require_positive_amount(variables, "invoice_amount", "Invoice amount")
        with pytest.raises(ValueError, match="Approved amount cannot be null"):
            require_positive_amount(variables, "approved_amount", "Approved amount")


class TestBaseWorker:
    """Test completion and failure reporting."""

    @pytest.mark.asyncio
    async def test_success_completes_task(
        self, settings: Settings, queue: InMemoryTaskQueue
    ) -> None:
        """Returned variables are published on completion."""
        task = queue.add_task("echo", {"n": 5})
        [locked] = await queue.fetch_and_lock("echo", 1, 30000)

        assert await EchoWorker(settings).handle(locked, queue)
        assert queue.completed == {task.id: {"echo": 5}}
        assert queue.pending == []

    @pytest.mark.asyncio
    async def test_first_failure_uses_default_retries(
        self, settings: Settings, queue: InMemoryTaskQueue, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A task without a retry counter gets the configured retries."""
        queue.add_task("echo", {"fail_with": "value"})
        [locked] = await queue.fetch_and_lock("echo", 1, 30000)

        with caplog.at_level(logging.WARNING):
            assert not await EchoWorker(settings).handle(locked, queue)

        [report] = queue.failures
        assert report.error_message == "Claim ID cannot be null"
        assert report.error_details == "ValueError: Claim ID cannot be null"
        assert report.retries == 3
        assert report.retry_timeout_ms == 0
        assert "rejected" in caplog.text

    @pytest.mark.asyncio
    async def test_retries_decrease(self, settings: Settings, queue: InMemoryTaskQueue) -> None:
        """Each failure consumes one retry."""
        queue.add_task("echo", {"fail_with": "runtime"}, retries=2)
        [locked] = await queue.fetch_and_lock("echo", 1, 30000)

        await EchoWorker(settings).handle(locked, queue)

        assert queue.failures[0].retries == 1
        assert queue.failures[0].error_details.startswith("TaskExecutionError: ")
        assert len(queue.pending) == 1

    @pytest.mark.asyncio
    async def test_last_retry_raises_incident(
        self, settings: Settings, queue: InMemoryTaskQueue
    ) -> None:
        """A failure with no retries left becomes an incident."""
        task = queue.add_task("echo", {"fail_with": "runtime"}, retries=1)
        [locked] = await queue.fetch_and_lock("echo", 1, 30000)

        await EchoWorker(settings).handle(locked, queue)

        assert task.id in queue.incidents
        assert queue.pending == []

    def test_remaining_retries(self, settings: Settings) -> None:
        """The retry counter never goes negative."""
        worker = EchoWorker(settings)

        assert worker.remaining_retries(ExternalTask(id="a", topic_name="echo")) == 3
        assert worker.remaining_retries(ExternalTask(id="a", topic_name="echo", retries=2)) == 1
        assert worker.remaining_retries(ExternalTask(id="a", topic_name="echo", retries=0)) == 0

    def test_in_memory_queue_is_a_task_queue(self, queue: InMemoryTaskQueue) -> None:
        """The in-memory queue satisfies the queue protocol."""
        assert isinstance(queue, TaskQueue)


class TestInMemoryTaskQueue:
    """Test lock semantics of the embedded queue."""

    @pytest.mark.asyncio
    async def test_locked_tasks_are_not_refetched(self, queue: InMemoryTaskQueue) -> None:
        """A task is handed to one fetch at a time."""
        queue.add_task("echo")
        queue.add_task("other")

        first = await queue.fetch_and_lock("echo", 10, 30000)
        second = await queue.fetch_and_lock("echo", 10, 30000)

        assert len(first) == 1
        assert first[0].worker_id == "test-worker"
        assert second == []

    @pytest.mark.asyncio
    async def test_expired_lock_is_released(self, queue: InMemoryTaskQueue) -> None:
        """Tasks come back once their lock expires."""
        queue.add_task("echo")

        await queue.fetch_and_lock("echo", 10, 0)

        assert len(await queue.fetch_and_lock("echo", 10, 30000)) == 1

    @pytest.mark.asyncio
    async def test_max_tasks(self, queue: InMemoryTaskQueue) -> None:
        """Fetches are bounded by max_tasks."""
        for _ in range(3):
            queue.add_task("echo")

        assert len(await queue.fetch_and_lock("echo", 2, 30000)) == 2

    @pytest.mark.asyncio
    async def test_unlocked_task_cannot_complete(self, queue: InMemoryTaskQueue) -> None:
        """Only locked tasks can be completed."""
        task = queue.add_task("echo")

        with pytest.raises(RuntimeError, match="is not locked"):
            await queue.complete(task, {})

    @pytest.mark.asyncio
    async def test_failure_with_retries_redelivers(self, queue: InMemoryTaskQueue) -> None:
        """Failed tasks are redelivered after the retry timeout."""
        queue.add_task("echo")
        [locked] = await queue.fetch_and_lock("echo", 1, 30000)

        await queue.fail(locked, "boom", "RuntimeError: boom", 2, 0)
        [again] = await queue.fetch_and_lock("echo", 1, 30000)

        assert again.retries == 2


class TestWorkerRunner:
    """Test subscription and polling."""

    def test_registration(self, settings: Settings, queue: InMemoryTaskQueue) -> None:
        """Blank and duplicate topics are skipped."""
        runner = WorkerRunner(
            queue,
            [EchoWorker(settings), BlankTopicWorker(settings), EchoWorker(settings)],
            settings,
        )

        assert [w.topic_name for w in runner.workers] == ["echo"]

    @pytest.mark.asyncio
    async def test_topic_is_normalized(
        self, settings: Settings, queue: InMemoryTaskQueue
    ) -> None:
        """Padded topics are polled and deduplicated by their trimmed name."""
        task = queue.add_task("echo", {"n": 4})
        padded = PaddedTopicWorker(settings)
        runner = WorkerRunner(queue, [padded, EchoWorker(settings)], settings)

        assert runner.workers == [padded]
        assert await runner.run_once(padded) == 1
        assert queue.completed[task.id] == {"echo": 4}

    @pytest.mark.asyncio
    async def test_run_once(self, settings: Settings, queue: InMemoryTaskQueue) -> None:
        """One poll handles the whole batch."""
        for n in range(3):
            queue.add_task("echo", {"n": n})
        worker = EchoWorker(settings)
        runner = WorkerRunner(queue, [worker], settings)

        assert await runner.run_once(worker) == 3
        assert sorted(v["echo"] for v in queue.completed.values()) == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_reporting_failure_does_not_stop_batch(
        self, settings: Settings, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A task whose outcome cannot be reported is logged and left to expire."""
        queue = BrokenCompletionQueue(worker_id="test-worker")
        queue.add_task("echo", {"n": 1})
        worker = EchoWorker(settings)
        runner = WorkerRunner(queue, [worker], settings)

        with caplog.at_level(logging.ERROR):
            assert await runner.run_once(worker) == 1

        assert "Could not report the outcome" in caplog.text
        assert len(queue.pending) == 1

    @pytest.mark.asyncio
    async def test_run_recovers_from_poll_failure(
        self, settings: Settings, queue: InMemoryTaskQueue
    ) -> None:
        """Polling resumes after an engine outage and stops on request."""
        task = queue.add_task("echo", {"n": 9})
        flaky = FlakyQueue(queue, failures=2)
        runner = WorkerRunner(flaky, [EchoWorker(settings)], settings)

        running = asyncio.create_task(runner.run())
        for _ in range(200):
            if task.id in queue.completed:
                break
            await asyncio.sleep(0.01)
        runner.stop()
        await asyncio.wait_for(running, timeout=2)

        assert queue.completed[task.id] == {"echo": 9}
        assert flaky.polls >= 3
        assert runner.stopping

    @pytest.mark.asyncio
    async def test_run_without_workers_returns(
        self, settings: Settings, queue: InMemoryTaskQueue
    ) -> None:
        """Nothing to run means run returns immediately."""
        await asyncio.wait_for(WorkerRunner(queue, [], settings).run(), timeout=1)
