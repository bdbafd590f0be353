"""Polling loop that drives the registered workers.

Each worker gets its own loop: fetch and lock a batch of tasks on the
worker's topic, handle them concurrently up to ``worker_concurrency``, and
sleep for the poll interval when the topic is idle. A failing poll is
logged and retried with exponential backoff.
"""

import asyncio
from collections.abc import Iterable

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.logging_utils import get_logger
from ..models.task import ExternalTask
from .base import BaseWorker
from .task_queue import TaskQueue

logger = get_logger(__name__)

MAX_BACKOFF_SECONDS = 60.0


def topic_of(worker: BaseWorker) -> str:
    """Normalized topic name of ``worker``; blank when it has none."""
    return (worker.topic_name or "").strip()


class WorkerRunner:
    """Subscribes workers to their topics and runs their poll loops."""

    def __init__(
        self,
        queue: TaskQueue,
        workers: Iterable[BaseWorker] = (),
        settings: Settings | None = None,
    ) -> None:
        """Create a runner over ``queue`` and register ``workers``."""
        settings = settings or get_settings()
        self._queue = queue
        self._max_tasks = settings.max_tasks
        self._lock_duration_ms = settings.lock_duration_ms
        self._poll_interval = settings.poll_interval_seconds
        self._concurrency = settings.worker_concurrency
        self._stop = asyncio.Event()
        self._subscriptions: dict[str, BaseWorker] = {}

        candidates = list(workers)
        for worker in candidates:
            self.register(worker)
        if candidates:
            logger.info(
                "Worker subscription completed: registered %d/%d workers",
                len(self._subscriptions),
                len(candidates),
            )

    @beartype
    def register(self, worker: BaseWorker) -> bool:
        """Subscribe ``worker`` to its topic; workers without a topic are skipped."""
        topic = topic_of(worker)
        if not topic:
            logger.error("Skipping %s: topic name is blank", type(worker).__name__)
            return False
        if topic in self._subscriptions:
            logger.error(
                "Skipping %s: topic %s already has a worker", type(worker).__name__, topic
            )
            return False

        self._subscriptions[topic] = worker
        logger.info("Subscribed %s to topic %s", type(worker).__name__, topic)
        return True

    @property
    def workers(self) -> list[BaseWorker]:
        """Registered workers in subscription order."""
        return list(self._subscriptions.values())

    @property
    def stopping(self) -> bool:
        """Whether shutdown has been requested."""
        return self._stop.is_set()

    def stop(self) -> None:
        """Request a graceful shutdown; in-flight tasks are finished first."""
        if not self._stop.is_set():
            logger.info("Shutdown requested")
            self._stop.set()

    async def run(self) -> None:
        """Run every worker's poll loop until :meth:`stop` is called."""
        if not self._subscriptions:
            logger.warning("No workers registered, nothing to run")
            return

        await asyncio.gather(
            *(self._poll_loop(topic, worker) for topic, worker in self._subscriptions.items())
        )
        logger.info("All workers stopped")

    @beartype
    async def run_once(self, worker: BaseWorker) -> int:
        """Poll ``worker``'s topic once and handle the batch; returns its size."""
        tasks = await self._queue.fetch_and_lock(
            topic_of(worker), self._max_tasks, self._lock_duration_ms
        )
        if tasks:
            await self._process(worker, tasks, asyncio.Semaphore(self._concurrency))
        return len(tasks)

    async def _poll_loop(self, topic: str, worker: BaseWorker) -> None:
        semaphore = asyncio.Semaphore(self._concurrency)
        backoff = self._poll_interval

        while not self._stop.is_set():
            try:
                tasks = await self._queue.fetch_and_lock(
                    topic, self._max_tasks, self._lock_duration_ms
                )
            except Exception:
                logger.exception(
                    "Polling topic %s failed, retrying in %.1fs", topic, backoff
                )
                await self._sleep(backoff)
                backoff = min(max(backoff, 0.1) * 2, MAX_BACKOFF_SECONDS)
                continue

            backoff = self._poll_interval
            if not tasks:
                await self._sleep(self._poll_interval)
                continue

            logger.debug("Fetched %d tasks on topic %s", len(tasks), topic)
            await self._process(worker, tasks, semaphore)

    async def _process(
        self,
        worker: BaseWorker,
        tasks: list[ExternalTask],
        semaphore: asyncio.Semaphore,
    ) -> None:
        async def handle(task: ExternalTask) -> None:
            async with semaphore:
                try:
                    await worker.handle(task, self._queue)
                except Exception:
                    # The lock expires and the queue redelivers the task.
                    logger.exception("Could not report the outcome of task %s", task.id)

        await asyncio.gather(*(handle(task) for task in tasks))

    async def _sleep(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
