"""Scan admission and serialization.

Roblox rate limits are shared by every scan the bot runs, so scans are pushed
through a single-worker queue: at most one scan talks to Roblox at a time and
scans run in the order they were requested. A per-user cooldown keeps a single
user from flooding that queue.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

ScanTask = Callable[[], Awaitable[Any]]


class CooldownGate:
    """Per-requester minimum interval between admitted scans."""

    def __init__(self, cooldown_seconds: float = 5.0, clock: Callable[[], float] = time.monotonic):
        """Initialize cooldown gate.

        Args:
            cooldown_seconds: Required gap between two admissions of one requester.
            clock: Monotonic time source in seconds.
        """
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_admitted: dict[int, float] = {}

    def admit(self, requester_id: int, now: float | None = None) -> bool:
        """Admit a request if the requester's cooldown has elapsed.

        Rejected requests leave the stored timestamp untouched.

        Args:
            requester_id: Telegram user id.
            now: Current time in seconds, defaults to the gate clock.

        Returns:
            True if admitted.
        """
        if now is None:
            now = self._clock()

        last = self._last_admitted.get(requester_id)
        if last is not None and now - last < self.cooldown_seconds:
            return False

        self._last_admitted[requester_id] = now
        return True

    def remaining(self, requester_id: int, now: float | None = None) -> float:
        """Seconds until the requester may be admitted again."""
        if now is None:
            now = self._clock()
        last = self._last_admitted.get(requester_id)
        if last is None:
            return 0.0
        return max(0.0, self.cooldown_seconds - (now - last))


class ScanQueue:
    """Single-worker FIFO queue for scan tasks.

    Tasks run one at a time in enqueue order. A failing task is logged and
    its completion future resolves to None; the worker keeps going. If the
    worker stops, the next enqueue restarts it on the same queue so tasks
    already waiting still run.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[tuple[ScanTask, asyncio.Future[Any]]] | None = None
        self._worker: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        """Number of tasks waiting to start."""
        return self._queue.qsize() if self._queue is not None else 0

    def _ensure_worker(self) -> asyncio.Queue[tuple[ScanTask, asyncio.Future[Any]]]:
        """Return the task queue, (re)starting the worker if it is not running."""
        queue = self._queue
        if queue is None:
            queue = self._queue = asyncio.Queue()

        if self._worker is None or self._worker.done():
            if self._worker is not None:
                logger.warning(f"Scan worker stopped, restarting with {queue.qsize()} pending")
            self._worker = asyncio.get_running_loop().create_task(
                self._run(queue), name="scan-queue-worker"
            )

        return queue

    def enqueue(self, task: ScanTask) -> asyncio.Future[Any]:
        """Schedule a task after every previously enqueued one.

        Must be called from within the running event loop.

        Args:
            task: Zero-argument coroutine function.

        Returns:
            Future resolved with the task result, or None if the task failed.
        """
        queue = self._ensure_worker()
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        queue.put_nowait((task, future))
        logger.debug(f"Scan task enqueued, {queue.qsize()} pending")
        return future

    async def _run(self, queue: asyncio.Queue[tuple[ScanTask, asyncio.Future[Any]]]) -> None:
        while True:
            task, future = await queue.get()
            try:
                result = await task()
            except Exception:
                logger.exception("Scan task failed")
                result = None
            except asyncio.CancelledError:
                if _worker_cancelling():
                    future.cancel()
                    raise
                # Raised by the task itself, not a shutdown of the worker
                logger.exception("Scan task was cancelled")
                result = None
            except BaseException:
                future.cancel()
                raise
            finally:
                queue.task_done()

            if not future.done():
                future.set_result(result)

    async def join(self) -> None:
        """Wait until every enqueued task has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Stop the worker. Futures of tasks still waiting are cancelled."""
        worker, queue = self._worker, self._queue
        self._worker = None
        self._queue = None

        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass

        if queue is None:
            return

        dropped = 0
        while not queue.empty():
            _, future = queue.get_nowait()
            queue.task_done()
            future.cancel()
            dropped += 1
        if dropped:
            logger.info(f"Dropped {dropped} queued scan task(s) on shutdown")


def _worker_cancelling() -> bool:
    """Check whether the running worker task itself has been asked to cancel."""
    current = asyncio.current_task()
    return current is not None and current.cancelling() > 0
