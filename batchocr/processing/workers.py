"""Fixed-size pool of recognition workers with per-thread engines."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed, wait
from typing import Generic, TypeVar

from ..constants import SHUTDOWN_TIMEOUT
from ..recognition.handle import EngineFactory, EngineHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkerPool(Generic[T]):
    """Runs ``work(handle, item)`` over items with N threads.

    Every worker builds its own engine handle inside its thread and pulls
    items from a shared queue until it is empty. Handles never leave the
    thread that created them.

    ``run`` blocks until all workers finish. On KeyboardInterrupt, workers
    are told to stop after their current item and given ``shutdown_timeout``
    seconds before pending work is cancelled and the interrupt re-raised.

    Example:
        >>> pool = WorkerPool(4, engine_registry.factory("tesseract"))
        >>> pool.run(range(page_count), lambda handle, index: process_page(handle, index))
    """

    def __init__(
        self,
        workers: int,
        engine_factory: EngineFactory,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT,
        name: str = "ocr-worker",
    ):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.workers = workers
        self.engine_factory = engine_factory
        self.shutdown_timeout = shutdown_timeout
        self.name = name
        self.errors: list[BaseException] = []
        self._stop = threading.Event()

    def stop(self) -> None:
        self._stop.set()

    def _worker_loop(self, pending: queue.Queue[T], work: Callable[[EngineHandle, T], None]) -> int:
        done = 0
        with EngineHandle.open(self.engine_factory) as handle:
            while not self._stop.is_set():
                try:
                    item = pending.get_nowait()
                except queue.Empty:
                    break
                work(handle, item)
                done += 1
        logger.debug("%s finished %d items", threading.current_thread().name, done)
        return done

    def run(self, items: Iterable[T], work: Callable[[EngineHandle, T], None]) -> int:
        """Process every item; returns the number of items handled.

        A worker that crashes (for example because its engine cannot start) is
        logged and recorded in ``errors``; the remaining workers drain the queue.
        """
        pending: queue.Queue[T] = queue.Queue()
        for item in items:
            pending.put(item)

        self._stop.clear()
        self.errors = []
        handled = 0
        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix=self.name)
        futures = [executor.submit(self._worker_loop, pending, work) for _ in range(self.workers)]
        try:
            for future in as_completed(futures):
                try:
                    handled += future.result()
                except Exception as e:  # noqa: BLE001 - one worker failing must not stop the others
                    self.errors.append(e)
                    logger.error("Worker failed: %s", e)
        except BaseException:
            self._stop.set()
            logger.warning("Interrupted, waiting up to %.0fs for workers to finish", self.shutdown_timeout)
            _, not_done = wait(futures, timeout=self.shutdown_timeout)
            if not_done:
                logger.warning("%d worker(s) did not stop in time, cancelling", len(not_done))
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return handled
