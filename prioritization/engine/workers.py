"""
Worker Pool
===========

Fan-out / fan-in over circuit groups.

Lifecycle:
    filling            producer sends every group index to the dispatcher
    closed-and-draining producer closes the dispatcher; workers keep receiving
    drained            every worker has seen end-of-stream and left its loop
    joined             the join barrier closes the result sink exactly once

The dispatcher is closed by its producer as soon as the last index is sent,
independently of worker progress. The result sink is closed only by the join
barrier, never by counting results.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Iterable, List, Optional

from ..grid.circuit_group import CircuitGroup, CircuitGroupPool
from ..profiles.store import ProfileStore, SupplyProfile
from .channel import Channel, ChannelClosed
from .netting import PeakMode, compute_group

logger = logging.getLogger(__name__)


def max_parallelism() -> int:
    """
    Worker count: min(hardware threads, scheduler quota), at least 1.

    The scheduler quota is the CPU affinity set where the platform reports it.
    """
    cpus = os.cpu_count() or 1
    try:
        quota = len(os.sched_getaffinity(0))
    except AttributeError:
        quota = cpus
    return max(1, min(cpus, quota))


class WorkDispatcher(Channel[int]):
    """Channel of circuit group indices, loaded and closed by one producer."""

    def __init__(self, capacity: Optional[int] = None):
        super().__init__(capacity=capacity, name="work dispatcher")

    @classmethod
    def preloaded(cls, indices: Iterable[int]) -> "WorkDispatcher":
        """Dispatcher holding every given index, already closed."""
        indices = list(indices)
        dispatcher = cls(capacity=len(indices))
        for index in indices:
            dispatcher.send(index)
        dispatcher.close()
        return dispatcher


class ResultSink(Channel[CircuitGroup]):
    """Channel of computed circuit groups, closed by the worker pool join barrier."""

    def __init__(self, capacity: int):
        super().__init__(capacity=capacity, name="result sink")


class WorkerPool:
    """
    Fixed pool of worker threads draining a dispatcher into a result sink.

    Each worker computes one group to completion before taking the next
    index. A worker that fails records its exception and stops; the other
    workers keep draining so the join barrier still fires, and join()
    re-raises the first recorded failure.

    Args:
        pool: Circuit groups, addressed by dispatcher index
        supply: Shared supply profile
        store: Shared demand profile store
        workers: Number of worker threads (default: max_parallelism())
        peak_mode: Peak hour reported per group
        progress: Optional tqdm-like object; update(1) per completed group
    """

    def __init__(
        self,
        pool: CircuitGroupPool,
        supply: SupplyProfile,
        store: ProfileStore,
        workers: Optional[int] = None,
        peak_mode: PeakMode = PeakMode.EXPORT,
        progress=None,
    ):
        self.pool = pool
        self.supply = supply
        self.store = store
        self.workers = max(1, int(workers)) if workers is not None else max_parallelism()
        self.peak_mode = peak_mode
        self.progress = progress

        self._lock = threading.Lock()
        self._errors: List[BaseException] = []
        self._threads: List[threading.Thread] = []
        self._barrier: Optional[threading.Thread] = None
        self.completed = 0

    @property
    def errors(self) -> List[BaseException]:
        with self._lock:
            return list(self._errors)

    def _worker(self, dispatcher: WorkDispatcher, sink: ResultSink) -> None:
        while True:
            try:
                index = dispatcher.receive()
            except ChannelClosed:
                return
            try:
                group = compute_group(self.pool[index], self.supply, self.store, self.peak_mode)
            except Exception as exc:
                logger.error("Worker %s failed on circuit group index %d: %s",
                             threading.current_thread().name, index, exc)
                with self._lock:
                    self._errors.append(exc)
                return
            sink.send(group)
            with self._lock:
                self.completed += 1
                if self.progress is not None:
                    self.progress.update(1)

    def _join_barrier(self, sink: ResultSink) -> None:
        for thread in self._threads:
            thread.join()
        sink.close()
        logger.debug("Worker pool joined, %d groups completed", self.completed)

    def start(self, dispatcher: WorkDispatcher, sink: ResultSink) -> None:
        """Launch workers and the join barrier. Returns immediately."""
        if self._threads:
            raise RuntimeError("worker pool already started")
        logger.info("Starting %d workers", self.workers)
        for n in range(self.workers):
            thread = threading.Thread(
                target=self._worker,
                args=(dispatcher, sink),
                name=f"netting-worker-{n}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()
        self._barrier = threading.Thread(
            target=self._join_barrier, args=(sink,), name="netting-join", daemon=True
        )
        self._barrier.start()

    def join(self) -> None:
        """
        Wait for the join barrier.

        Raises:
            The first exception raised by any worker.
        """
        if self._barrier is not None:
            self._barrier.join()
        errors = self.errors
        if errors:
            raise errors[0]

    def run(self) -> List[CircuitGroup]:
        """
        Compute every group in the pool and return them in completion order.

        The dispatcher is filled and closed before workers start, and the
        sink is drained on the calling thread until the barrier closes it.
        """
        dispatcher = WorkDispatcher.preloaded(self.pool.indices())
        sink = ResultSink(capacity=len(self.pool))
        self.start(dispatcher, sink)
        results = list(sink)
        self.join()
        return results
