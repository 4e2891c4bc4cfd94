"""
Concurrent window task scheduling.

Dispatches one task per rolling window to a thread or process pool, collects
results in completion order into window-ordered slots, and supports
cooperative cancellation.
"""

from concurrent.futures import (
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import threading

from ..core.exceptions import TaskFailureError

logger = logging.getLogger(__name__)

ProgressSink = Callable[[float], None]
StopQuery = Callable[[], bool]


class RunState(Enum):
    """Lifecycle of one scheduler run."""
    IDLE = 'idle'
    DISPATCHING = 'dispatching'
    COLLECTING = 'collecting'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    FAILED = 'failed'


class CancellationToken:
    """
    Thread-safe cancellation flag.

    Calling the token returns whether cancellation was requested, so it can
    be passed wherever a stop query is expected.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self._event.is_set()


class WindowTaskScheduler:
    """
    Scheduler for independent per-window tasks.

    Only the coordinating thread writes result slots and polls the stop
    query; workers just return values.
    """

    def __init__(self, max_workers: Optional[int] = None, use_processes: bool = False):
        """
        Initialize scheduler.

        Args:
            max_workers: Pool size (default: executor's own default)
            use_processes: Use a process pool instead of threads
        """
        self.max_workers = max_workers
        self.use_processes = use_processes
        self.state = RunState.IDLE

    def _create_executor(self) -> Executor:
        if self.use_processes:
            return ProcessPoolExecutor(max_workers=self.max_workers)
        return ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='window')

    @staticmethod
    def _stop_requested(should_stop: Optional[StopQuery]) -> bool:
        return bool(should_stop()) if should_stop is not None else False

    @staticmethod
    def _cancel_pending(futures: Dict[Future, int]) -> int:
        return sum(1 for future in futures if future.cancel())

    def _abandon(self, futures: Dict[Future, int], collected: int) -> None:
        self.state = RunState.CANCELLED
        cancelled = self._cancel_pending(futures)
        logger.info(
            f"Run cancelled: discarded {collected} collected result(s), "
            f"cancelled {cancelled} pending task(s)"
        )

    def run(
        self,
        task: Callable[[Any], Any],
        windows: Sequence[Any],
        progress: Optional[ProgressSink] = None,
        should_stop: Optional[StopQuery] = None,
    ) -> Optional[List[Any]]:
        """
        Run ``task`` on every window.

        Args:
            task: Callable applied to each window (picklable for process pools)
            windows: Sequence of window inputs
            progress: Called with the completion fraction after each result
            should_stop: Polled between results; True abandons the run

        Returns:
            Results in window order, or None if the run was cancelled

        Raises:
            TaskFailureError: If any task raises
        """
        total = len(windows)
        slots: List[Any] = [None] * total
        self.state = RunState.DISPATCHING

        if total == 0:
            self.state = RunState.COMPLETED
            return slots

        executor = self._create_executor()
        futures: Dict[Future, int] = {}
        collected = 0
        highest = -1

        try:
            for index, window in enumerate(windows):
                if self._stop_requested(should_stop):
                    self._abandon(futures, collected)
                    return None
                futures[executor.submit(task, window)] = index

            logger.debug(f"Dispatched {total} window task(s)")
            self.state = RunState.COLLECTING

            for future in as_completed(futures):
                if self._stop_requested(should_stop):
                    self._abandon(futures, collected)
                    return None

                index = futures[future]
                try:
                    value = future.result()
                except Exception as e:
                    self.state = RunState.FAILED
                    self._cancel_pending(futures)
                    logger.error(f"Window task {index} failed: {e}")
                    raise TaskFailureError(index, f"{type(e).__name__}: {e}") from e

                slots[index] = value
                collected += 1
                highest = max(highest, index)

                if progress is not None:
                    progress((highest + 1) / total)

                if self._stop_requested(should_stop):
                    self._abandon(futures, collected)
                    return None

            self.state = RunState.COMPLETED
            return slots

        finally:
            executor.shutdown(wait=self.state is RunState.COMPLETED, cancel_futures=True)
