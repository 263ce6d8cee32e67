"""Adaptive tick scheduling for the active page view.

Ticks run on a single worker thread that owns a FIFO of tick operations, so
at most one tick is in flight and ticks execute in index order. Each
operation waits for its deadline on a cancellable wait and then runs its
body to completion. The worker reports every finished operation back to the
scheduler together with whether it was cancelled; only an uncancelled
operation from the current generation advances the tick index and schedules
the next one.

The interval between ticks relaxes as the page view matures:

    tik 0-1   -> 5s
    tik 2     -> 10s
    tik 3-19  -> 15s
    tik >= 20 -> 20s
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional

from loguru import logger

from .clock import Clock
from .state import SessionState


def deadline_for(tik: int) -> float:
    """Seconds to wait before the tick with index ``tik``."""
    if tik < 2:
        return 5.0
    if tik == 2:
        return 10.0
    if tik < 20:
        return 15.0
    return 20.0


@dataclass
class TickOperation:
    """One scheduled tick: a deadline wait followed by its body."""

    tik: int
    page_id: str
    delay: float
    body: Callable[[TickOperation], None]
    generation: int
    cancelled: threading.Event = field(default_factory=threading.Event)

    def cancel(self) -> None:
        self.cancelled.set()

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    def run(self, clock: Clock) -> bool:
        """Wait for the deadline, then execute the body.

        Returns:
            True if the operation was cancelled before its body ran
        """
        if clock.wait(self.cancelled, self.delay):
            return True
        self.body(self)
        return False


class TickScheduler:
    """Self-rescheduling, strictly serial sequence of tick operations."""

    def __init__(
        self,
        state: SessionState,
        lock: threading.RLock,
        tick_body: Callable[[TickOperation], None],
        clock: Optional[Clock] = None,
        time_scale: float = 1.0,
    ):
        """Initialize the scheduler.

        Args:
            state: Session state shared with the tracker
            lock: Lock serializing every mutation of ``state``
            tick_body: Work performed when a tick fires
            clock: Time source for deadline waits
            time_scale: Multiplier applied to every deadline
        """
        self.state = state
        self._state_lock = lock
        self._tick_body = tick_body
        self.clock = clock or Clock()
        self.time_scale = time_scale

        self._queue: deque[TickOperation] = deque()
        self._queue_lock = threading.Lock()
        self._not_empty = threading.Condition(self._queue_lock)
        self._running_op: Optional[TickOperation] = None
        self._generation = 0
        self._worker: Optional[threading.Thread] = None
        self._shutdown = False

        # Statistics
        self._total_scheduled = 0
        self._total_completed = 0
        self._total_cancelled = 0

    def start(self) -> None:
        """Schedule the tick for the current index, if a page is active."""
        with self._state_lock:
            if not self.state.is_active():
                logger.debug("No active page, tick chain stops")
                return

            tik = self.state.tik
            operation = TickOperation(
                tik=tik,
                page_id=self.state.page_id,
                delay=deadline_for(tik) * self.time_scale,
                body=self._tick_body,
                generation=self._generation,
            )
            self._enqueue(operation)

        logger.debug(f"Scheduled tick {tik} in {operation.delay:.2f}s")

    def cancel(self) -> None:
        """Cancel queued and running ticks and stop observing their completion."""
        with self._state_lock:
            self._generation += 1

        with self._queue_lock:
            pending = list(self._queue)
            self._queue.clear()
            running = self._running_op

        for operation in pending:
            operation.cancel()
        if running is not None:
            running.cancel()

        if pending or running is not None:
            logger.debug(f"Cancelled {len(pending)} queued tick(s), running: {running is not None}")

    def shutdown(self, timeout: float = 5.0) -> None:
        """Cancel every tick and stop the worker thread."""
        self.cancel()
        with self._queue_lock:
            self._shutdown = True
            self._not_empty.notify_all()
            worker = self._worker

        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=timeout)

        logger.info(f"Tick scheduler stopped. Stats - Scheduled: {self._total_scheduled}, Completed: {self._total_completed}, Cancelled: {self._total_cancelled}")

    @property
    def is_idle(self) -> bool:
        """True when nothing is queued or running."""
        with self._queue_lock:
            return not self._queue and self._running_op is None

    def get_stats(self) -> dict:
        """Get scheduler statistics."""
        with self._queue_lock:
            return {
                "queued": len(self._queue),
                "running": self._running_op is not None,
                "generation": self._generation,
                "total_scheduled": self._total_scheduled,
                "total_completed": self._total_completed,
                "total_cancelled": self._total_cancelled,
            }

    def _enqueue(self, operation: TickOperation) -> None:
        with self._queue_lock:
            if self._shutdown:
                logger.warning("Tick scheduler is shut down, dropping tick")
                return

            self._queue.append(operation)
            self._total_scheduled += 1
            self._not_empty.notify()

            if self._worker is None:
                self._worker = threading.Thread(target=self._worker_loop, name="compass-tick-worker", daemon=True)
                self._worker.start()

    def _worker_loop(self) -> None:
        """Run tick operations one at a time in FIFO order."""
        logger.debug("Started tick worker")

        while True:
            with self._queue_lock:
                while not self._queue and not self._shutdown:
                    self._not_empty.wait()
                if self._shutdown:
                    break
                operation = self._queue.popleft()
                self._running_op = operation

            try:
                cancelled = operation.run(self.clock) or operation.is_cancelled
            except Exception as e:
                # A failed tick must not end the chain
                logger.error(f"Tick {operation.tik} failed: {e}")
                cancelled = operation.is_cancelled

            with self._queue_lock:
                self._running_op = None

            self._on_operation_finished(operation, cancelled)

        logger.debug("Tick worker finished")

    def _on_operation_finished(self, operation: TickOperation, cancelled: bool) -> None:
        """Advance and reschedule after an operation that ran to completion."""
        if cancelled:
            self._total_cancelled += 1
            return

        with self._state_lock:
            if operation.generation != self._generation:
                self._total_cancelled += 1
                return

            self._total_completed += 1
            self.state.tik = operation.tik + 1
            self.start()
