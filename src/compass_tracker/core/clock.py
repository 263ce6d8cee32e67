"""Time source used by the tick scheduler."""

from __future__ import annotations

import threading
from datetime import datetime


class Clock:
    """Wall clock with a cancellable wait."""

    def now(self) -> datetime:
        return datetime.now()

    def wait(self, cancelled: threading.Event, seconds: float) -> bool:
        """Block for ``seconds`` or until ``cancelled`` is set.

        Returns:
            True if the wait ended because of cancellation
        """
        return cancelled.wait(seconds)
