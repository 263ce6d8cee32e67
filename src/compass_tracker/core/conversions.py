"""Buffer of conversion events recorded between ticks."""

from __future__ import annotations

import threading

from loguru import logger


class ConversionBuffer:
    """Thread-safe, append-ordered buffer drained once per tick."""

    def __init__(self):
        self._conversions: list[str] = []
        self._lock = threading.Lock()

    def append(self, conversion: str) -> None:
        """Record a conversion for the next tick."""
        with self._lock:
            self._conversions.append(conversion)
            logger.debug(f"Recorded conversion '{conversion}', pending: {len(self._conversions)}")

    def drain(self) -> list[str]:
        """Return every pending conversion and clear the buffer atomically."""
        with self._lock:
            drained = self._conversions
            self._conversions = []
        return drained

    def __len__(self) -> int:
        with self._lock:
            return len(self._conversions)
