"""Scroll depth sampling.

The measurement of a scroll surface belongs to the UI context. When a UI
executor is given, the sampler hops onto it to read the surface geometry and
rounds the result back on the calling thread, which is the tick worker.
"""

from __future__ import annotations

import math
from concurrent.futures import Executor, TimeoutError
from typing import Optional, Protocol

from loguru import logger


class ScrollSurface(Protocol):
    """Geometry of a scrollable view."""

    @property
    def content_offset_y(self) -> float: ...

    @property
    def content_inset_top(self) -> float: ...

    @property
    def content_height(self) -> float: ...


def measure_scroll_fraction(surface: ScrollSurface) -> Optional[float]:
    """Fraction of the content scrolled past, clamped to [0, 1]."""
    height = surface.content_height
    if height <= 0:
        return None
    scrolled = surface.content_offset_y + surface.content_inset_top
    return max(0.0, min(1.0, scrolled / height))


class ScrollSampler:
    """Reports the scroll depth of the attached surface as a percentage."""

    def __init__(self, ui_executor: Optional[Executor] = None, timeout: float = 1.0):
        """Initialize the sampler.

        Args:
            ui_executor: Executor bound to the UI context, or None to measure inline
            timeout: Seconds to wait for a measurement on the UI executor
        """
        self.ui_executor = ui_executor
        self.timeout = timeout
        self._surface: Optional[ScrollSurface] = None

    def attach(self, surface: ScrollSurface) -> None:
        self._surface = surface

    def detach(self) -> None:
        self._surface = None

    @property
    def attached(self) -> bool:
        return self._surface is not None

    def sample_scroll_percent(self) -> Optional[float]:
        """Sample the scroll depth, or None when there is nothing to measure."""
        surface = self._surface
        if surface is None:
            return None

        try:
            if self.ui_executor is None:
                fraction = measure_scroll_fraction(surface)
            else:
                fraction = self.ui_executor.submit(measure_scroll_fraction, surface).result(timeout=self.timeout)
        except TimeoutError:
            logger.warning(f"Scroll measurement timed out after {self.timeout}s")
            return None
        except Exception as e:
            logger.warning(f"Scroll measurement failed: {e}")
            return None

        if fraction is None:
            return None
        # Half rounds up
        return float(math.floor(fraction * 100 + 0.5))
