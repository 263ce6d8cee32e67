"""Compass tracker facade.

The tracker turns page-view lifecycle calls into session state changes and
scheduler commands. The host application constructs one tracker at start-up
and keeps it for the life of the process.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from loguru import logger

from ..config.settings import CompassConfig
from ..rfv.client import RFVClient
from ..sender.http_sender import IngestSender, Transport
from ..storage.visit_store import VisitStore
from .clock import Clock
from .conversions import ConversionBuffer
from .payload import build_payload
from .scheduler import TickOperation, TickScheduler
from .scroll import ScrollSampler, ScrollSurface
from .state import SessionState, UserType


class CompassTracker:
    """Tracks one page view at a time and emits adaptive heartbeats."""

    def __init__(
        self,
        config: Optional[CompassConfig] = None,
        storage: Optional[VisitStore] = None,
        transport: Optional[Transport] = None,
        rfv_client: Optional[RFVClient] = None,
        scroll_sampler: Optional[ScrollSampler] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize the tracker.

        Args:
            config: Tracker configuration
            storage: Persistent visit storage
            transport: Destination for tick payloads
            rfv_client: RFV lookup service
            scroll_sampler: Scroll depth sampler
            clock: Time source for ticks
        """
        self.config = config or CompassConfig()
        self.storage = storage or VisitStore(self.config.storage_dir)
        self.transport = transport or IngestSender(self.config.get_sender_config())
        self.rfv_client = rfv_client or RFVClient(self.config.get_sender_config())
        self.scroll_sampler = scroll_sampler or ScrollSampler(timeout=self.config.scroll_sample_timeout)
        self.clock = clock or Clock()

        self.conversions = ConversionBuffer()
        self._lock = threading.RLock()
        self._rfv_executor: Optional[ThreadPoolExecutor] = None

        self.storage.record_visit()

        self._state = SessionState(account_id=self.config.account_id, compass_version=self.config.compass_version)
        self._state.first_visit_date = self.storage.first_visit_date
        self._state.set_current_visit_date(self.clock.now())
        self._state.session_id = self.storage.session_id

        self.scheduler = TickScheduler(
            state=self._state,
            lock=self._lock,
            tick_body=self._run_tick,
            clock=self.clock,
            time_scale=self.config.time_scale,
        )

        logger.info(f"Initialized Compass tracker for account {self.config.account_id}")

    def start_page_view(self, url: str, scroll_surface: Optional[ScrollSurface] = None) -> None:
        """Start tracking a page view, replacing any active one."""
        with self._lock:
            self.scheduler.cancel()
            if scroll_surface is not None:
                self.scroll_sampler.attach(scroll_surface)
            self._state.set_page_url(url)
            self._state.set_start_page_date(self.clock.now())
            self._state.pages_viewed += 1
            self.scheduler.start()

        logger.info(f"Started page view {url}")

    def stop_tracking(self) -> None:
        """Stop tracking the current page view."""
        with self._lock:
            self._state.set_page_url(None)
            self.scheduler.cancel()

        self.scroll_sampler.detach()
        logger.info("Stopped tracking")

    def set_user_id(self, user_id: Optional[str]) -> None:
        with self._lock:
            self._state.user_id = user_id

    def set_user_type(self, user_type: Optional[UserType]) -> None:
        with self._lock:
            self._state.set_user_type(user_type)

    def track(self, conversion: str) -> None:
        """Record a conversion; it is sent with the next tick."""
        self.conversions.append(conversion)

    def fetch_rfv(self) -> Optional[str]:
        """Look up the RFV segment for the current user, blocking."""
        with self._lock:
            user_id = self._state.user_id
            account_id = self._state.account_id

        if user_id is None or account_id is None:
            return None

        rfv, _ = self.rfv_client.fetch(user_id, account_id)
        return rfv

    def get_rfv(self, completion: Callable[[Optional[str]], None]) -> Future:
        """Look up the RFV segment in the background and pass it to ``completion``."""
        with self._lock:
            if self._rfv_executor is None:
                self._rfv_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="compass-rfv")
            executor = self._rfv_executor

        def lookup() -> None:
            try:
                rfv = self.fetch_rfv()
            except Exception as e:
                logger.error(f"RFV lookup failed: {e}")
                rfv = None
            completion(rfv)

        try:
            return executor.submit(lookup)
        except RuntimeError:
            logger.warning("RFV lookup requested after shutdown")
            completion(None)
            skipped: Future = Future()
            skipped.set_result(None)
            return skipped

    def snapshot(self) -> SessionState:
        """Copy of the current session state."""
        with self._lock:
            return self._state.snapshot()

    def shutdown(self) -> None:
        """Stop ticking and release worker threads."""
        self.stop_tracking()
        self.scheduler.shutdown()

        if self._rfv_executor is not None:
            self._rfv_executor.shutdown(wait=False)

        shutdown = getattr(self.transport, "shutdown", None)
        if callable(shutdown):
            shutdown()

    def _run_tick(self, operation: TickOperation) -> None:
        """Snapshot the session, sample, drain and hand the payload to transport."""
        with self._lock:
            if self._state.page_id != operation.page_id:
                logger.debug(f"Skipping tick {operation.tik} for a page that is no longer active")
                return

            self._state.set_current_date(self.clock.now())
            snapshot = self._state.snapshot()

        snapshot.tik = operation.tik
        scroll_percent = self.scroll_sampler.sample_scroll_percent()
        conversions = self.conversions.drain()

        payload = build_payload(snapshot, scroll_percent, conversions)
        logger.debug(f"Tick {payload.tik} for {payload.page_url}: duration={payload.visit_duration}s scroll={scroll_percent} conversions={len(conversions)}")

        self.transport.submit(payload)
