"""Shared fixtures for the Compass tracker tests."""

import threading
from datetime import datetime, timedelta

import pytest

from compass_tracker.config import CompassConfig
from compass_tracker.core import Clock, CompassTracker
from compass_tracker.storage import VisitStore

T0 = datetime(2026, 10, 19, 12, 0, 0)


class FakeClock(Clock):
    """Clock whose waits advance simulated time instead of sleeping.

    While ``gate`` is cleared every wait blocks until it is set again or the
    waiting tick is cancelled.
    """

    def __init__(self, start: datetime = T0):
        self._now = start
        self._lock = threading.Lock()
        self.waits: list[float] = []
        self.gate = threading.Event()
        self.gate.set()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def wait(self, cancelled: threading.Event, seconds: float) -> bool:
        while not self.gate.is_set():
            if cancelled.wait(0.005):
                return True
        # Yield so the tick chain does not spin
        if cancelled.wait(0.001):
            return True
        with self._lock:
            self.waits.append(seconds)
            self._now += timedelta(seconds=seconds)
        return False


class RecordingTransport:
    """Transport that keeps every submitted payload."""

    def __init__(self):
        self.payloads = []
        self._cond = threading.Condition()

    def submit(self, payload) -> None:
        with self._cond:
            self.payloads.append(payload)
            self._cond.notify_all()

    def wait_for(self, count: int, timeout: float = 5.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: len(self.payloads) >= count, timeout)


class StubRFVClient:
    """RFV client answering with a fixed segment."""

    def __init__(self, rfv="loyal"):
        self.rfv = rfv
        self.calls = []

    def fetch(self, user_id, account_id):
        self.calls.append((user_id, account_id))
        return self.rfv, None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def rfv_client():
    return StubRFVClient()


@pytest.fixture
def config(tmp_path):
    return CompassConfig(account_id=1234, storage_dir=tmp_path)


@pytest.fixture
def tracker(config, clock, transport, rfv_client, tmp_path):
    tracker = CompassTracker(
        config=config,
        storage=VisitStore(tmp_path),
        transport=transport,
        rfv_client=rfv_client,
        clock=clock,
    )
    yield tracker
    tracker.shutdown()
