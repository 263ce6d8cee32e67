"""HTTP sender for transmitting tick payloads to the ingest API.

Payloads are form-encoded and POSTed from a single background worker, so
heartbeats leave the device in the order they were submitted and never
concurrently. Submission is fire-and-forget: failures are logged and counted
but never retried or reported back to the scheduler.
"""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin
from urllib.request import Request, urlopen

from loguru import logger

from ..config.settings import SenderConfig

if TYPE_CHECKING:
    from ..core.payload import TickPayload


class Transport(Protocol):
    """Anything that can take a tick payload off the scheduler's hands."""

    def submit(self, payload: TickPayload) -> Optional[Future]: ...


def post_form(url: str, body: str, config: SenderConfig) -> Tuple[bool, str, bytes]:
    """POST a form-encoded body.

    Returns:
        Tuple of (success, error_message, response_body)
    """
    req = Request(
        url,
        data=body.encode("utf-8"),
        headers={
            "Content-Type": "application/x-www-form-urlencoded; charset=utf-8",
            "User-Agent": config.user_agent,
        },
        method="POST",
    )

    try:
        with urlopen(req, timeout=config.timeout_seconds) as response:
            if 200 <= response.status < 300:
                return True, "", response.read()
            return False, f"HTTP {response.status}: {response.reason}", b""

    except HTTPError as e:
        return False, f"HTTP error: {e.code} {e.reason}", b""

    except URLError as e:
        return False, f"Network error: {e.reason}", b""

    except Exception as e:
        return False, f"Request error: {e}", b""


class IngestSender:
    """Serial, fire-and-forget transport for tick payloads."""

    def __init__(self, config: SenderConfig = SenderConfig()):
        """Initialize the ingest sender.

        Args:
            config: Sender configuration
        """
        self.config = config
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="compass-ingest")

        # Statistics
        self._total_sent = 0
        self._total_failed = 0
        self._total_send_time = 0.0
        self._last_successful_send: Optional[datetime] = None
        self._last_error: Optional[str] = None

    @property
    def ingest_url(self) -> str:
        return urljoin(self.config.api_base_url, self.config.ingest_endpoint)

    def submit(self, payload: TickPayload) -> Optional[Future]:
        """Queue a payload for sending and return immediately."""
        body = payload.to_form()
        try:
            return self._executor.submit(self.send, body, payload.tik)
        except RuntimeError:
            logger.warning(f"Sender is shut down, dropping tick {payload.tik}")
            return None

    def send(self, body: str, tik: int = 0) -> Tuple[bool, str]:
        """Send one encoded payload.

        Args:
            body: Form-encoded payload
            tik: Tick index, for logging

        Returns:
            Tuple of (success, error_message)
        """
        start_time = time.time()
        success, error_msg, _ = post_form(self.ingest_url, body, self.config)
        self._total_send_time += time.time() - start_time

        if success:
            self._total_sent += 1
            self._last_successful_send = datetime.now()
            self._last_error = None
            logger.debug(f"Sent tick {tik}")
        else:
            self._total_failed += 1
            self._last_error = error_msg
            logger.warning(f"Failed to send tick {tik}: {error_msg}")

        return success, error_msg

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting payloads, optionally flushing queued ones."""
        self._executor.shutdown(wait=wait)
        logger.info(f"Ingest sender stopped. Stats - Sent: {self._total_sent}, Failed: {self._total_failed}")

    def get_stats(self) -> Dict[str, Any]:
        """Get sender statistics."""
        attempts = self._total_sent + self._total_failed
        return {
            "total_sent": self._total_sent,
            "total_failed": self._total_failed,
            "success_rate": self._total_sent / max(1, attempts),
            "average_send_time_seconds": self._total_send_time / max(1, attempts),
            "last_successful_send": self._last_successful_send.isoformat() if self._last_successful_send else None,
            "last_error": self._last_error,
        }
