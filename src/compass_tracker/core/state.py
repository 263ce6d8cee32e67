"""Session state for the page view currently being tracked.

Derived fields are recomputed by the setter that changes their inputs:
setting a page url issues a page id and resets the tick index, changing
either date recomputes the visit duration, and starting a new visit renews
the session id.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

# Stored when the caller clears the user type
CLEARED_USER_TYPE = "0"


class UserType(str, Enum):
    """Kinds of identified users."""

    LOGGED = "logged"
    PAID = "paid"


def to_timestamp(value: Optional[datetime]) -> Optional[int]:
    """Convert a date to integer milliseconds since the epoch."""
    if value is None:
        return None
    return int(value.timestamp() * 1000)


@dataclass
class SessionState:
    """Mutable record of the current page view and visit."""

    account_id: Optional[int] = None
    session_id: Optional[str] = None
    page_url: Optional[str] = None
    page_id: Optional[str] = None
    user_id: Optional[str] = None
    user_type: Optional[str] = None
    compass_version: Optional[str] = None

    first_visit_date: Optional[datetime] = None
    current_visit_date: Optional[datetime] = None
    start_page_date: Optional[datetime] = None
    current_date: Optional[datetime] = None
    visit_duration: Optional[int] = None

    tik: int = 0
    pages_viewed: int = 0

    def set_page_url(self, url: Optional[str]) -> None:
        """Set the page url, issuing a fresh page id for a non-null url."""
        self.page_url = url
        if url is None:
            self.page_id = None
            return
        self.page_id = str(uuid.uuid4())
        self.tik = 0

    def set_start_page_date(self, value: Optional[datetime]) -> None:
        self.start_page_date = value
        self._recompute_visit_duration()

    def set_current_date(self, value: Optional[datetime]) -> None:
        self.current_date = value
        self._recompute_visit_duration()

    def set_current_visit_date(self, value: Optional[datetime]) -> None:
        """Start a new logical visit, which always renews the session id."""
        self.current_visit_date = value
        self.session_id = str(uuid.uuid4())

    def set_user_type(self, user_type: Optional[UserType]) -> None:
        self.user_type = user_type.value if user_type is not None else CLEARED_USER_TYPE

    def is_active(self) -> bool:
        return self.page_url is not None

    def snapshot(self) -> SessionState:
        """Return an independent copy of the current state."""
        return copy.copy(self)

    def _recompute_visit_duration(self) -> None:
        if self.current_date is None or self.start_page_date is None:
            self.visit_duration = None
            return
        self.visit_duration = int((self.current_date - self.start_page_date).total_seconds())
