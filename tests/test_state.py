"""Tests for session state and its derived fields."""

from datetime import datetime, timedelta

from compass_tracker.core import CLEARED_USER_TYPE, SessionState, UserType
from compass_tracker.core.state import to_timestamp


def test_page_url_issues_fresh_page_id_and_resets_tik():
    state = SessionState()
    state.set_page_url("https://x/a")
    first_page_id = state.page_id
    state.tik = 7

    state.set_page_url("https://x/b")

    assert state.page_id is not None
    assert state.page_id != first_page_id
    assert state.tik == 0


def test_clearing_page_url_clears_page_id():
    state = SessionState()
    state.set_page_url("https://x/a")
    state.tik = 3

    state.set_page_url(None)

    assert state.page_id is None
    assert not state.is_active()
    assert state.tik == 3


def test_visit_duration_follows_both_dates():
    start = datetime(2026, 1, 1, 10, 0, 0)
    state = SessionState()
    assert state.visit_duration is None

    state.set_start_page_date(start)
    state.set_current_date(start + timedelta(seconds=15, milliseconds=700))
    assert state.visit_duration == 15

    state.set_start_page_date(start + timedelta(seconds=10))
    assert state.visit_duration == 5


def test_new_visit_renews_session_id():
    state = SessionState()
    state.set_current_visit_date(datetime.now())
    first_session = state.session_id

    state.set_current_visit_date(datetime.now())

    assert first_session is not None
    assert state.session_id != first_session


def test_user_type_values():
    state = SessionState()
    state.set_user_type(UserType.PAID)
    assert state.user_type == "paid"

    state.set_user_type(None)
    assert state.user_type == CLEARED_USER_TYPE == "0"


def test_snapshot_is_independent():
    state = SessionState()
    state.set_page_url("https://x/a")
    snapshot = state.snapshot()

    state.tik = 4
    state.set_page_url("https://x/b")

    assert snapshot.tik == 0
    assert snapshot.page_url == "https://x/a"


def test_timestamps_are_milliseconds():
    value = datetime(2026, 1, 1, 0, 0, 0)
    assert to_timestamp(value) == int(value.timestamp()) * 1000
    assert to_timestamp(None) is None
