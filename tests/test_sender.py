"""Tests for the ingest sender and RFV client."""

import json
from urllib.error import URLError

import pytest

from compass_tracker.config import SenderConfig
from compass_tracker.core import TickPayload
from compass_tracker.rfv import RFVClient
from compass_tracker.sender import IngestSender, decode_form
from compass_tracker.sender import http_sender


class _Response:
    def __init__(self, status=200, body=b""):
        self.status = status
        self.reason = "OK"
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class _Captured(list):
    """Requests seen by the fake urlopen."""


@pytest.fixture
def requests(monkeypatch):
    """Capture outgoing requests and answer with a configurable response."""
    captured = _Captured()
    answer = {"response": _Response()}

    def fake_urlopen(req, timeout=None):
        captured.append(req)
        response = answer["response"]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(http_sender, "urlopen", fake_urlopen)
    captured.answer = answer
    return captured


def test_submit_posts_form_body(requests):
    sender = IngestSender(SenderConfig(api_base_url="https://ingest.example.test"))
    payload = TickPayload(tik=2, visit_duration=20, page_url="https://x/a b", conversions="signup")

    sender.submit(payload).result(timeout=2)
    sender.shutdown()

    assert len(requests) == 1
    req = requests[0]
    assert req.full_url == "https://ingest.example.test/ingest.php"
    assert req.get_method() == "POST"
    assert req.get_header("Content-type").startswith("application/x-www-form-urlencoded")
    fields = decode_form(req.data.decode("utf-8"))
    assert fields == {"a": "2", "l": "20", "conv": "signup", "url": "https://x/a b"}
    assert sender.get_stats()["total_sent"] == 1


def test_payloads_are_sent_in_submission_order(requests):
    sender = IngestSender()
    futures = [sender.submit(TickPayload(tik=i)) for i in range(5)]
    for future in futures:
        future.result(timeout=2)
    sender.shutdown()

    assert [decode_form(req.data.decode("utf-8"))["a"] for req in requests] == ["0", "1", "2", "3", "4"]


def test_network_failure_is_counted_not_raised(requests):
    requests.answer["response"] = URLError("offline")
    sender = IngestSender()

    success, error_msg = sender.submit(TickPayload(tik=0)).result(timeout=2)
    sender.shutdown()

    assert len(requests) == 1
    assert not success
    assert "offline" in error_msg
    assert sender.get_stats()["total_failed"] == 1
    assert sender.get_stats()["last_error"] == error_msg


def test_submit_after_shutdown_is_dropped(requests):
    sender = IngestSender()
    sender.shutdown()

    assert sender.submit(TickPayload(tik=0)) is None
    assert requests == []


def test_rfv_json_response(requests):
    requests.answer["response"] = _Response(body=json.dumps({"rfv": "loyal"}).encode())
    client = RFVClient(SenderConfig(api_base_url="https://ingest.example.test"))

    assert client.fetch("user-1", 1234) == ("loyal", None)
    assert requests[0].full_url == "https://ingest.example.test/rfv.php"
    assert decode_form(requests[0].data.decode("utf-8")) == {"u": "user-1", "ac": "1234"}


def test_rfv_plain_text_response(requests):
    requests.answer["response"] = _Response(body=b"occasional\n")
    assert RFVClient().fetch("user-1", 1234) == ("occasional", None)


def test_rfv_failure_returns_error(requests):
    requests.answer["response"] = URLError("offline")
    rfv, error_msg = RFVClient().fetch("user-1", 1234)

    assert rfv is None
    assert "offline" in error_msg
