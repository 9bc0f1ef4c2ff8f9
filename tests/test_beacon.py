"""
Tests for the analytics beacon and anonymous identity.

Dispatch is replaced by a recorder so no network calls are made.
"""

import re
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.analytics.beacon import AnalyticsBeacon, dispatch_in_background
from app.analytics.identity import CookieIdentity, generate_anon_id
from app.logging.config import setup_logging

ENDPOINT = "https://collect.example.com/exec"


@pytest.fixture(autouse=True)
def init_logging():
    setup_logging("debug")


@pytest.fixture
def sent() -> list[str]:
    return []


def make_beacon(sent, identity=None, endpoint=ENDPOINT) -> AnalyticsBeacon:
    return AnalyticsBeacon(identity=identity or CookieIdentity("anon123"), endpoint=endpoint, dispatch=sent.append)


class TestIdentity:
    def test_generated_id_shape(self):
        anon_id = generate_anon_id()
        assert re.fullmatch(r"[0-9a-z]+", anon_id)
        assert len(anon_id) >= 9

    def test_stored_id_reused(self):
        identity = CookieIdentity("existing")

        assert identity.get_or_create() == "existing"
        assert identity.created is False

    def test_created_once_and_cached(self):
        identity = CookieIdentity()

        first = identity.get_or_create()
        second = identity.get_or_create()

        assert first == second
        assert identity.created is True

    def test_separate_instances_do_not_share(self):
        assert CookieIdentity().get_or_create() != CookieIdentity().get_or_create()


class TestTrack:
    def test_url_carries_event_fields(self, sent):
        make_beacon(sent).track("page_view")

        assert len(sent) == 1
        url = httpx.URL(sent[0])
        assert str(url).startswith(ENDPOINT)
        assert url.params["event"] == "page_view"
        assert url.params["anon_id"] == "anon123"
        assert url.params["ts"].isdigit()
        assert "extra" not in url.params

    def test_extra_included(self, sent):
        make_beacon(sent).track("email_intent", "from=me@x.com;recipients=(none)")

        url = httpx.URL(sent[0])
        assert url.params["extra"] == "from=me@x.com;recipients=(none)"

    def test_disabled_without_endpoint(self, sent):
        make_beacon(sent, endpoint="").track("page_view")
        assert sent == []

    def test_dispatch_failure_swallowed(self):
        def explode(url):
            raise RuntimeError("network down")

        beacon = AnalyticsBeacon(identity=CookieIdentity("x"), endpoint=ENDPOINT, dispatch=explode)
        beacon.track("page_view")  # must not raise

    def test_identity_failure_swallowed(self, sent):
        identity = MagicMock()
        identity.get_or_create.side_effect = OSError("storage unavailable")

        make_beacon(sent, identity=identity).track("page_view")

        assert sent == []


class TestDispatchInBackground:
    def test_without_event_loop_uses_thread(self):
        with patch("app.analytics.beacon.threading.Thread") as thread_cls:
            dispatch_in_background("https://collect.example.com/exec?event=x")

        thread_cls.assert_called_once()
        assert thread_cls.call_args.kwargs["daemon"] is True
        thread_cls.return_value.start.assert_called_once()

    def test_blocking_send_failure_swallowed(self):
        from app.analytics.beacon import _send_blocking

        with patch("app.analytics.beacon.httpx.get", side_effect=httpx.ConnectError("down")):
            _send_blocking("https://collect.example.com/exec")  # must not raise
