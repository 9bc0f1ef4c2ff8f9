"""Tests for intent capture on the 'letter ready' card."""

from unittest.mock import MagicMock

import pytest

from app.intent.client import (
    MISSING_CONTACT_ERROR, IntentCaptureClient, intent_summary, parse_recipients,
)
from app.letter.session import LetterSession
from app.logging.config import setup_logging


@pytest.fixture(autouse=True)
def init_logging():
    setup_logging("debug")


@pytest.fixture
def beacon() -> MagicMock:
    return MagicMock()


@pytest.fixture
def session() -> LetterSession:
    return LetterSession(responses={"a": "done"}, completed=True)


class TestParseRecipients:
    def test_split_trim_drop_empty(self):
        assert parse_recipients(" a@x.com, ,b@x.com ,, ") == ["a@x.com", "b@x.com"]

    def test_empty(self):
        assert parse_recipients("") == []
        assert parse_recipients(None) == []
        assert parse_recipients(" , ") == []


class TestIntentSummary:
    def test_both(self):
        assert intent_summary("me@x.com", ["a@x.com", "b@x.com"]) == "from=me@x.com;recipients=a@x.com,b@x.com"

    def test_none(self):
        assert intent_summary("", []) == "from=(none);recipients=(none)"


class TestSubmitIntent:
    def test_blank_everything_is_rejected(self, beacon, session):
        client = IntentCaptureClient(beacon)

        assert client.submit_intent(session, "   ", " , ") is False
        assert session.intent_error == MISSING_CONTACT_ERROR
        assert session.intent_submitted is False
        beacon.track.assert_not_called()

    def test_primary_only(self, beacon, session):
        client = IntentCaptureClient(beacon)

        assert client.submit_intent(session, " me@x.com ", "") is True
        assert session.intent_submitted is True
        assert session.intent_error is None
        beacon.track.assert_called_once_with("email_intent", "from=me@x.com;recipients=(none)")

    def test_recipients_only(self, beacon, session):
        client = IntentCaptureClient(beacon)

        assert client.submit_intent(session, "", "a@x.com, b@x.com") is True
        beacon.track.assert_called_once_with("email_intent", "from=(none);recipients=a@x.com,b@x.com")

    def test_error_cleared_on_success(self, beacon, session):
        client = IntentCaptureClient(beacon)
        client.submit_intent(session, "", "")
        client.submit_intent(session, "me@x.com", "")

        assert session.intent_error is None
        assert session.intent_submitted is True

    def test_only_once_per_session(self, beacon, session):
        client = IntentCaptureClient(beacon)
        client.submit_intent(session, "me@x.com", "")

        assert client.submit_intent(session, "other@x.com", "") is False
        assert beacon.track.call_count == 1
