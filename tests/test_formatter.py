"""Tests for letter formatting and file naming."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from app.letter.formatter import format_letter, format_timestamp, letter_filename, format_details
from app.letter.prompts import PromptSet
from app.letter.schemas import NOT_PROVIDED, PersonalDetails, Prompt

TIMESTAMP = datetime(2026, 10, 18, 15, 4, 5, 123456, tzinfo=timezone.utc)


def make_prompts() -> PromptSet:
    return PromptSet([
        Prompt(id="first", title="What matters most?", placeholder="..."),
        Prompt(id="second", title="What would you change?", placeholder="..."),
        Prompt(id="third", title="What should they remember?", placeholder="..."),
    ])


class TestFormatTimestamp:
    def test_long_form_afternoon(self):
        assert format_timestamp(TIMESTAMP) == "Sunday, October 18, 2026 at 3:04 PM"

    def test_midnight_is_twelve_am(self):
        ts = datetime(2026, 1, 1, 0, 7)
        assert format_timestamp(ts) == "Thursday, January 1, 2026 at 12:07 AM"

    def test_noon_is_twelve_pm(self):
        ts = datetime(2026, 1, 1, 12, 0)
        assert format_timestamp(ts) == "Thursday, January 1, 2026 at 12:00 PM"

    def test_converted_to_timezone(self):
        la = ZoneInfo("America/Los_Angeles")
        assert format_timestamp(TIMESTAMP, la) == "Sunday, October 18, 2026 at 8:04 AM"

    def test_naive_timestamp_not_shifted(self):
        ts = datetime(2026, 10, 18, 15, 4)
        assert format_timestamp(ts, ZoneInfo("America/Los_Angeles")) == "Sunday, October 18, 2026 at 3:04 PM"


class TestFormatLetter:
    def test_all_answered(self):
        prompts = make_prompts()
        responses = {"first": "  Family  ", "second": "Nothing", "third": "Be kind"}

        letter = format_letter(prompts, responses, TIMESTAMP)

        assert letter == (
            "Legacy Letter\n"
            "Created on: Sunday, October 18, 2026 at 3:04 PM\n"
            "\n"
            "What matters most?\nFamily\n"
            "\n"
            "What would you change?\nNothing\n"
            "\n"
            "What should they remember?\nBe kind\n"
        )
        assert NOT_PROVIDED not in letter

    def test_prompt_order_preserved(self):
        prompts = make_prompts()
        responses = {"third": "c", "first": "a", "second": "b"}

        letter = format_letter(prompts, responses, TIMESTAMP)

        assert letter.index("What matters most?") < letter.index("What would you change?")
        assert letter.index("What would you change?") < letter.index("What should they remember?")

    def test_blank_answer_becomes_placeholder(self):
        prompts = make_prompts()
        responses = {"first": "Family", "second": "   \n\t ", "third": ""}

        letter = format_letter(prompts, responses, TIMESTAMP)

        assert "What would you change?\n[Not provided]\n" in letter
        assert "What should they remember?\n[Not provided]\n" in letter
        assert letter.count(NOT_PROVIDED) == 2

    def test_missing_key_treated_as_blank(self):
        letter = format_letter(make_prompts(), {"first": "Family"}, TIMESTAMP)
        assert letter.count(NOT_PROVIDED) == 2

    def test_long_answer_passes_through(self):
        long_answer = "word " * 5000
        letter = format_letter(make_prompts(), {"first": long_answer}, TIMESTAMP)
        assert long_answer.strip() in letter

    def test_inner_whitespace_kept(self):
        letter = format_letter(make_prompts(), {"first": "line one\n\nline two"}, TIMESTAMP)
        assert "What matters most?\nline one\n\nline two\n" in letter

    def test_pure(self):
        prompts = make_prompts()
        responses = {"first": "a", "second": "b", "third": "c"}
        before = dict(responses)

        assert format_letter(prompts, responses, TIMESTAMP) == format_letter(prompts, responses, TIMESTAMP)
        assert responses == before

    def test_details_block_included(self):
        details = PersonalDetails(name="Ada", email="ada@example.com", recipients="")

        letter = format_letter(make_prompts(), {}, TIMESTAMP, details=details)

        assert letter.startswith(
            "Legacy Letter\n"
            "Created on: Sunday, October 18, 2026 at 3:04 PM\n"
            "\n"
            "Name: Ada\n"
            "Email: ada@example.com\n"
            "\n"
            "What matters most?\n"
        )
        assert "Recipients:" not in letter

    def test_blank_details_omitted(self):
        with_blank = format_letter(make_prompts(), {}, TIMESTAMP, details=PersonalDetails())
        without = format_letter(make_prompts(), {}, TIMESTAMP)
        assert with_blank == without


class TestFormatDetails:
    def test_all_fields(self):
        details = PersonalDetails(name=" Ada ", email="ada@example.com", recipients="a@x.com, b@x.com")
        assert format_details(details) == (
            "Name: Ada\nEmail: ada@example.com\nRecipients: a@x.com, b@x.com"
        )


class TestLetterFilename:
    def test_colons_and_dots_replaced(self):
        assert letter_filename(TIMESTAMP) == "legacy-letter-2026-10-18T15-04-05-123Z.txt"

    def test_converted_to_utc(self):
        ts = datetime(2026, 10, 18, 8, 4, 5, tzinfo=ZoneInfo("America/Los_Angeles"))
        assert letter_filename(ts) == "legacy-letter-2026-10-18T15-04-05-000Z.txt"

    def test_naive_treated_as_utc(self):
        ts = datetime(2026, 1, 2, 3, 4, 5, 6000)
        assert letter_filename(ts) == "legacy-letter-2026-01-02T03-04-05-006Z.txt"
