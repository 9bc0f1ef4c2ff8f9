"""
Intent capture from the 'your letter is ready' page.

Records that the user would like help emailing their letter. Only the
addresses they typed are sent, as an analytics event; the letter itself
never leaves the browser session. This does not write to the email intent
service: the two are separate collaborators.
"""

import logging
from typing import Optional

from app.analytics.beacon import AnalyticsBeacon
from app.letter.session import LetterSession
from app.logging.audit import audit

logger = logging.getLogger(__name__)

MISSING_CONTACT_ERROR = "Add your email or at least one recipient so we know who to follow up with."


def parse_recipients(recipients_csv: Optional[str]) -> list[str]:
    """Comma-split, trim, and drop empty entries."""
    if not recipients_csv:
        return []
    return [item.strip() for item in recipients_csv.split(",") if item.strip()]


def intent_summary(primary: str, recipients: list[str]) -> str:
    return f"from={primary or '(none)'};recipients={','.join(recipients) if recipients else '(none)'}"


class IntentCaptureClient:

    def __init__(self, beacon: AnalyticsBeacon):
        self._beacon = beacon

    def submit_intent(
        self,
        session: LetterSession,
        primary_email: Optional[str],
        recipients_csv: Optional[str],
    ) -> bool:
        """
        Capture the intent once per session.

        Returns True when the intent was recorded by this call. A blank
        email with no recipients sets session.intent_error instead.
        """
        if session.intent_submitted:
            return False

        primary = (primary_email or "").strip()
        recipients = parse_recipients(recipients_csv)

        session.details.email = primary_email or ""
        session.details.recipients = recipients_csv or ""

        if not primary and not recipients:
            session.intent_error = MISSING_CONTACT_ERROR
            return False

        session.intent_error = None
        session.intent_submitted = True

        audit.info("letter.intent_captured", has_primary=bool(primary), recipient_count=len(recipients))
        self._beacon.track("email_intent", intent_summary(primary, recipients))
        return True
