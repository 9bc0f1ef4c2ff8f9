"""
Letter submission and download.

`DownloadEmitter.submit` is the exit action of the questionnaire. It either
flags the session as incomplete and produces nothing, or builds the letter
file, parks it on the session for the browser to collect, and tracks the
event. The web layer hands the parked file out exactly once.
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional

from app.analytics.beacon import AnalyticsBeacon
from app.letter.formatter import format_letter, letter_filename
from app.letter.prompts import PromptSet
from app.letter.schemas import LetterFile
from app.letter.session import LetterSession
from app.logging.audit import audit

logger = logging.getLogger(__name__)


class DownloadEmitter:

    def __init__(
        self,
        prompts: PromptSet,
        beacon: AnalyticsBeacon,
        include_details: bool = False,
        tz: Optional[tzinfo] = None,
    ):
        self._prompts = prompts
        self._beacon = beacon
        self._include_details = include_details
        self._tz = tz

    def build(self, session: LetterSession, now: datetime) -> LetterFile:
        """Render the session's answers into a LetterFile. No side effects."""
        details = session.details if self._include_details else None
        content = format_letter(self._prompts, session.responses, now, details=details, tz=self._tz)
        return LetterFile(filename=letter_filename(now), content=content)

    def submit(self, session: LetterSession, now: Optional[datetime] = None) -> Optional[LetterFile]:
        """
        Validate and emit the letter.

        Returns None (and sets the validation flag) when any prompt is
        unanswered. Otherwise returns the new LetterFile, which is also
        stored as the session's pending download.
        """
        if not self._prompts.is_complete(session.responses):
            session.show_errors = True
            audit.info(
                "letter.submit_incomplete",
                answered=sum(1 for p in self._prompts if session.responses.get(p.id, "").strip()),
                total=len(self._prompts),
            )
            return None

        letter = self.build(session, now or datetime.now(timezone.utc))

        session.pending_download = letter
        session.show_errors = False
        session.completed = True
        session.intent_submitted = False
        session.intent_error = None

        audit.info("letter.generated", prompts=len(self._prompts), size=len(letter.content))
        self._beacon.track("generate_download")
        return letter

    @staticmethod
    def collect(session: LetterSession) -> Optional[LetterFile]:
        """Hand out the pending download once; later calls return None."""
        letter, session.pending_download = session.pending_download, None
        return letter
