"""
Step navigation for the questionnaire.

A linear state machine over step indices. Moving forward is gated on the
active prompt having a non-blank answer; the optional 'about you' step never
blocks. Moving back is never blocked and stops at 0. Submitting the letter
is not a transition: see app.letter.download.

Usage:
    from app.letter.navigator import StepNavigator
    nav = StepNavigator(prompt_set, DetailsStep.TRAILING)
    nav.next(session)   # True if the step changed
"""

import logging

from app.letter.prompts import PromptSet
from app.letter.schemas import DetailsStep, Step, StepKind
from app.letter.session import LetterSession

logger = logging.getLogger(__name__)


class StepNavigator:
    """Builds the step list once and moves a session through it."""

    def __init__(self, prompts: PromptSet, details_step: DetailsStep = DetailsStep.NONE):
        self.prompts = prompts
        self.details_step = details_step

        steps = [Step(kind=StepKind.PROMPT, prompt=p) for p in prompts]
        if details_step == DetailsStep.LEADING:
            steps.insert(0, Step(kind=StepKind.DETAILS))
        elif details_step == DetailsStep.TRAILING:
            steps.append(Step(kind=StepKind.DETAILS))
        self.steps: tuple[Step, ...] = tuple(steps)

    @property
    def total(self) -> int:
        return len(self.steps)

    @property
    def last_index(self) -> int:
        return self.total - 1

    @property
    def collects_details(self) -> bool:
        return self.details_step != DetailsStep.NONE

    def current(self, session: LetterSession) -> Step:
        return self.steps[self._clamp(session.step)]

    def question_number(self, session: LetterSession) -> int:
        """1-based position of the active prompt in the prompt set; 0 on the details step."""
        step = self.current(session)
        if step.prompt is None:
            return 0
        return self.prompts.ids.index(step.prompt.id) + 1

    def is_last(self, session: LetterSession) -> bool:
        return self._clamp(session.step) == self.last_index

    def can_advance(self, session: LetterSession) -> bool:
        """The active step is satisfied: details step, or a non-blank answer."""
        step = self.current(session)
        if not step.requires_answer:
            return True
        return bool(session.responses.get(step.prompt.id, "").strip())

    def next(self, session: LetterSession) -> bool:
        """Advance one step if allowed. Returns True when the step changed."""
        session.show_errors = False
        if self.is_last(session) or not self.can_advance(session):
            return False
        session.step = self._clamp(session.step) + 1
        logger.debug("letter.step_advanced", extra={"action": "letter.step_advanced", "step": session.step})
        return True

    def back(self, session: LetterSession) -> bool:
        """Retreat one step, floored at 0. Returns True when the step changed."""
        session.show_errors = False
        if session.step <= 0:
            session.step = 0
            return False
        session.step = self._clamp(session.step) - 1
        return True

    def progress(self, session: LetterSession) -> float:
        """Percentage of the flow reached, counting the active step."""
        return min(self._clamp(session.step) + 1, self.total) / self.total * 100

    def _clamp(self, index: int) -> int:
        return max(0, min(index, self.last_index))
