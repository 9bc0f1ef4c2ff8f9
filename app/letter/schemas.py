"""
Data models for the letter-building flow.

Prompts are static and immutable once loaded. Everything a user types lives
in a LetterSession (see app.letter.session) and is never written to disk.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


NOT_PROVIDED = "[Not provided]"


class Prompt(BaseModel):
    """One fixed reflective question."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable, unique identifier; also the form field key")
    title: str
    placeholder: str = Field(default="")
    description: Optional[str] = Field(default=None)


class PersonalDetails(BaseModel):
    """Optional 'about you' fields. All free text, all optional."""

    name: str = Field(default="")
    email: str = Field(default="")
    recipients: str = Field(default="", description="Comma-separated addresses")

    def is_blank(self) -> bool:
        return not (self.name.strip() or self.email.strip() or self.recipients.strip())


class DetailsStep(str, Enum):
    """Where the optional 'about you' step sits in the flow."""
    NONE = "none"
    LEADING = "leading"
    TRAILING = "trailing"


class StepKind(str, Enum):
    PROMPT = "prompt"
    DETAILS = "details"


class Step(BaseModel):
    """A single page of the questionnaire."""

    model_config = ConfigDict(frozen=True)

    kind: StepKind
    prompt: Optional[Prompt] = Field(default=None)

    @property
    def requires_answer(self) -> bool:
        return self.kind == StepKind.PROMPT


class LetterFile(BaseModel):
    """A generated letter, ready to hand to the browser."""

    filename: str
    content: str
    media_type: str = Field(default="text/plain")
