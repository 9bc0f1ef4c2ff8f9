"""
Letter formatting.

Pure functions only: given the same answers, timestamp and details, the
output is identical. Dates are always rendered in fixed US English so a
letter reads the same regardless of the server's locale.
"""

from datetime import datetime, timezone, tzinfo
from typing import Iterable, Optional

from app.letter.schemas import NOT_PROVIDED, PersonalDetails, Prompt

LETTER_TITLE = "Legacy Letter"

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_timestamp(timestamp: datetime, tz: Optional[tzinfo] = None) -> str:
    """
    Long-form date plus short time, e.g. 'Sunday, October 18, 2026 at 3:04 PM'.

    Aware timestamps are converted to `tz` first; naive ones are used as-is.
    """
    local = timestamp
    if tz is not None and timestamp.tzinfo is not None:
        local = timestamp.astimezone(tz)

    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{_WEEKDAYS[local.weekday()]}, {_MONTHS[local.month - 1]} {local.day}, {local.year}"
        f" at {hour}:{local.minute:02d} {meridiem}"
    )


def format_details(details: PersonalDetails) -> str:
    """One 'Label: value' line per non-blank detail field."""
    lines = []
    if details.name.strip():
        lines.append(f"Name: {details.name.strip()}")
    if details.email.strip():
        lines.append(f"Email: {details.email.strip()}")
    if details.recipients.strip():
        lines.append(f"Recipients: {details.recipients.strip()}")
    return "\n".join(lines)


def format_letter(
    prompts: Iterable[Prompt],
    responses: dict[str, str],
    timestamp: datetime,
    details: Optional[PersonalDetails] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    """
    Render answers into the plain-text letter.

    Each prompt contributes its title and its trimmed answer (or
    '[Not provided]' when blank), in prompt order, separated by a blank line.
    A details block is included only when `details` is given and not blank.
    """
    sections = []
    for prompt in prompts:
        answer = responses.get(prompt.id, "").strip() or NOT_PROVIDED
        sections.append(f"{prompt.title}\n{answer}")
    body = "\n\n".join(sections)

    header = f"{LETTER_TITLE}\nCreated on: {format_timestamp(timestamp, tz)}\n\n"
    if details is not None and not details.is_blank():
        header += f"{format_details(details)}\n\n"

    return f"{header}{body}\n"


def letter_filename(timestamp: datetime) -> str:
    """
    'legacy-letter-<ISO-8601 UTC, millisecond precision>.txt' with ':' and '.'
    replaced by '-', e.g. legacy-letter-2026-10-18T15-04-05-123Z.txt.

    Naive timestamps are taken to be UTC.
    """
    if timestamp.tzinfo is None:
        utc = timestamp
    else:
        utc = timestamp.astimezone(timezone.utc)
    iso = utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"
    return f"legacy-letter-{iso.replace(':', '-').replace('.', '-')}.txt"
