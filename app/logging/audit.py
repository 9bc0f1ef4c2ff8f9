"""
Audit trail for visitor and admin actions on letters and email intents.

Each entry is one JSON line whose message and 'action' field carry the
same dotted name ('letter.generated', 'intent.saved', ...), followed by
counts and flags describing what happened.

PRIVACY: letters are written on the visitor's device and stay there.
Entries carry counts, flags and email domains. Fields named after letter
content or contact data are replaced with '[redacted]' before logging.

Usage:
    from app.logging.audit import audit, email_domain
    audit.info("intent.saved", domain=email_domain(email), deduped=False)
"""

import logging
from typing import Any

REDACTED = "[redacted]"
SENSITIVE_FIELDS = frozenset({"answer", "answers", "content", "letter", "email", "recipients"})


def email_domain(email: str) -> str:
    """Return the domain part of an address, or 'unknown'."""
    return email.rsplit("@", 1)[-1] if "@" in email else "unknown"


class AuditLogger:
    """Writes audit actions to the 'audit' logger with sensitive fields masked."""

    def __init__(self):
        self._logger = logging.getLogger("audit")

    def info(self, action: str, **fields: Any) -> None:
        self._log(logging.INFO, action, fields)

    def warning(self, action: str, **fields: Any) -> None:
        self._log(logging.WARNING, action, fields)

    def error(self, action: str, **fields: Any) -> None:
        self._log(logging.ERROR, action, fields)

    def _log(self, level: int, action: str, fields: dict[str, Any]) -> None:
        safe = {k: (REDACTED if k in SENSITIVE_FIELDS else v) for k, v in fields.items()}
        self._logger.log(level, action, extra={"action": action, **safe})


audit = AuditLogger()
