"""
Email intent service: store and list addresses of people who asked to be
contacted about emailing their letter.

The service works against an explicit IntentServiceConfig built once at
startup; it never reads the environment itself. Failures are raised as
EmailIntentError subclasses and translated to HTTP responses by
app.api.routes_intent.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from app.intent.store import EmailIntentStore
from app.logging.audit import audit, email_domain

logger = logging.getLogger(__name__)

# local part, '@', domain with at least one dot, no whitespace or extra '@'
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


class EmailIntentError(Exception):
    """Base for all intent service failures. `status_code` maps to HTTP."""
    status_code = 500


class InvalidEmailError(EmailIntentError):
    status_code = 400

    def __init__(self, message: str = "Invalid email"):
        super().__init__(message)


class AdminTokenNotConfiguredError(EmailIntentError):
    status_code = 500

    def __init__(self, message: str = "ADMIN_TOKEN not set"):
        super().__init__(message)


class UnauthorizedError(EmailIntentError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


@dataclass(frozen=True)
class IntentServiceConfig:
    """Everything the service needs, constructed once at process start."""
    admin_token: Optional[str]
    store: EmailIntentStore


@dataclass(frozen=True)
class SaveResult:
    email: str
    deduped: bool


@dataclass(frozen=True)
class ListResult:
    emails: list[str]

    @property
    def count(self) -> int:
        return len(self.emails)


def normalize_email(raw: str) -> str:
    return raw.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.fullmatch(email) is not None


class EmailIntentService:

    def __init__(self, config: IntentServiceConfig):
        self._config = config

    def save(self, raw_email: Optional[str]) -> SaveResult:
        """
        Normalize, validate and add an address to the set.

        Raises InvalidEmailError without writing anything when the address
        does not look like local@domain.tld. Saving an address that is
        already present reports deduped=True and leaves the set unchanged.
        """
        if not isinstance(raw_email, str):
            raise InvalidEmailError()

        email = normalize_email(raw_email)
        if not is_valid_email(email):
            audit.info("intent.rejected", reason="invalid_email")
            raise InvalidEmailError()

        added = self._config.store.add(email)
        audit.info("intent.saved", domain=email_domain(email), deduped=not added)
        return SaveResult(email=email, deduped=not added)

    def list(self, token: Optional[str]) -> ListResult:
        """
        Return every stored address, sorted ascending.

        A missing secret is a deployment problem and is reported as such
        before the token is even looked at.
        """
        if not self._config.admin_token:
            logger.error("intent.admin_token_missing", extra={"action": "intent.admin_token_missing"})
            raise AdminTokenNotConfiguredError()

        if token != self._config.admin_token:
            audit.warning("intent.list_denied", token_supplied=bool(token))
            raise UnauthorizedError()

        emails = sorted(self._config.store.members())
        audit.info("intent.listed", count=len(emails))
        return ListResult(emails=emails)
