"""
Letter sessions with an in-memory store.

Answers never leave server memory and are never written to disk. The
browser only holds a small cookie with the encrypted session ID.

Trade-off: sessions are lost on server restart or after
SESSION_MAX_AGE_SECONDS of inactivity, and the user starts the letter again.

Session data flow:
1. First page load creates a LetterSession keyed by a random session ID
2. The session ID is encrypted and stored in a cookie
3. Each request decrypts the cookie and looks the session up in _sessions
4. Unknown, expired or tampered cookies get a fresh, empty session
"""

import base64
import hashlib
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from app.config import settings
from app.letter.schemas import LetterFile, PersonalDetails

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "legacy_letter_session"

# Keys are session IDs. Intentionally not persisted.
_sessions: dict[str, "LetterSession"] = {}


@dataclass
class LetterSession:
    """Everything one browsing session has typed or triggered so far."""
    responses: dict[str, str]
    details: PersonalDetails = field(default_factory=PersonalDetails)
    step: int = 0
    show_errors: bool = False
    completed: bool = False
    intent_submitted: bool = False
    intent_error: Optional[str] = None
    pending_download: Optional[LetterFile] = None
    last_seen: float = field(default_factory=time.time)

    def set_answer(self, prompt_id: str, answer: str) -> bool:
        """Update one answer. Unknown prompt ids are ignored so no keys are added."""
        if prompt_id not in self.responses:
            return False
        self.responses[prompt_id] = answer
        return True

    def touch(self) -> None:
        self.last_seen = time.time()

    @property
    def is_expired(self) -> bool:
        return time.time() - self.last_seen > settings.session_max_age_seconds


def _get_fernet() -> Fernet:
    """Create a Fernet encryption instance from the session secret key."""
    key_bytes = hashlib.sha256(settings.session_secret_key.encode()).digest()
    return Fernet(base64.urlsafe_b64encode(key_bytes))


def _decrypt_session_id(cookie_value: str) -> Optional[str]:
    try:
        return _get_fernet().decrypt(cookie_value.encode()).decode()
    except (InvalidToken, ValueError) as e:
        logger.warning(
            "session.decode_failed",
            extra={"action": "session.decode_failed", "error_type": type(e).__name__},
        )
        return None


def purge_expired() -> int:
    """Drop idle sessions. Returns how many were removed."""
    expired = [sid for sid, data in _sessions.items() if data.is_expired]
    for sid in expired:
        _sessions.pop(sid, None)
    if expired:
        logger.info(
            "session.purged",
            extra={"action": "session.purged", "purged": len(expired), "active_sessions": len(_sessions)},
        )
    return len(expired)


def create_session(data: LetterSession) -> str:
    """
    Store session data in memory and return an encrypted cookie value
    containing only the session ID.
    """
    purge_expired()
    session_id = secrets.token_urlsafe(32)
    _sessions[session_id] = data

    logger.info(
        "session.created",
        extra={"action": "session.created", "active_sessions": len(_sessions)},
    )
    return _get_fernet().encrypt(session_id.encode()).decode()


def get_session(cookie_value: str) -> Optional[LetterSession]:
    """
    Decrypt the cookie to get the session ID, then look up session data.

    Returns None if the cookie is invalid, the session is unknown, or it
    has been idle for too long.
    """
    if not cookie_value:
        return None
    session_id = _decrypt_session_id(cookie_value)
    if session_id is None:
        return None

    data = _sessions.get(session_id)
    if data is None:
        return None
    if data.is_expired:
        _sessions.pop(session_id, None)
        return None

    data.touch()
    return data


def get_session_from_request(request) -> Optional[LetterSession]:
    """Convenience: extract the letter session from a FastAPI/Starlette request."""
    cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if not cookie:
        return None
    return get_session(cookie)
