"""
Anonymous visitor identity for analytics.

The id is an opaque token (random part + creation time, both base36). It is
not a credential and uniqueness is not cryptographically guaranteed. The
web layer persists it in a long-lived cookie; everything else receives an
IdentityProvider and never touches the cookie directly.
"""

import random
import time
from typing import Optional, Protocol

ANON_ID_COOKIE_NAME = "legacy_letter_anon_id"
ANON_ID_MAX_AGE_SECONDS = 2 * 365 * 24 * 3600

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_anon_id() -> str:
    """e.g. 'k3j9x0q2m1lzq4x8f0' - random token followed by a ms timestamp."""
    return _to_base36(random.getrandbits(52)) + _to_base36(int(time.time() * 1000))


class IdentityProvider(Protocol):
    """Interface the beacon depends on."""

    def get_or_create(self) -> str:
        ...


class CookieIdentity:
    """
    Identity backed by the visitor's anon id cookie.

    Lazily creates an id on first use and caches it for the lifetime of this
    instance. `created` tells the caller the cookie needs to be written.
    """

    def __init__(self, stored_id: Optional[str] = None):
        self._anon_id = stored_id or None
        self.created = False

    @property
    def anon_id(self) -> Optional[str]:
        return self._anon_id

    def get_or_create(self) -> str:
        if self._anon_id is None:
            self._anon_id = generate_anon_id()
            self.created = True
        return self._anon_id
