"""
Best-effort analytics beacon.

`AnalyticsBeacon.track` builds a GET URL for the collection endpoint and
hands it to a dispatcher that fires the request in the background. Nothing
is awaited, nothing is retried, and no failure ever reaches the caller: a
lost event is acceptable, a broken page is not.

Usage:
    from app.analytics.beacon import AnalyticsBeacon
    beacon = AnalyticsBeacon(identity=CookieIdentity(cookie), endpoint=settings.tracking_url)
    beacon.track("page_view")
    beacon.track("email_intent", extra="from=(none);recipients=a@b.com")
"""

import asyncio
import logging
import threading
import time
from typing import Callable, Optional

import httpx

from app.analytics.identity import IdentityProvider

logger = logging.getLogger(__name__)

Dispatcher = Callable[[str], None]

# Keep references so pending tasks are not garbage collected mid-flight.
_background_tasks: set[asyncio.Task] = set()


async def _send_async(url: str) -> None:
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            await client.get(url)
    except Exception as e:
        logger.debug("beacon.dispatch_failed", extra={"action": "beacon.dispatch_failed", "error_type": type(e).__name__})


def _send_blocking(url: str) -> None:
    try:
        httpx.get(url, timeout=10.0)
    except Exception as e:
        logger.debug("beacon.dispatch_failed", extra={"action": "beacon.dispatch_failed", "error_type": type(e).__name__})


def dispatch_in_background(url: str) -> None:
    """
    Fire a GET to `url` without waiting for it.

    Inside an event loop the request runs as an asyncio task; otherwise it
    runs on a daemon thread.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        threading.Thread(target=_send_blocking, args=(url,), daemon=True).start()
        return

    task = loop.create_task(_send_async(url))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


class AnalyticsBeacon:
    """Fire-and-forget event tracking for one visitor."""

    def __init__(
        self,
        identity: IdentityProvider,
        endpoint: str,
        dispatch: Optional[Dispatcher] = None,
    ):
        self._identity = identity
        self._endpoint = endpoint
        self._dispatch = dispatch or dispatch_in_background

    @property
    def enabled(self) -> bool:
        return bool(self._endpoint)

    def build_url(self, event: str, extra: Optional[str] = None) -> str:
        params = {
            "event": event,
            "anon_id": self._identity.get_or_create(),
            "ts": str(int(time.time() * 1000)),
        }
        if extra:
            params["extra"] = extra
        return str(httpx.URL(self._endpoint).copy_merge_params(params))

    def track(self, event: str, extra: Optional[str] = None) -> None:
        """Send an event. Never raises."""
        if not self.enabled:
            logger.debug("beacon.disabled", extra={"action": "beacon.disabled", "event": event})
            return
        try:
            self._dispatch(self.build_url(event, extra))
        except Exception as e:
            logger.debug(
                "beacon.track_failed",
                extra={"action": "beacon.track_failed", "event": event, "error_type": type(e).__name__},
            )
