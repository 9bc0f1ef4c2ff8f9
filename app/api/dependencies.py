"""
FastAPI dependencies.

Long-lived collaborators (navigator, intent service config) are
built once in app.main and kept on app.state. Per-request collaborators
(beacon, emitter, intent client) are assembled here around the visitor's
identity and letter session, which the middleware attaches to request.state.
"""

from fastapi import Depends, Request

from app.analytics.beacon import AnalyticsBeacon
from app.analytics.identity import CookieIdentity
from app.config import settings
from app.intent.client import IntentCaptureClient
from app.intent.service import EmailIntentService
from app.letter.download import DownloadEmitter
from app.letter.navigator import StepNavigator
from app.letter.session import LetterSession


def get_navigator(request: Request) -> StepNavigator:
    return request.app.state.navigator


def get_letter_session(request: Request) -> LetterSession:
    """The session created or restored by the letter session middleware."""
    return request.state.letter_session


def get_identity(request: Request) -> CookieIdentity:
    identity = getattr(request.state, "identity", None)
    if identity is None:
        identity = CookieIdentity()
        request.state.identity = identity
    return identity


def get_beacon(identity: CookieIdentity = Depends(get_identity)) -> AnalyticsBeacon:
    return AnalyticsBeacon(identity=identity, endpoint=settings.tracking_url)


def get_emitter(
    request: Request,
    beacon: AnalyticsBeacon = Depends(get_beacon),
    navigator: StepNavigator = Depends(get_navigator),
) -> DownloadEmitter:
    return DownloadEmitter(
        prompts=navigator.prompts,
        beacon=beacon,
        include_details=navigator.collects_details,
        tz=request.app.state.letter_tz,
    )


def get_intent_client(beacon: AnalyticsBeacon = Depends(get_beacon)) -> IntentCaptureClient:
    return IntentCaptureClient(beacon)


def get_intent_service(request: Request) -> EmailIntentService:
    return EmailIntentService(request.app.state.intent_config)
