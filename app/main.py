"""
FastAPI application entry point.

Run with:
    uvicorn app.main:app --reload --port 8000
"""

import uuid
import logging
import time
from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo

from fastapi import FastAPI, Request

from app.config import Settings, settings
from app.logging.config import setup_logging, request_id_var, anon_id_var
from app.analytics.identity import ANON_ID_COOKIE_NAME, ANON_ID_MAX_AGE_SECONDS, CookieIdentity
from app.api.routes_intent import router as intent_router
from app.api.routes_pages import router as pages_router
from app.intent.service import IntentServiceConfig
from app.intent.store import InMemoryEmailIntentStore, RedisEmailIntentStore
from app.letter.navigator import StepNavigator
from app.letter.prompts import load_prompt_set
from app.letter.schemas import DetailsStep
from app.letter.session import (
    SESSION_COOKIE_NAME, LetterSession, create_session, get_session_from_request,
)

# --- Initialize logging FIRST ---
setup_logging(level=settings.log_level)
logger = logging.getLogger(__name__)

# Paths that belong to the letter flow and need a letter session.
LETTER_PATH_PREFIXES = ("/pages/", "/letter/")


def build_intent_config(config: Settings) -> IntentServiceConfig:
    """Assemble the intent service's explicit configuration from settings."""
    if config.email_intent_store == "memory":
        store = InMemoryEmailIntentStore()
    else:
        store = RedisEmailIntentStore.from_url(config.redis_url, config.email_intent_set_key)
    return IntentServiceConfig(admin_token=config.admin_token or None, store=store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close = getattr(app.state.intent_config.store, "close", None)
    if close is not None:
        close()


# --- Create the FastAPI app ---
app = FastAPI(
    title=settings.app_name,
    docs_url="/docs" if settings.app_env == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)

# --- Long-lived collaborators, built once at process start ---
app.state.prompts = load_prompt_set(settings.prompt_config_path)
app.state.navigator = StepNavigator(app.state.prompts, DetailsStep(settings.details_step))
app.state.letter_tz = ZoneInfo(settings.letter_timezone)
app.state.intent_config = build_intent_config(settings)

logger.info(
    "app.configured",
    extra={
        "action": "app.configured",
        "prompts": len(app.state.prompts),
        "details_step": settings.details_step,
        "intent_store": settings.email_intent_store,
        "tracking_enabled": bool(settings.tracking_url),
    },
)


# --- Middleware: letter session + anonymous identity cookies ---
@app.middleware("http")
async def letter_session_middleware(request: Request, call_next):
    """Attach the visitor's identity and letter session, writing cookies for new ones."""
    identity = CookieIdentity(request.cookies.get(ANON_ID_COOKIE_NAME))
    request.state.identity = identity
    if identity.anon_id:
        anon_id_var.set(identity.anon_id)

    path = request.url.path
    new_cookie = None
    if path == "/" or path.startswith(LETTER_PATH_PREFIXES):
        session = get_session_from_request(request)
        if session is None:
            session = LetterSession(responses=app.state.prompts.empty_responses())
            new_cookie = create_session(session)
        request.state.letter_session = session

    response = await call_next(request)

    secure = settings.app_env != "development"
    if new_cookie is not None:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=new_cookie,
            httponly=True,
            secure=secure,
            samesite="lax",
        )
    if identity.created:
        response.set_cookie(
            key=ANON_ID_COOKIE_NAME,
            value=identity.anon_id,
            max_age=ANON_ID_MAX_AGE_SECONDS,
            secure=secure,
            samesite="lax",
        )
    return response


# --- Middleware: Request context + logging ---
@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Set up request ID and request timing."""
    req_id = str(uuid.uuid4())[:8]
    request_id_var.set(req_id)

    start = time.monotonic()
    response = await call_next(request)

    response.headers["X-Request-ID"] = req_id

    latency_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "http.request",
        extra={
            "action": "http.request",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "latency_ms": latency_ms,
        },
    )

    return response


# --- Register route modules ---
app.include_router(pages_router)
app.include_router(intent_router)


# --- Health check endpoints ---
@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/ready")
async def ready():
    checks = {
        "config_loaded": True,
        "admin_token_set": bool(app.state.intent_config.admin_token),
        "intent_store_reachable": app.state.intent_config.store.ping(),
    }
    all_ok = all(checks.values())
    return {"status": "ready" if all_ok else "not_ready", "checks": checks}
