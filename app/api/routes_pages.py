"""
Page routes: serves the questionnaire page and its HTMX fragments.

These routes render Jinja2 templates and return HTML (not JSON). HTMX posts
the visible step's fields as JSON (json-enc extension) and swaps the
returned fragment into the page without a full reload.

Fragment flow:
- typing in a field     -> POST /pages/answer or /pages/details -> preview,
                           plus the nav buttons swapped out of band
- Next / Back           -> POST /pages/next or /pages/back      -> step card
- Generate & Download   -> POST /pages/submit -> step card with errors, or
                           the 'ready' card plus a letterReady event that
                           sends the browser to GET /letter/download
- Ask us to email       -> POST /pages/intent -> 'ready' card
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.analytics.beacon import AnalyticsBeacon
from app.api.dependencies import (
    get_beacon,
    get_emitter,
    get_intent_client,
    get_letter_session,
    get_navigator,
)
from app.config import settings
from app.intent.client import IntentCaptureClient
from app.letter.download import DownloadEmitter
from app.letter.formatter import format_letter
from app.letter.navigator import StepNavigator
from app.letter.schemas import StepKind
from app.letter.session import LetterSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

DOWNLOAD_PATH = "/letter/download"
DETAIL_FIELDS = ("name", "email", "recipients")


def _apply_fields(session: LetterSession, navigator: StepNavigator, body: dict) -> None:
    """Copy posted field values into the session. Unknown prompt ids are dropped."""
    prompt_id = body.get("prompt_id")
    if isinstance(prompt_id, str) and "answer" in body:
        session.set_answer(prompt_id, str(body.get("answer") or ""))

    if navigator.collects_details:
        for name in DETAIL_FIELDS:
            if name in body:
                setattr(session.details, name, str(body.get(name) or ""))


def _preview(request: Request, session: LetterSession, navigator: StepNavigator) -> str:
    details = session.details if navigator.collects_details else None
    return format_letter(
        navigator.prompts,
        session.responses,
        datetime.now(timezone.utc),
        details=details,
        tz=request.app.state.letter_tz,
    )


def _context(request: Request, session: LetterSession, navigator: StepNavigator) -> dict:
    step = navigator.current(session)
    missing = [p.title for p in navigator.prompts if not session.responses.get(p.id, "").strip()]
    return {
        "app_name": settings.app_name,
        "session": session,
        "step": step,
        "is_details_step": step.kind == StepKind.DETAILS,
        "step_number": navigator.question_number(session),
        "total_steps": len(navigator.prompts),
        "is_first": session.step == 0,
        "is_last": navigator.is_last(session),
        "can_advance": navigator.can_advance(session),
        "progress": navigator.progress(session),
        "answer": session.responses.get(step.prompt.id, "") if step.prompt else "",
        "missing_count": len(missing),
        "show_preview": settings.show_preview,
        "preview": _preview(request, session, navigator) if settings.show_preview else "",
        "collects_details": navigator.collects_details,
    }


# =========================================================================
# FULL PAGE
# =========================================================================

@router.get("/", response_class=HTMLResponse)
async def letter_page(
    request: Request,
    session: LetterSession = Depends(get_letter_session),
    navigator: StepNavigator = Depends(get_navigator),
    beacon: AnalyticsBeacon = Depends(get_beacon),
):
    """Render the questionnaire, or the 'ready' card once the letter exists."""
    beacon.track("page_view")
    return templates.TemplateResponse(request, "index.html", _context(request, session, navigator))


# =========================================================================
# HTMX FRAGMENTS
# =========================================================================

@router.post("/pages/answer", response_class=HTMLResponse)
async def update_answer(
    request: Request,
    body: dict,
    session: LetterSession = Depends(get_letter_session),
    navigator: StepNavigator = Depends(get_navigator),
):
    """Save the active answer; return the refreshed preview and nav buttons."""
    _apply_fields(session, navigator, body)
    return templates.TemplateResponse(
        request, "components/field_update.html", _context(request, session, navigator)
    )


@router.post("/pages/details", response_class=HTMLResponse)
async def update_details(
    request: Request,
    body: dict,
    session: LetterSession = Depends(get_letter_session),
    navigator: StepNavigator = Depends(get_navigator),
):
    """Save the 'about you' fields and return the refreshed preview."""
    _apply_fields(session, navigator, body)
    return templates.TemplateResponse(
        request, "components/field_update.html", _context(request, session, navigator)
    )


@router.post("/pages/next", response_class=HTMLResponse)
async def next_step(
    request: Request,
    body: dict,
    session: LetterSession = Depends(get_letter_session),
    navigator: StepNavigator = Depends(get_navigator),
):
    _apply_fields(session, navigator, body)
    navigator.next(session)
    return templates.TemplateResponse(request, "components/step.html", _context(request, session, navigator))


@router.post("/pages/back", response_class=HTMLResponse)
async def previous_step(
    request: Request,
    body: dict,
    session: LetterSession = Depends(get_letter_session),
    navigator: StepNavigator = Depends(get_navigator),
):
    _apply_fields(session, navigator, body)
    navigator.back(session)
    return templates.TemplateResponse(request, "components/step.html", _context(request, session, navigator))


@router.post("/pages/submit", response_class=HTMLResponse)
async def submit_letter(
    request: Request,
    body: dict,
    session: LetterSession = Depends(get_letter_session),
    navigator: StepNavigator = Depends(get_navigator),
    emitter: DownloadEmitter = Depends(get_emitter),
):
    """
    Generate the letter.

    Incomplete answers re-render the step with the validation message and
    produce nothing. Otherwise the 'ready' card is returned and the browser
    is told where to collect the file.
    """
    _apply_fields(session, navigator, body)
    letter = emitter.submit(session)
    context = _context(request, session, navigator)

    if letter is None:
        return templates.TemplateResponse(request, "components/step.html", context)

    response = templates.TemplateResponse(request, "components/completed.html", context)
    response.headers["HX-Trigger"] = json.dumps({"letterReady": {"url": DOWNLOAD_PATH}})
    return response


@router.post("/pages/intent", response_class=HTMLResponse)
async def capture_intent(
    request: Request,
    body: dict,
    session: LetterSession = Depends(get_letter_session),
    navigator: StepNavigator = Depends(get_navigator),
    intent_client: IntentCaptureClient = Depends(get_intent_client),
):
    """Record that the user would like help emailing the letter."""
    intent_client.submit_intent(
        session,
        primary_email=str(body.get("email") or ""),
        recipients_csv=str(body.get("recipients") or ""),
    )
    return templates.TemplateResponse(
        request, "components/completed.html", _context(request, session, navigator)
    )


# =========================================================================
# DOWNLOAD
# =========================================================================

@router.get(DOWNLOAD_PATH)
async def download_letter(session: LetterSession = Depends(get_letter_session)):
    """Serve the letter produced by the last submit. Each letter is served once."""
    letter = DownloadEmitter.collect(session)
    if letter is None:
        raise HTTPException(status_code=404, detail="No letter is waiting to be downloaded")

    logger.info("letter.downloaded", extra={"action": "letter.downloaded", "letter_file": letter.filename})
    return Response(
        content=letter.content.encode("utf-8"),
        media_type=f"{letter.media_type}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{letter.filename}"'},
    )
