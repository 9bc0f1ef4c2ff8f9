"""
Email intent API routes.

These endpoints handle:
- Saving an address to the shared intent set (public)
- Listing every saved address (admin, static token)

Responses are always JSON with an 'ok' flag; failures carry an 'error'
message and never a stack trace.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import get_intent_service
from app.intent.service import EmailIntentError, EmailIntentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/email-intent", tags=["email-intent"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


async def _email_from_body(request: Request):
    """The 'email' field of a JSON body, or '' when there is no usable body."""
    try:
        body = await request.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    return body.get("email") or ""


@router.post("/save")
async def save_email_intent(
    request: Request,
    service: EmailIntentService = Depends(get_intent_service),
):
    """
    Store an email address.

    The address comes from the 'email' query parameter or, when that is
    absent, from a JSON body {"email": "..."}.

    Returns {"ok": true, "deduped": bool}; deduped is true when the address
    was already stored.
    """
    try:
        email = request.query_params.get("email") or ""
        if not email:
            email = await _email_from_body(request)

        result = service.save(email)
        return {"ok": True, "deduped": result.deduped}

    except EmailIntentError as e:
        return _error(e.status_code, str(e))
    except Exception as e:
        logger.error(
            "intent.save_failed",
            extra={"action": "intent.save_failed", "error": str(e)},
            exc_info=True,
        )
        return _error(500, "Server error")


@router.get("/list")
async def list_email_intents(
    token: Optional[str] = Query(default=None, description="Admin token"),
    service: EmailIntentService = Depends(get_intent_service),
):
    """Return {"ok": true, "count": n, "data": [...sorted emails]}."""
    try:
        result = service.list(token)
        return {"ok": True, "count": result.count, "data": result.emails}

    except EmailIntentError as e:
        return _error(e.status_code, str(e))
    except Exception as e:
        logger.error(
            "intent.list_failed",
            extra={"action": "intent.list_failed", "error": str(e)},
            exc_info=True,
        )
        return _error(500, "Server error")
