"""Telephony voice webhook endpoints.

Providers post form-encoded or JSON bodies; query parameters are merged over
the body. ``?provider=twilio|plivo|sinch|json`` selects the response format.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from app.core.config import settings
from app.core.dependencies import get_session_manager
from app.services.call_session.manager import CallSessionManager
from app.services.telephony.models import OutboundAction
from app.services.telephony.normalizer import merge_payload, normalize_event, require_call_id
from app.services.telephony.providers import serialize

router = APIRouter()
logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def provider_mode(request: Request) -> str:
    """Decide the output format: request hint, then server default, then JSON."""
    return request.query_params.get("provider") or settings.default_provider_mode or "json"


async def read_payload(request: Request) -> Dict[str, Any]:
    """Read the webhook body (JSON or form) merged with query parameters."""
    body: Dict[str, Any] = {}
    content_type = request.headers.get("content-type", "").lower()

    if "application/json" in content_type:
        try:
            parsed = await request.json()
        except ValueError:
            logger.warning("[WEBHOOK] Ignoring malformed JSON body")
            parsed = None
        if isinstance(parsed, dict):
            body = parsed
    elif content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        body = {key: value for key, value in form.items()}

    return merge_payload(body, request.query_params)


def render(mode: str, action: OutboundAction) -> Response:
    serialized = serialize(mode, action)
    return Response(content=serialized.body, media_type=serialized.content_type)


@router.post("/incoming")
async def handle_incoming_call(
    request: Request,
    session_manager: CallSessionManager = Depends(get_session_manager),
):
    """
    Handle a new (or resumed) call.

    Returns neutral JSON by default, or TwiML / Plivo XML for ?provider=twilio|plivo.
    """
    mode = provider_mode(request)
    event = normalize_event(await read_payload(request))
    call_id = require_call_id(event)
    if not call_id.ok:
        logger.warning(f"[INCOMING CALL] Rejected webhook without call id - Mode: {mode}")
        return PlainTextResponse(call_id.error, status_code=400)

    logger.info(
        f"[INCOMING CALL] Received incoming call webhook - CallSid: {call_id.value}, "
        f"Mode: {mode}, Client: {request.client.host if request.client else 'unknown'}"
    )
    action = await session_manager.start_call(call_id.value, event)
    return render(mode, action)


@router.post("/gather")
async def handle_gather(
    request: Request,
    session_manager: CallSessionManager = Depends(get_session_manager),
):
    """
    Handle caller input (speech or DTMF) collected by the provider.
    """
    mode = provider_mode(request)
    event = normalize_event(await read_payload(request))
    call_id = require_call_id(event)
    if not call_id.ok:
        logger.warning(f"[GATHER] Rejected webhook without call id - Mode: {mode}")
        return PlainTextResponse(call_id.error, status_code=400)

    logger.info(
        f"[GATHER] Received caller input - CallSid: {call_id.value}, "
        f"Speech: {bool(event.transcript)}, Digits: {bool(event.digits)}, Mode: {mode}"
    )
    if event.transcript:
        logger.debug(f"[GATHER] Speech text: '{event.transcript[:200]}' - CallSid: {call_id.value}")

    action = await session_manager.continue_call(call_id.value, event)
    return render(mode, action)


@router.post("/hangup")
async def handle_hangup(
    request: Request,
    session_manager: CallSessionManager = Depends(get_session_manager),
):
    """
    Clean up the session when the call ends. Always succeeds.
    """
    event = normalize_event(await read_payload(request))
    if event.call_id:
        logger.info(f"[HANGUP] Call ended - CallSid: {event.call_id}")
        await session_manager.end_session(event.call_id)
    else:
        logger.debug("[HANGUP] Hangup webhook without call id, nothing to clear")
    return JSONResponse({"ok": True})


@router.post("/status")
async def handle_call_status(
    request: Request,
    session_manager: CallSessionManager = Depends(get_session_manager),
):
    """
    Handle call status callbacks; terminal statuses clear the session.
    """
    event = normalize_event(await read_payload(request))
    logger.info(
        f"[CALL STATUS] Received status update - CallSid: {event.call_id}, "
        f"CallStatus: {event.status}, Event: {event.event}"
    )
    if event.call_id:
        await session_manager.handle_status(event.call_id, event)
    return JSONResponse({"ok": True})
