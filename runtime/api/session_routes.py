"""HTTP routes for interacting with the Thansin Chat runtime.

Exposes endpoints like:

- GET  /chat/history -> the current turn history
- POST /chat/send    -> takes (message) and returns the reply turn
- POST /chat/clear   -> resets the history to the greeting
- GET  /chat/avatar  -> current avatar reference + regenerating flag
"""

import logging

from fastapi import APIRouter, HTTPException
from typing import Optional

from ..models.api_models import (
    AvatarResponse,
    HistoryResponse,
    SendRequest,
    SendResponse,
)
from ..store.session_store import SessionStateManager
from ..agents.turn_dispatcher import TurnDispatcher


logger = logging.getLogger(__name__)

# Router for all chat endpoints
router = APIRouter()


# Module-level references, to be initialized by the server.
_SESSION_STATE: Optional[SessionStateManager] = None
_DISPATCHER: Optional[TurnDispatcher] = None


def init_routes(session_state: SessionStateManager, dispatcher: TurnDispatcher) -> None:
    """Initialize module-level references used by the route handlers."""
    global _SESSION_STATE, _DISPATCHER
    _SESSION_STATE = session_state
    _DISPATCHER = dispatcher


def _require_session_state() -> SessionStateManager:
    if _SESSION_STATE is None:
        raise HTTPException(
            status_code=500,
            detail="SessionStateManager is not configured on the server.",
        )
    return _SESSION_STATE


def _require_dispatcher() -> TurnDispatcher:
    if _DISPATCHER is None:
        raise HTTPException(
            status_code=500,
            detail="TurnDispatcher is not configured on the server.",
        )
    return _DISPATCHER


@router.get("/history", response_model=HistoryResponse)
async def get_history() -> HistoryResponse:
    state = _require_session_state()
    dispatcher = _require_dispatcher()
    return HistoryResponse(turns=list(state.history), in_flight=dispatcher.in_flight)


@router.post("/send", response_model=SendResponse)
async def send_message(request: SendRequest) -> SendResponse:
    """Send one user message and wait for the companion's reply.

    Dispatch failures are not HTTP errors: they come back as an error turn
    in `reply`. A blank message or a send issued while another reply is
    pending is answered with accepted=False and changes nothing.
    """
    state = _require_session_state()
    dispatcher = _require_dispatcher()

    try:
        reply = await dispatcher.send(request.message)
    except Exception:
        # Log unexpected errors with a full traceback for debugging.
        logger.exception("[CHAT] Unexpected error while sending message=%r", request.message)
        raise

    if reply is None:
        logger.info("[CHAT] send not accepted (blank or busy)")
    return SendResponse(accepted=reply is not None, reply=reply, turns=list(state.history))


@router.post("/clear", response_model=HistoryResponse)
async def clear_history() -> HistoryResponse:
    state = _require_session_state()
    dispatcher = _require_dispatcher()
    if dispatcher.in_flight:
        raise HTTPException(status_code=409, detail="A reply is still pending.")
    state.clear()
    return HistoryResponse(turns=list(state.history), in_flight=False)


@router.get("/avatar", response_model=AvatarResponse)
async def get_avatar() -> AvatarResponse:
    state = _require_session_state()
    return AvatarResponse(avatar=state.avatar)


# --------------------------------------------------------
# Endpoint: GET /healthz
# --------------------------------------------------------
@router.get("/healthz")
def health_check():
    """
    Simple health check endpoint for uptime monitoring.
    """
    return {"status": "ok"}
