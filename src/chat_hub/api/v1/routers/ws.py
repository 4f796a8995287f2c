from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket

from chat_hub.api.deps import HubDep, get_verifier
from chat_hub.application.dto.principal import Principal
from chat_hub.application.exceptions import HubNotRunningError
from chat_hub.config import settings
from chat_hub.infrastructure.ws.connection import Connection, ConnectionLimits
from chat_hub.infrastructure.ws.transport import (
    CLOSE_AUTH_FAILED,
    CLOSE_GOING_AWAY,
    StarletteTransport,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["websocket"])


def _extract_token(websocket: WebSocket) -> str | None:
    scheme, _, credentials = websocket.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return websocket.query_params.get("token")


async def _authenticate(websocket: WebSocket) -> Principal | None:
    token = _extract_token(websocket)
    if not token:
        return None
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws")
async def ws_endpoint(websocket: WebSocket, hub: HubDep) -> None:
    principal = await _authenticate(websocket)
    if principal is None:
        await websocket.close(code=CLOSE_AUTH_FAILED, reason="Authentication failed")
        return

    await websocket.accept()
    conn = Connection(
        hub,
        StarletteTransport(websocket),
        principal.user_id,
        principal.display_name,
        limits=ConnectionLimits.from_settings(settings),
    )
    try:
        await conn.serve()
    except HubNotRunningError:
        logger.warning("Rejecting %s: hub is not running", principal.user_id)
        await conn.transport.close(CLOSE_GOING_AWAY)
    except Exception:
        logger.exception("WS error for %s", principal.user_id)
