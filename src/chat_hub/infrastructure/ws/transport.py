"""Duplex transport abstraction used by connection pumps."""
from __future__ import annotations

import logging
from typing import Protocol

from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)

CLOSE_NORMAL = 1000
CLOSE_GOING_AWAY = 1001
CLOSE_MESSAGE_TOO_BIG = 1009
CLOSE_AUTH_FAILED = 4001


class TransportClosedError(Exception):
    """Peer went away or the socket is no longer usable."""

    def __init__(self, code: int | None = None) -> None:
        self.code = code
        super().__init__(f"transport closed (code={code})")


class Transport(Protocol):
    async def receive(self) -> str | bytes: ...

    async def send(self, data: str) -> None: ...

    async def close(self, code: int = CLOSE_NORMAL) -> None: ...


class StarletteTransport:
    """Adapts an accepted Starlette WebSocket to the Transport protocol."""

    def __init__(self, websocket: WebSocket) -> None:
        self._ws = websocket

    async def receive(self) -> str | bytes:
        message = await self._ws.receive()
        if message["type"] == "websocket.disconnect":
            raise TransportClosedError(message.get("code"))
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def send(self, data: str) -> None:
        if self._ws.application_state != WebSocketState.CONNECTED:
            raise TransportClosedError()
        await self._ws.send_text(data)

    async def close(self, code: int = CLOSE_NORMAL) -> None:
        if self._ws.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self._ws.close(code=code)
        except RuntimeError:
            # Close frame already sent or the peer disconnected first.
            logger.debug("WS close skipped, socket already closed")
