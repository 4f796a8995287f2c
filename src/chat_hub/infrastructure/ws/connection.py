"""One authenticated user's live socket and its read/write pumps."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from chat_hub.application.exceptions import (
    FrameTooLargeError,
    HubNotRunningError,
    ProtocolError,
)
from chat_hub.application.ports.clock import Clock, SystemClock
from chat_hub.config import Settings
from chat_hub.domain.value_objects.enums import MessageType
from chat_hub.infrastructure.ws.protocol import (
    FRAME_SEPARATOR,
    Message,
    decode_frame,
    ping,
    pong,
)
from chat_hub.infrastructure.ws.transport import (
    CLOSE_MESSAGE_TOO_BIG,
    Transport,
    TransportClosedError,
)

if TYPE_CHECKING:
    from chat_hub.infrastructure.ws.hub import Hub

logger = logging.getLogger(__name__)

# Marks the end of the outbound stream; queued after the last real frame.
_CLOSED = object()


@dataclass(frozen=True, slots=True)
class ConnectionLimits:
    read_deadline: float = 60.0
    ping_interval: float = 54.0
    write_deadline: float = 10.0
    max_frame_bytes: int = 512 * 1024
    send_queue_size: int = 256
    coalesce: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> ConnectionLimits:
        return cls(
            read_deadline=settings.WS_READ_DEADLINE_SECONDS,
            ping_interval=settings.ping_interval,
            write_deadline=settings.WS_WRITE_DEADLINE_SECONDS,
            max_frame_bytes=settings.WS_MAX_FRAME_BYTES,
            send_queue_size=settings.WS_SEND_QUEUE_SIZE,
            coalesce=settings.WS_COALESCE_FRAMES,
        )


class Connection:
    """Bridges a Transport and the Hub.

    The outbound queue is bounded by ``limits.send_queue_size``; ``enqueue``
    never blocks. Once ``close_send`` has been called nothing else is
    accepted and the write pump exits after flushing what is already queued.
    """

    def __init__(
        self,
        hub: Hub,
        transport: Transport,
        user_id: UUID,
        display_name: str,
        *,
        limits: ConnectionLimits | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.hub = hub
        self.transport = transport
        self.user_id = user_id
        self.display_name = display_name
        self.limits = limits or ConnectionLimits()
        self._clock = clock or SystemClock()
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._send_closed = False

    def __repr__(self) -> str:
        return f"Connection(user_id={self.user_id}, display_name={self.display_name!r})"

    @property
    def send_closed(self) -> bool:
        return self._send_closed

    def pending(self) -> int:
        """Number of frames waiting to be written."""
        return self._queue.qsize() - (1 if self._send_closed else 0)

    def enqueue(self, frame: str) -> bool:
        """Queue a frame for the write pump; False when closed or full."""
        if self._send_closed:
            return False
        if self._queue.qsize() >= self.limits.send_queue_size:
            return False
        self._queue.put_nowait(frame)
        return True

    def close_send(self) -> None:
        if self._send_closed:
            return
        self._send_closed = True
        self._queue.put_nowait(_CLOSED)

    async def serve(self) -> None:
        """Register, run both pumps, unregister when the read side ends."""
        await self.hub.register(self)
        writer = asyncio.create_task(self.write_pump(), name=f"ws-write-{self.user_id}")
        try:
            await self.read_pump()
        finally:
            try:
                await self.hub.unregister(self)
            except HubNotRunningError:
                self.close_send()
            await writer

    async def read_pump(self) -> None:
        limits = self.limits
        while True:
            try:
                raw = await asyncio.wait_for(
                    self.transport.receive(), timeout=limits.read_deadline,
                )
            except TimeoutError:
                logger.info("WS read deadline expired for %s", self.user_id)
                return
            except TransportClosedError as exc:
                logger.debug("WS peer closed for %s (code=%s)", self.user_id, exc.code)
                return
            except Exception:
                logger.warning("WS read error for %s", self.user_id, exc_info=True)
                return

            try:
                msg = decode_frame(raw, limits.max_frame_bytes)
            except FrameTooLargeError as exc:
                logger.warning("Closing %s: %s", self.user_id, exc.detail)
                await self.transport.close(CLOSE_MESSAGE_TOO_BIG)
                return
            except ProtocolError as exc:
                logger.warning("Dropping frame from %s: %s", self.user_id, exc.detail)
                continue

            try:
                await self._dispatch(msg)
            except HubNotRunningError:
                logger.info("Hub stopped, ending read pump for %s", self.user_id)
                return

    async def _dispatch(self, msg: Message) -> None:
        msg.sender_id = self.user_id
        msg.timestamp = self._clock.now()

        if msg.type in (MessageType.NEW_DIRECT, MessageType.READ_RECEIPT):
            await self.hub.route_direct(msg)

        elif msg.type == MessageType.NEW_GROUP:
            await self.hub.route_group(msg)

        elif msg.type == MessageType.TYPING:
            await self.hub.broadcast(msg.encode())

        elif msg.type == MessageType.PING:
            if not self.enqueue(pong(msg.timestamp).encode()):
                logger.warning("Send queue unavailable, pong to %s dropped", self.user_id)

        elif msg.type == MessageType.PONG:
            # Liveness only; receiving it already reset the read deadline.
            pass

        else:
            logger.warning("Unknown message type %r from %s", msg.type, self.user_id)

    async def write_pump(self) -> None:
        """Flush the outbound queue and probe an idle peer.

        The probe is an application ``{"type": "ping"}`` frame, not a
        WebSocket protocol ping. Clients must reply with a ``pong`` frame (or
        send anything else) before ``limits.read_deadline`` runs out, or the
        read pump drops them even though the socket itself is healthy.

        Each write is bounded by ``limits.write_deadline``. A failed or
        timed-out write ends the pump and closes the transport.
        """
        loop = asyncio.get_running_loop()
        limits = self.limits
        next_ping = loop.time() + limits.ping_interval
        try:
            while True:
                try:
                    item = await asyncio.wait_for(
                        self._queue.get(), timeout=max(next_ping - loop.time(), 0),
                    )
                except TimeoutError:
                    await self._write(ping(self._clock.now()).encode())
                    next_ping = loop.time() + limits.ping_interval
                    continue

                if item is _CLOSED:
                    return

                frames = [item]
                closing = False
                if limits.coalesce:
                    while not self._queue.empty():
                        extra = self._queue.get_nowait()
                        if extra is _CLOSED:
                            closing = True
                            break
                        frames.append(extra)

                await self._write(FRAME_SEPARATOR.join(frames))  # type: ignore[arg-type]
                if closing:
                    return
        except Exception as exc:
            logger.info("WS write failed for %s: %r", self.user_id, exc)
        finally:
            await self._close_transport()

    async def _write(self, data: str) -> None:
        await asyncio.wait_for(self.transport.send(data), timeout=self.limits.write_deadline)

    async def _close_transport(self) -> None:
        try:
            await self.transport.close()
        except Exception:
            logger.debug("WS close failed for %s", self.user_id, exc_info=True)
