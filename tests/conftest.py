"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio

from chat_hub.application.dto.principal import Principal
from chat_hub.infrastructure.ws.connection import _CLOSED, Connection, ConnectionLimits
from chat_hub.infrastructure.ws.hub import Hub
from chat_hub.infrastructure.ws.protocol import split_frames
from chat_hub.infrastructure.ws.transport import CLOSE_NORMAL, TransportClosedError

FIXED_NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)

_DISCONNECT = object()


@dataclass
class FixedClock:
    current: datetime = FIXED_NOW

    def now(self) -> datetime:
        return self.current


@dataclass
class FakeTransport:
    """In-memory Transport; inbound frames are fed by the test."""

    inbound: asyncio.Queue[Any] = field(default_factory=asyncio.Queue)
    sent: list[str] = field(default_factory=list)
    close_codes: list[int] = field(default_factory=list)
    fail_sends: bool = False

    def feed(self, frame: str | dict[str, Any]) -> None:
        self.inbound.put_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    def disconnect(self) -> None:
        self.inbound.put_nowait(_DISCONNECT)

    @property
    def closed(self) -> bool:
        return bool(self.close_codes)

    def sent_frames(self) -> list[dict[str, Any]]:
        return [json.loads(part) for chunk in self.sent for part in split_frames(chunk)]

    async def receive(self) -> str | bytes:
        item = await self.inbound.get()
        if item is _DISCONNECT:
            raise TransportClosedError(CLOSE_NORMAL)
        return item

    async def send(self, data: str) -> None:
        if self.fail_sends or self.closed:
            raise TransportClosedError()
        self.sent.append(data)

    async def close(self, code: int = CLOSE_NORMAL) -> None:
        self.close_codes.append(code)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest_asyncio.fixture
async def hub(clock: FixedClock):
    hub = Hub(clock=clock)
    await hub.start()
    yield hub
    await hub.stop()


@pytest.fixture
def user_principal() -> Principal:
    return Principal(user_id=uuid.uuid4(), display_name="alice", roles=[])


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(user_id=uuid.uuid4(), display_name="group-service", roles=["admin"])


def make_connection(
    hub: Hub,
    *,
    user_id: UUID | None = None,
    name: str = "user",
    clock: FixedClock | None = None,
    **limits: Any,
) -> Connection:
    return Connection(
        hub,
        FakeTransport(),
        user_id or uuid.uuid4(),
        name,
        limits=ConnectionLimits(**limits),
        clock=clock or FixedClock(),
    )


def drain(conn: Connection) -> list[dict[str, Any]]:
    """Pop every frame queued on ``conn`` without running its write pump."""
    frames: list[dict[str, Any]] = []
    while not conn._queue.empty():
        item = conn._queue.get_nowait()
        if item is _CLOSED:
            continue
        frames.extend(json.loads(part) for part in split_frames(item))
    return frames


def frame_types(frames: list[dict[str, Any]]) -> list[str]:
    return [f["type"] for f in frames]
