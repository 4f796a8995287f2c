"""In-process registry and router for live WebSocket connections."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from chat_hub.application.exceptions import HubNotRunningError
from chat_hub.application.ports.clock import Clock, SystemClock
from chat_hub.domain.value_objects.enums import MessageType
from chat_hub.infrastructure.ws.connection import Connection
from chat_hub.infrastructure.ws.protocol import Message, presence_event

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Command:
    handler: Callable[..., Any]
    args: tuple[Any, ...]
    future: asyncio.Future[Any]


class Hub:
    """Owns the user -> connection map and the group membership cache.

    Every public coroutine is turned into a command on a single queue and
    executed by one control-loop task, in arrival order. Command handlers
    never await, so two structural events are never interleaved and the
    maps are only touched from that task.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clients: dict[UUID, Connection] = {}
        self._groups: dict[UUID, set[UUID]] = {}
        self._clock = clock or SystemClock()
        self._commands: asyncio.Queue[_Command] | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._commands = asyncio.Queue()
        self._task = asyncio.create_task(self._run(), name="ws-hub")
        logger.info("Hub control loop started")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        assert self._commands is not None
        while not self._commands.empty():
            cmd = self._commands.get_nowait()
            if not cmd.future.done():
                cmd.future.set_exception(HubNotRunningError("hub stopped"))

        for conn in self._clients.values():
            conn.close_send()
        self._clients.clear()
        self._groups.clear()
        logger.info("Hub control loop stopped")

    async def register(self, conn: Connection) -> None:
        await self._submit(self._register, conn)

    async def unregister(self, conn: Connection) -> None:
        await self._submit(self._unregister, conn)

    async def route_direct(self, msg: Message) -> None:
        await self._submit(self._route_direct, msg)

    async def route_group(self, msg: Message) -> None:
        await self._submit(self._route_group, msg)

    async def broadcast(self, frame: str) -> None:
        await self._submit(self._broadcast, frame)

    async def add_member(self, group_id: UUID, user_id: UUID) -> None:
        await self._submit(self._add_member, group_id, user_id)

    async def remove_member(self, group_id: UUID, user_id: UUID) -> None:
        await self._submit(self._remove_member, group_id, user_id)

    async def set_members(self, group_id: UUID, user_ids: Iterable[UUID]) -> None:
        """Replace the cached membership of a group in one step."""
        await self._submit(self._set_members, group_id, frozenset(user_ids))

    async def group_members(self, group_id: UUID) -> frozenset[UUID]:
        return await self._submit(self._group_members, group_id)

    async def list_online(self) -> list[UUID]:
        return await self._submit(self._list_online)

    async def is_online(self, user_id: UUID) -> bool:
        return await self._submit(self._is_online, user_id)

    async def _submit(self, handler: Callable[..., Any], *args: Any) -> Any:
        if not self.running or self._commands is None:
            raise HubNotRunningError("hub is not running")
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._commands.put_nowait(_Command(handler, args, future))
        return await future

    async def _run(self) -> None:
        assert self._commands is not None
        while True:
            cmd = await self._commands.get()
            try:
                result = cmd.handler(*cmd.args)
            except Exception as exc:
                logger.exception("Hub command %s failed", cmd.handler.__name__)
                if not cmd.future.done():
                    cmd.future.set_exception(exc)
                continue
            if not cmd.future.done():
                cmd.future.set_result(result)

    def _register(self, conn: Connection) -> None:
        previous = self._clients.get(conn.user_id)
        self._clients[conn.user_id] = conn
        if previous is not None and previous is not conn:
            previous.close_send()
            logger.info("Replaced previous connection for %s", conn.user_id)

        logger.info(
            "Client connected: %s (user_id=%s, online=%d)",
            conn.display_name, conn.user_id, len(self._clients),
        )
        event = presence_event(
            MessageType.USER_JOINED, conn.user_id, conn.display_name, self._clock.now(),
        )
        self._broadcast(event.encode())

    def _unregister(self, conn: Connection) -> None:
        if self._clients.get(conn.user_id) is not conn:
            # Already replaced or evicted; its queue is closed already.
            conn.close_send()
            return

        del self._clients[conn.user_id]
        conn.close_send()
        logger.info(
            "Client disconnected: %s (user_id=%s, online=%d)",
            conn.display_name, conn.user_id, len(self._clients),
        )
        event = presence_event(
            MessageType.USER_LEFT, conn.user_id, conn.display_name, self._clock.now(),
        )
        self._broadcast(event.encode())

    def _route_direct(self, msg: Message) -> None:
        if msg.receiver_id is None:
            logger.debug("Direct %s from %s has no receiver_id", msg.type, msg.sender_id)
            return
        conn = self._clients.get(msg.receiver_id)
        if conn is None:
            logger.debug("User %s is not connected", msg.receiver_id)
            return
        self._deliver(conn, msg.encode())

    def _route_group(self, msg: Message) -> None:
        if msg.group_id is None:
            logger.debug("Group message from %s has no group_id", msg.sender_id)
            return
        members = self._groups.get(msg.group_id)
        if not members:
            logger.debug("Group %s not cached in hub", msg.group_id)
            return

        frame = msg.encode()
        for user_id in list(members):
            if user_id == msg.sender_id:
                continue
            conn = self._clients.get(user_id)
            if conn is not None:
                self._deliver(conn, frame)

    def _broadcast(self, frame: str) -> None:
        for conn in list(self._clients.values()):
            self._deliver(conn, frame)

    def _deliver(self, conn: Connection, frame: str) -> None:
        if conn.enqueue(frame):
            return
        if self._clients.get(conn.user_id) is conn:
            del self._clients[conn.user_id]
        conn.close_send()
        logger.warning(
            "Evicted %s (user_id=%s): send queue full", conn.display_name, conn.user_id,
        )

    def _add_member(self, group_id: UUID, user_id: UUID) -> None:
        self._groups.setdefault(group_id, set()).add(user_id)

    def _remove_member(self, group_id: UUID, user_id: UUID) -> None:
        members = self._groups.get(group_id)
        if members is None:
            return
        members.discard(user_id)
        if not members:
            del self._groups[group_id]

    def _set_members(self, group_id: UUID, user_ids: frozenset[UUID]) -> None:
        if user_ids:
            self._groups[group_id] = set(user_ids)
        else:
            self._groups.pop(group_id, None)

    def _group_members(self, group_id: UUID) -> frozenset[UUID]:
        return frozenset(self._groups.get(group_id, ()))

    def _list_online(self) -> list[UUID]:
        return list(self._clients)

    def _is_online(self, user_id: UUID) -> bool:
        return user_id in self._clients
