"""Server-originated events pushed into the real-time layer.

Other backend components (message, group and account services) call these
helpers instead of talking to the hub's routing methods directly. Nothing
here waits for delivery: offline recipients are covered by the persisted
store and push notifications.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from chat_hub.application.ports.clock import Clock, SystemClock
from chat_hub.domain.value_objects.enums import MessageType
from chat_hub.infrastructure.ws.hub import Hub
from chat_hub.infrastructure.ws.protocol import Message

logger = logging.getLogger(__name__)

_clock: Clock = SystemClock()


async def push_direct(
    hub: Hub,
    receiver_id: UUID,
    *,
    type_: MessageType = MessageType.NEW_DIRECT,
    sender_id: UUID | None = None,
    content: str | None = None,
    data: dict[str, Any] | None = None,
    clock: Clock | None = None,
) -> Message:
    msg = Message(
        type=type_,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        data=data,
        timestamp=(clock or _clock).now(),
    )
    await hub.route_direct(msg)
    return msg


async def push_group(
    hub: Hub,
    group_id: UUID,
    *,
    sender_id: UUID | None = None,
    content: str | None = None,
    data: dict[str, Any] | None = None,
    clock: Clock | None = None,
) -> Message:
    msg = Message(
        type=MessageType.NEW_GROUP,
        sender_id=sender_id,
        group_id=group_id,
        content=content,
        data=data,
        timestamp=(clock or _clock).now(),
    )
    await hub.route_group(msg)
    return msg


async def push_broadcast(
    hub: Hub,
    type_: MessageType,
    *,
    data: dict[str, Any] | None = None,
    clock: Clock | None = None,
) -> Message:
    msg = Message(type=type_, data=data, timestamp=(clock or _clock).now())
    await hub.broadcast(msg.encode())
    return msg


async def notify_messages_read(
    hub: Hub,
    reader_id: UUID,
    sender_id: UUID,
    *,
    clock: Clock | None = None,
) -> Message:
    """Tell ``sender_id`` that ``reader_id`` has read their conversation."""
    return await push_direct(
        hub,
        sender_id,
        type_=MessageType.READ_RECEIPT,
        sender_id=reader_id,
        clock=clock,
    )


async def sync_group_members(hub: Hub, group_id: UUID, member_ids: Iterable[UUID]) -> None:
    """Make the hub's cache for ``group_id`` match the persisted member list."""
    members = frozenset(member_ids)
    await hub.set_members(group_id, members)
    logger.info("Synced group %s membership (%d members)", group_id, len(members))
