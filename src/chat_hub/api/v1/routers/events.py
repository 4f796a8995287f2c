"""Server-generated events injected by other backend services."""
from __future__ import annotations

from fastapi import APIRouter, status

from chat_hub.api.deps import CurrentAdmin, HubDep
from chat_hub.api.v1.schemas.event import (
    BroadcastEventRequest,
    DirectEventRequest,
    EventAcceptedResponse,
    GroupEventRequest,
)
from chat_hub.application.exceptions import ValidationError
from chat_hub.domain.value_objects.enums import MessageType
from chat_hub.infrastructure.ws.protocol import Message
from chat_hub.services import realtime_service

router = APIRouter(prefix="/api/v1/events", tags=["events"])

_DIRECT_TYPES = frozenset({MessageType.NEW_DIRECT, MessageType.READ_RECEIPT})
_CONTROL_TYPES = frozenset({MessageType.PING, MessageType.PONG})


def _accepted(msg: Message) -> EventAcceptedResponse:
    return EventAcceptedResponse(type=msg.type, timestamp=msg.timestamp)


@router.post("/direct", response_model=EventAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def push_direct(body: DirectEventRequest, admin: CurrentAdmin, hub: HubDep) -> EventAcceptedResponse:
    if body.type not in _DIRECT_TYPES:
        raise ValidationError(f"type {body.type} cannot be sent to a single user")
    msg = await realtime_service.push_direct(
        hub,
        body.receiver_id,
        type_=body.type,
        sender_id=body.sender_id,
        content=body.content,
        data=body.data,
    )
    return _accepted(msg)


@router.post("/group", response_model=EventAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def push_group(body: GroupEventRequest, admin: CurrentAdmin, hub: HubDep) -> EventAcceptedResponse:
    msg = await realtime_service.push_group(
        hub,
        body.group_id,
        sender_id=body.sender_id,
        content=body.content,
        data=body.data,
    )
    return _accepted(msg)


@router.post("/broadcast", response_model=EventAcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
async def push_broadcast(body: BroadcastEventRequest, admin: CurrentAdmin, hub: HubDep) -> EventAcceptedResponse:
    if body.type in _CONTROL_TYPES:
        raise ValidationError(f"type {body.type} is reserved for connection liveness")
    msg = await realtime_service.push_broadcast(hub, body.type, data=body.data)
    return _accepted(msg)
