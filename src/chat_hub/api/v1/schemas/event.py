from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from chat_hub.domain.value_objects.enums import MessageType


class DirectEventRequest(BaseModel):
    receiver_id: UUID
    type: MessageType = MessageType.NEW_DIRECT
    sender_id: UUID | None = None
    content: str | None = None
    data: dict[str, Any] | None = None


class GroupEventRequest(BaseModel):
    group_id: UUID
    sender_id: UUID | None = None
    content: str | None = None
    data: dict[str, Any] | None = None


class BroadcastEventRequest(BaseModel):
    type: MessageType
    data: dict[str, Any] | None = None


class EventAcceptedResponse(BaseModel):
    """The hub accepted the event; delivery to live sockets is best effort."""

    type: str
    timestamp: datetime
