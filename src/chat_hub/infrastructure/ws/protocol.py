"""WebSocket message envelope and frame codec."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from chat_hub.application.exceptions import FrameTooLargeError, ProtocolError
from chat_hub.domain.value_objects.enums import LEGACY_MESSAGE_TYPES, MessageType

# Separator used when several queued frames are coalesced into one write.
FRAME_SEPARATOR = "\n"


class Message(BaseModel):
    """Client <-> Server envelope.

    ``sender_id`` and ``timestamp`` are assigned by the server on every
    inbound frame; whatever the client put there is overwritten.
    """

    model_config = ConfigDict(extra="ignore")

    type: str
    sender_id: UUID | None = None
    receiver_id: UUID | None = None
    group_id: UUID | None = None
    content: str | None = None
    data: dict[str, Any] | None = None
    timestamp: datetime | None = None

    def encode(self) -> str:
        return self.model_dump_json(exclude_none=True)


def decode_frame(raw: str | bytes, max_bytes: int) -> Message:
    """Parse one inbound frame.

    Raises FrameTooLargeError when the frame exceeds ``max_bytes`` and
    ProtocolError when it is not a valid envelope. Legacy type names are
    normalized to their current equivalents.
    """
    size = len(raw) if isinstance(raw, bytes) else len(raw.encode("utf-8"))
    if size > max_bytes:
        raise FrameTooLargeError(f"frame of {size} bytes exceeds limit of {max_bytes}")

    try:
        msg = Message.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise ProtocolError(f"invalid frame: {exc.error_count()} validation error(s)") from exc

    legacy = LEGACY_MESSAGE_TYPES.get(msg.type)
    if legacy is not None:
        msg.type = legacy.value
    return msg


def split_frames(payload: str) -> list[str]:
    """Undo write-side coalescing: one JSON document per line."""
    return [part for part in payload.split(FRAME_SEPARATOR) if part]


def presence_event(
    type_: MessageType,
    user_id: UUID,
    display_name: str,
    timestamp: datetime,
) -> Message:
    return Message(
        type=type_,
        data={"user_id": str(user_id), "username": display_name},
        timestamp=timestamp,
    )


def pong(timestamp: datetime) -> Message:
    return Message(type=MessageType.PONG, timestamp=timestamp)


def ping(timestamp: datetime) -> Message:
    return Message(type=MessageType.PING, timestamp=timestamp)
