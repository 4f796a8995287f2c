from __future__ import annotations

from enum import StrEnum


class MessageType(StrEnum):
    NEW_DIRECT = "new_direct"
    NEW_GROUP = "new_group"
    READ_RECEIPT = "read_receipt"
    TYPING = "typing"
    PING = "ping"
    PONG = "pong"
    USER_JOINED = "user_joined"
    USER_LEFT = "user_left"


# Type names used by older mobile clients.
LEGACY_MESSAGE_TYPES: dict[str, MessageType] = {
    "new_message": MessageType.NEW_DIRECT,
    "new_group_message": MessageType.NEW_GROUP,
    "message_read": MessageType.READ_RECEIPT,
}
