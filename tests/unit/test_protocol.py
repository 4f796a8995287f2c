from __future__ import annotations

import json
import uuid
from datetime import datetime

import pytest

from chat_hub.application.exceptions import FrameTooLargeError, ProtocolError
from chat_hub.domain.value_objects.enums import MessageType
from chat_hub.infrastructure.ws.protocol import (
    Message,
    decode_frame,
    presence_event,
    split_frames,
)
from tests.conftest import FIXED_NOW


def test_decode_normalizes_legacy_types():
    msg = decode_frame(json.dumps({"type": "new_group_message", "group_id": str(uuid.uuid4())}), 1024)

    assert msg.type == MessageType.NEW_GROUP


def test_decode_ignores_unknown_fields():
    msg = decode_frame('{"type": "typing", "client_version": "3.1"}', 1024)

    assert msg.type == "typing"
    assert msg.receiver_id is None


def test_decode_keeps_unknown_type_for_router():
    msg = decode_frame('{"type": "dance"}', 1024)

    assert msg.type == "dance"


@pytest.mark.parametrize("raw", ["", "{", '"ping"', '{"content": "no type"}', '{"type": "typing", "data": []}'])
def test_decode_rejects_invalid_envelopes(raw):
    with pytest.raises(ProtocolError):
        decode_frame(raw, 1024)


def test_decode_measures_size_in_bytes():
    raw = json.dumps({"type": "typing", "content": "é" * 40}, ensure_ascii=False)
    assert len(raw) < 100 < len(raw.encode("utf-8"))

    with pytest.raises(FrameTooLargeError):
        decode_frame(raw, 100)


def test_encode_omits_empty_fields_and_keeps_timestamp():
    receiver = uuid.uuid4()
    encoded = Message(
        type=MessageType.NEW_DIRECT,
        receiver_id=receiver,
        content="hi",
        timestamp=FIXED_NOW,
    ).encode()

    data = json.loads(encoded)
    assert set(data) == {"type", "receiver_id", "content", "timestamp"}
    assert data["receiver_id"] == str(receiver)
    assert datetime.fromisoformat(data["timestamp"]) == FIXED_NOW


def test_presence_event_carries_user_and_name():
    user_id = uuid.uuid4()

    data = json.loads(presence_event(MessageType.USER_LEFT, user_id, "bob", FIXED_NOW).encode())

    assert data["type"] == "user_left"
    assert data["data"] == {"user_id": str(user_id), "username": "bob"}


def test_split_frames_skips_blank_lines():
    assert split_frames('{"a": 1}\n{"b": 2}\n') == ['{"a": 1}', '{"b": 2}']
