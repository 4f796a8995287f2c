from __future__ import annotations

import pydantic
import pytest

from chat_hub.config import Settings
from chat_hub.infrastructure.ws.connection import ConnectionLimits


def test_ping_interval_defaults_to_nine_tenths_of_read_deadline():
    s = Settings(WS_READ_DEADLINE_SECONDS=60)

    assert s.ping_interval == pytest.approx(54)


def test_defaults_match_connection_limits():
    limits = ConnectionLimits.from_settings(Settings())

    assert limits == ConnectionLimits(
        read_deadline=60.0,
        ping_interval=54.0,
        write_deadline=10.0,
        max_frame_bytes=512 * 1024,
        send_queue_size=256,
        coalesce=True,
    )


def test_ping_interval_must_be_shorter_than_read_deadline():
    with pytest.raises(pydantic.ValidationError):
        Settings(WS_READ_DEADLINE_SECONDS=30, WS_PING_INTERVAL_SECONDS=30)


def test_jwks_mode_requires_url():
    with pytest.raises(pydantic.ValidationError):
        Settings(JWT_VERIFY_MODE="jwks", JWKS_URL=None)


def test_queue_size_must_be_positive():
    with pytest.raises(pydantic.ValidationError):
        Settings(WS_SEND_QUEUE_SIZE=0)
