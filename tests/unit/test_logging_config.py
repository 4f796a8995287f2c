from __future__ import annotations

import logging

from chat_hub.api.middleware.correlation_id import correlation_id_ctx
from chat_hub.logging_config import CorrelationIdFilter


def _record() -> logging.LogRecord:
    return logging.LogRecord("chat_hub.test", logging.INFO, __file__, 1, "hello", None, None)


def test_filter_injects_current_correlation_id():
    token = correlation_id_ctx.set("abc123")
    try:
        record = _record()
        assert CorrelationIdFilter().filter(record) is True
    finally:
        correlation_id_ctx.reset(token)

    assert record.correlation_id == "abc123"


def test_filter_uses_placeholder_outside_requests():
    record = _record()

    CorrelationIdFilter().filter(record)

    assert record.correlation_id == "-"
