"""Entrypoint: python -m chat_hub"""
from __future__ import annotations

import uvicorn

from chat_hub.config import settings
from chat_hub.logging_config import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "chat_hub.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
        ws_max_size=settings.WS_MAX_FRAME_BYTES,
    )


if __name__ == "__main__":
    main()
