from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    JWT_SECRET: str = ""
    JWT_VERIFY_MODE: Literal["hs256", "jwks"] = "hs256"
    JWT_ALGORITHM: str = "HS256"
    JWKS_URL: str | None = None

    CORS_ORIGINS: list[str] = ["*"]

    WS_READ_DEADLINE_SECONDS: float = Field(default=60.0, gt=0)
    WS_PING_INTERVAL_SECONDS: float | None = Field(default=None, gt=0)
    WS_WRITE_DEADLINE_SECONDS: float = Field(default=10.0, gt=0)
    WS_MAX_FRAME_BYTES: int = Field(default=512 * 1024, gt=0)
    WS_SEND_QUEUE_SIZE: int = Field(default=256, gt=0)
    WS_COALESCE_FRAMES: bool = True

    @model_validator(mode="after")
    def _check_timings(self) -> Settings:
        if self.WS_PING_INTERVAL_SECONDS is None:
            self.WS_PING_INTERVAL_SECONDS = self.WS_READ_DEADLINE_SECONDS * 9 / 10
        if self.WS_PING_INTERVAL_SECONDS >= self.WS_READ_DEADLINE_SECONDS:
            raise ValueError(
                "WS_PING_INTERVAL_SECONDS must be shorter than WS_READ_DEADLINE_SECONDS"
            )
        if self.JWT_VERIFY_MODE == "jwks" and not self.JWKS_URL:
            raise ValueError("JWKS_URL must be set when JWT_VERIFY_MODE=jwks")
        return self

    @property
    def ping_interval(self) -> float:
        assert self.WS_PING_INTERVAL_SECONDS is not None
        return self.WS_PING_INTERVAL_SECONDS

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
