from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class ValidationError(AppError):
    pass


class ProtocolError(AppError):
    """Inbound frame could not be decoded or has an unsupported type."""


class FrameTooLargeError(ProtocolError):
    """Inbound frame exceeds the configured size limit."""


class HubNotRunningError(AppError):
    """A command was submitted to a hub whose control loop is not running."""
