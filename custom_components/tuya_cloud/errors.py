"""Errors raised by the Tuya cloud integration."""
from __future__ import annotations


class TuyaError(Exception):
    """Base error carrying an optional platform error code."""

    def __init__(self, message: str, code: int | str | None = None):
        self.code = code
        text = f"{message} (code={code})" if code is not None else message
        super().__init__(text)


class AuthError(TuyaError):
    """Missing configuration or rejected credentials."""


class TransportError(TuyaError):
    """Non-success HTTP status, transport failure or unsuccessful API body."""


class RealtimeError(TuyaError):
    """Realtime connection, decrypt or envelope decode failure."""


class ProtocolError(TuyaError):
    """Unrecognized status or business code."""
