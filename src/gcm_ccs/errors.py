"""
GCM CCS error types.
"""

from typing import Any, Optional


class CcsError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class EncodeError(CcsError):
    """A downstream message or ack is missing a required field."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("encode_error", message, details)


class DecodeError(CcsError):
    """An inbound payload is not a valid CCS JSON object."""

    def __init__(self, message: str, payload: Optional[str] = None):
        super().__init__("decode_error", message, {"payload": payload} if payload is not None else None)
        self.payload = payload


class SendFailed(CcsError):
    def __init__(self, message: str):
        super().__init__("send_failed", message)


class ConnectError(CcsError):
    def __init__(self, message: str):
        super().__init__("connect_error", message)


class TransportError(CcsError):
    """Raised by stanza channel implementations."""

    def __init__(self, message: str, code: str = "transport_error"):
        super().__init__(code, message)


class NotConnectedError(TransportError):
    def __init__(self, message: str = "Stanza channel is not connected"):
        super().__init__(message, code="not_connected")


class AuthenticationError(TransportError):
    def __init__(self, message: str):
        super().__init__(message, code="auth_error")
