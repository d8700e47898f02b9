"""
Exceptions raised by Socksdial.

Protocol failures derive from SocksError. Transport failures are whatever
the underlying stream raises (OSError, EOFError) and are never wrapped.
"""

from typing import Optional


class SocksError(Exception):
    """Base class for SOCKS5 handshake errors."""

    default_message = "socks error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class InvalidResponse(SocksError):
    """The proxy sent malformed or unexpected bytes."""

    default_message = "invalid proxy response"


class NoAcceptableAuthMethod(SocksError):
    """The proxy selected no authentication method we can use."""

    default_message = "no acceptable authentication method"


class AuthFailed(SocksError):
    """The proxy rejected the username/password subnegotiation."""

    default_message = "authentication failed"


class ConnectRejected(SocksError):
    """The proxy refused the CONNECT request with a defined status code."""

    def __init__(self, status: int, reason: str):
        super().__init__(reason)
        self.status = status
        self.reason = reason


class AlreadyUsed(SocksError):
    """The dialer has already performed its single handshake."""

    default_message = "connection already used"


class ConfigurationConflict(SocksError):
    """Two configuration options cannot be combined."""

    default_message = "credentials already set"
