"""
Credential configuration for Socksdial.

Options are applied in order to a fresh Dialer before any network activity.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Tuple

from .errors import ConfigurationConflict
from .protocol import MAX_FIELD_LENGTH

if TYPE_CHECKING:
    from .dialer import Dialer

logger = logging.getLogger(__name__)

ISOLATION_TOKEN_BYTES = 16


class DialerOption(ABC):
    """Base class for dialer configuration steps."""

    @abstractmethod
    def apply(self, dialer: "Dialer") -> None:
        """Configure ``dialer``, raising to abort its construction."""
        pass


class Credentials(DialerOption):
    """Explicit username/password credentials.

    An empty username means the dialer offers no username/password method.
    """

    def __init__(self, username: str, password: str):
        for what, value in (("username", username), ("password", password)):
            if len(value.encode("utf-8")) > MAX_FIELD_LENGTH:
                raise ValueError(f"{what} longer than {MAX_FIELD_LENGTH} bytes")
        self.username = username
        self.password = password

    def apply(self, dialer: "Dialer") -> None:
        dialer.username = self.username
        dialer.password = self.password

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class TorIsolation(DialerOption):
    """Random per-handshake credentials.

    Proxies such as Tor with IsolateSOCKSAuth treat every distinct
    username/password pair as a separate identity and route it over its own
    circuit. The credentials authenticate nothing.
    """

    def apply(self, dialer: "Dialer") -> None:
        if dialer.username or dialer.password:
            raise ConfigurationConflict()
        dialer.username, dialer.password = isolation_credentials()
        dialer.tor_isolation = True
        logger.debug("Generated isolation credentials for %r", dialer)

    def __repr__(self) -> str:
        return "TorIsolation()"


def isolation_credentials() -> Tuple[str, str]:
    """Return a fresh ``(username, password)`` pair of 16 hex chars each."""
    token = secrets.token_bytes(ISOLATION_TOKEN_BYTES)
    half = ISOLATION_TOKEN_BYTES // 2
    return token[:half].hex(), token[half:].hex()
