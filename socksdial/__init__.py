"""
Socksdial - A Python library for tunneling TCP connections through SOCKS5 proxies.

This library implements the client side of the SOCKS5 handshake (RFC 1928) with
optional username/password authentication (RFC 1929). Given a connected stream
to a proxy it negotiates an authentication method, requests a CONNECT to a named
host and hands back the same stream, now carrying the tunneled connection.

Target host names are always forwarded to the proxy for resolution, never
resolved locally. Random per-connection credentials can be used to request
stream isolation from proxies such as Tor.
"""

from .auth import Credentials, DialerOption, TorIsolation, isolation_credentials
from .dialer import Dialer, HandshakeState
from .errors import (
    AlreadyUsed,
    AuthFailed,
    ConfigurationConflict,
    ConnectRejected,
    InvalidResponse,
    NoAcceptableAuthMethod,
    SocksError,
)
from .events import EventEmitter
from .proxy import Proxy
from .stream import IncompleteReadError, SocketStream, Stream

__version__ = "0.1.0"
__all__ = [
    "Proxy",
    "Dialer",
    "HandshakeState",
    "DialerOption",
    "Credentials",
    "TorIsolation",
    "isolation_credentials",
    "EventEmitter",
    "Stream",
    "SocketStream",
    "IncompleteReadError",
    "SocksError",
    "InvalidResponse",
    "NoAcceptableAuthMethod",
    "AuthFailed",
    "ConnectRejected",
    "AlreadyUsed",
    "ConfigurationConflict",
]
