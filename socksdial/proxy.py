"""
SOCKS5 proxy endpoint for Socksdial.

Opens TCP connections to a proxy and hands them to a Dialer.
"""

import logging
import socket
from typing import List, Optional

from .auth import Credentials, DialerOption, TorIsolation
from .dialer import Dialer, split_host_port
from .events import EventEmitter
from .protocol import DEFAULT_PORT
from .stream import SocketStream, Stream

logger = logging.getLogger(__name__)


class Proxy:
    """A SOCKS5 proxy reachable over TCP."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        username: Optional[str] = None,
        password: Optional[str] = None,
        tor_isolation: bool = False,
        timeout: Optional[float] = None,
        events: Optional[EventEmitter] = None,
    ):
        """Initialize the proxy endpoint.

        Args:
            host: Proxy host name or address
            port: Proxy port
            username: Username for RFC 1929 authentication
            password: Password for RFC 1929 authentication
            tor_isolation: Use fresh random credentials for every connection
            timeout: Socket timeout for the proxy connection, None blocks
            events: Emitter passed to every Dialer
        """
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.tor_isolation = tor_isolation
        self.timeout = timeout
        self.events = events

    @classmethod
    def from_address(cls, address: str, **kwargs) -> "Proxy":
        """Build a proxy from ``host:port``; the port defaults to 1080."""
        if ":" not in address or (address.startswith("[") and address.endswith("]")):
            return cls(address.strip("[]"), DEFAULT_PORT, **kwargs)
        host, port = split_host_port(address)
        return cls(host, port, **kwargs)

    @classmethod
    def with_auth(cls, address: str, username: str, password: str) -> "Proxy":
        return cls.from_address(address, username=username, password=password)

    @classmethod
    def with_tor_isolation(cls, address: str) -> "Proxy":
        return cls.from_address(address, tor_isolation=True)

    def __repr__(self) -> str:
        return f"Proxy({self.host!r}, {self.port}, isolation={self.tor_isolation})"

    def options(self) -> List[DialerOption]:
        if self.tor_isolation:
            return [TorIsolation()]
        if self.username:
            return [Credentials(self.username, self.password or "")]
        return []

    def dialer(self, stream: Stream) -> Dialer:
        """Build a Dialer for ``stream`` configured for this proxy."""
        return Dialer(stream, *self.options(), events=self.events)

    def open_stream(self) -> SocketStream:
        sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        logger.debug("Connected to SOCKS5 proxy at %s:%d", self.host, self.port)
        return SocketStream(sock)

    def dial(self, network: str, address: str) -> SocketStream:
        """Open a tunnel through the proxy to ``address`` (``host:port``)."""
        options = self.options()
        stream = self.open_stream()
        return Dialer(stream, *options, events=self.events).dial(network, address)

    def connect(self, host: str, port: int) -> SocketStream:
        options = self.options()
        stream = self.open_stream()
        return Dialer(stream, *options, events=self.events).connect(host, port)
