"""
SOCKS5 client handshake for Socksdial.

A Dialer owns one connected stream to a proxy and turns it into a tunnel to
a single destination. Each Dialer performs at most one handshake.
"""

import enum
import logging
import threading
from typing import Optional, Tuple

from . import protocol
from .auth import DialerOption
from .errors import AlreadyUsed, InvalidResponse, NoAcceptableAuthMethod
from .events import EventEmitter
from .protocol import AuthMethod, Command
from .stream import Stream

logger = logging.getLogger(__name__)


class HandshakeState(enum.Enum):
    INIT = "init"
    METHOD_NEGOTIATION = "method_negotiation"
    USERNAME_PASSWORD_AUTH = "username_password_auth"
    CONNECT_REQUEST = "connect_request"
    REPLY_PARSE = "reply_parse"
    ESTABLISHED = "established"
    FAILED = "failed"


def split_host_port(address: str) -> Tuple[str, int]:
    """Split ``host:port`` or ``[ipv6]:port`` into host and integer port."""
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address {address!r}")
        if address[end + 1:end + 2] != ":":
            raise ValueError(f"missing port in address {address!r}")
        host, port_text = address[1:end], address[end + 2:]
    else:
        host, sep, port_text = address.rpartition(":")
        if not sep:
            raise ValueError(f"missing port in address {address!r}")
        if ":" in host:
            raise ValueError(f"too many colons in address {address!r}")

    if not (port_text.isascii() and port_text.isdigit()):
        raise ValueError(f"invalid port {port_text!r} in address {address!r}")
    port = int(port_text)
    if port > 0xFFFF:
        raise ValueError(f"port {port} out of range 0-65535")
    return host, port


class Dialer:
    """Single-use SOCKS5 CONNECT handshake over an already connected stream."""

    def __init__(
        self,
        stream: Stream,
        *options: DialerOption,
        events: Optional[EventEmitter] = None,
    ):
        """Initialize the dialer.

        Args:
            stream: Connected stream to the proxy, owned by the dialer from now on
            *options: Configuration steps applied in order; the first failure
                propagates and no dialer is built
            events: Emitter notified as the handshake progresses
        """
        self.stream = stream
        self.events = events or EventEmitter()

        self.username = ""
        self.password = ""
        self.tor_isolation = False

        self.network: Optional[str] = None
        self.host: Optional[str] = None
        self.port: Optional[int] = None

        self.state = HandshakeState.INIT
        self.error: Optional[BaseException] = None

        self._used = False
        self._lock = threading.Lock()

        for option in options:
            option.apply(self)

    def __repr__(self) -> str:
        return f"<Dialer state={self.state.value} isolation={self.tor_isolation}>"

    @property
    def used(self) -> bool:
        return self._used

    def dial(self, network: str, address: str) -> Stream:
        """Tunnel to ``address`` (``host:port``) and return the stream.

        On any failure the stream is closed before the error is raised.
        """
        self._claim()
        try:
            host, port = split_host_port(address)
        except ValueError as e:
            self._fail(e)
            raise
        return self._establish(network, host, port)

    def connect(self, host: str, port: int, network: str = "tcp") -> Stream:
        """Tunnel to ``host``/``port`` and return the stream."""
        self._claim()
        return self._establish(network, host, port)

    def _claim(self) -> None:
        with self._lock:
            if self._used:
                raise AlreadyUsed()
            self._used = True

    def _establish(self, network: str, host: str, port: int) -> Stream:
        self.network, self.host, self.port = network, host, port
        try:
            self._negotiate_method()
            self._request_connect()
            self._read_reply()
        except BaseException as e:
            self._fail(e)
            raise

        self.state = HandshakeState.ESTABLISHED
        logger.info("Tunnel established to %s:%d", host, port)
        self.events.emit("established", host, port)
        return self.stream

    def _fail(self, error: BaseException) -> None:
        failed_in = self.state
        self.state = HandshakeState.FAILED
        self.error = error
        logger.warning("SOCKS5 handshake failed during %s: %s", failed_in.value, error)
        try:
            self.stream.close()
        except OSError:
            logger.debug("Error closing stream after failed handshake", exc_info=True)
        self.events.emit("error", error, failed_in)

    def _negotiate_method(self) -> None:
        self.state = HandshakeState.METHOD_NEGOTIATION
        methods = [AuthMethod.NO_AUTH]
        if self.username:
            methods.append(AuthMethod.USERNAME_PASSWORD)

        self.stream.write(protocol.encode_greeting(methods))
        self.events.emit("greeting", methods)
        logger.debug("Offered auth methods %s", [m.name for m in methods])

        method = protocol.decode_method_selection(
            self.stream.readexactly(protocol.METHOD_SELECTION_SIZE)
        )
        self.events.emit("method_selected", method)

        if method in (AuthMethod.UNAVAILABLE, AuthMethod.GSSAPI):
            raise NoAcceptableAuthMethod()
        if method == AuthMethod.NO_AUTH:
            logger.debug("No authentication required by proxy")
            return
        if method == AuthMethod.USERNAME_PASSWORD:
            self._authenticate()
            return
        raise InvalidResponse(f"proxy selected unknown auth method {method:#04x}")

    def _authenticate(self) -> None:
        self.state = HandshakeState.USERNAME_PASSWORD_AUTH
        self.stream.write(protocol.encode_userpass_request(self.username, self.password))
        protocol.decode_userpass_reply(
            self.stream.readexactly(protocol.USERPASS_REPLY_SIZE)
        )
        logger.debug("Authenticated to proxy")
        self.events.emit("authenticate", self.username)

    def _request_connect(self) -> None:
        self.state = HandshakeState.CONNECT_REQUEST
        self.stream.write(
            protocol.encode_connect_request(self.host, self.port, Command.CONNECT)
        )
        logger.debug("Requested CONNECT to %s:%d", self.host, self.port)
        self.events.emit("connect", self.host, self.port)

    def _read_reply(self) -> None:
        self.state = HandshakeState.REPLY_PARSE
        _status, address_type = protocol.decode_reply_header(
            self.stream.readexactly(protocol.REPLY_HEADER_SIZE)
        )
        shape = protocol.bound_address_shape(address_type)
        if shape.length_prefixed:
            size = self.stream.readexactly(1)[0]
        else:
            size = shape.size
        # Bound address and port are consumed but not exposed.
        self.stream.readexactly(size)
        protocol.decode_port(self.stream.readexactly(protocol.PORT_SIZE))
