"""
SOCKS5 wire codec for Socksdial.

Encodes client frames and decodes proxy replies per RFC 1928 and RFC 1929.
Functions here do no I/O.

    greeting          VER | NMETHODS | METHODS
    method selection  VER | METHOD
    userpass request  1 | ULEN | UNAME | PLEN | PASSWD
    userpass reply    1 | STATUS
    request           VER | CMD | RSV | ATYP | DST.ADDR | DST.PORT
    reply             VER | REP | RSV | ATYP | BND.ADDR | BND.PORT
"""

import enum
import struct
from types import MappingProxyType
from typing import Iterable, NamedTuple, Optional, Tuple

from .errors import AuthFailed, ConnectRejected, InvalidResponse

SOCKS_VERSION = 5
USERPASS_VERSION = 1
DEFAULT_PORT = 1080

MAX_FIELD_LENGTH = 255


class AuthMethod(enum.IntEnum):
    NO_AUTH = 0x00
    GSSAPI = 0x01
    USERNAME_PASSWORD = 0x02
    UNAVAILABLE = 0xFF


class Command(enum.IntEnum):
    CONNECT = 0x01
    BIND = 0x02
    UDP_ASSOCIATE = 0x03


class AddressType(enum.IntEnum):
    IPV4 = 0x01
    DOMAIN = 0x03
    IPV6 = 0x04


class ReplyStatus(enum.IntEnum):
    GRANTED = 0x00
    GENERAL_FAILURE = 0x01
    CONNECTION_NOT_ALLOWED = 0x02
    NETWORK_UNREACHABLE = 0x03
    HOST_UNREACHABLE = 0x04
    CONNECTION_REFUSED = 0x05
    TTL_EXPIRED = 0x06
    COMMAND_NOT_SUPPORTED = 0x07
    ADDRESS_TYPE_NOT_SUPPORTED = 0x08


STATUS_REASONS = MappingProxyType(
    {
        ReplyStatus.GENERAL_FAILURE: "general failure",
        ReplyStatus.CONNECTION_NOT_ALLOWED: "connection not allowed by ruleset",
        ReplyStatus.NETWORK_UNREACHABLE: "network unreachable",
        ReplyStatus.HOST_UNREACHABLE: "host unreachable",
        ReplyStatus.CONNECTION_REFUSED: "connection refused by destination host",
        ReplyStatus.TTL_EXPIRED: "TTL expired",
        ReplyStatus.COMMAND_NOT_SUPPORTED: "command not supported / protocol error",
        ReplyStatus.ADDRESS_TYPE_NOT_SUPPORTED: "address type not supported",
    }
)


class AddressShape(NamedTuple):
    """How many bytes a bound address occupies on the wire.

    ``size`` is None when the address carries its own one-byte length prefix.
    """

    size: Optional[int]

    @property
    def length_prefixed(self) -> bool:
        return self.size is None


BOUND_ADDRESS_SHAPES = MappingProxyType(
    {
        AddressType.IPV4: AddressShape(4),
        AddressType.IPV6: AddressShape(16),
        AddressType.DOMAIN: AddressShape(None),
    }
)

# Sizes of the fixed-length reply fields read by the dialer.
METHOD_SELECTION_SIZE = 2
USERPASS_REPLY_SIZE = 2
REPLY_HEADER_SIZE = 4
PORT_SIZE = 2


def _length_prefixed(value: str, what: str) -> bytes:
    raw = value.encode("utf-8")
    if len(raw) > MAX_FIELD_LENGTH:
        raise ValueError(
            f"{what} is {len(raw)} bytes long, at most {MAX_FIELD_LENGTH} allowed"
        )
    return bytes([len(raw)]) + raw


def encode_greeting(methods: Iterable[int]) -> bytes:
    """Build the client greeting offering ``methods``."""
    methods = bytes(methods)
    if not 0 < len(methods) <= MAX_FIELD_LENGTH:
        raise ValueError("greeting must offer between 1 and 255 methods")
    return struct.pack("!BB", SOCKS_VERSION, len(methods)) + methods


def decode_method_selection(data: bytes) -> int:
    """Return the method byte chosen by the proxy."""
    version, method = struct.unpack("!BB", data)
    if version != SOCKS_VERSION:
        raise InvalidResponse(f"unexpected SOCKS version {version} in method selection")
    return method


def encode_userpass_request(username: str, password: str) -> bytes:
    """Build an RFC 1929 username/password request."""
    return (
        bytes([USERPASS_VERSION])
        + _length_prefixed(username, "username")
        + _length_prefixed(password, "password")
    )


def decode_userpass_reply(data: bytes) -> None:
    version, status = struct.unpack("!BB", data)
    if version != USERPASS_VERSION:
        raise InvalidResponse(f"unexpected subnegotiation version {version}")
    if status != 0:
        raise AuthFailed()


def encode_connect_request(
    host: str, port: int, command: int = Command.CONNECT
) -> bytes:
    """Build a request addressing ``host`` by name.

    The host is always sent as a domain name so the proxy does the resolving.
    """
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port {port} out of range 0-65535")
    return (
        struct.pack("!BBBB", SOCKS_VERSION, command, 0x00, AddressType.DOMAIN)
        + _length_prefixed(host, "host")
        + struct.pack("!H", port)
    )


def decode_reply_header(data: bytes) -> Tuple[int, int]:
    """Validate the fixed reply header and return ``(status, address_type)``.

    A status other than GRANTED raises: ConnectRejected for the eight defined
    codes, InvalidResponse for anything else.
    """
    version, status, _reserved, address_type = struct.unpack("!BBBB", data)
    if version != SOCKS_VERSION:
        raise InvalidResponse(f"unexpected SOCKS version {version} in reply")
    if status != ReplyStatus.GRANTED:
        reason = STATUS_REASONS.get(status)
        if reason is None:
            raise InvalidResponse(f"unknown reply status {status:#04x}")
        raise ConnectRejected(status, reason)
    return status, address_type


def bound_address_shape(address_type: int) -> AddressShape:
    try:
        return BOUND_ADDRESS_SHAPES[address_type]
    except KeyError:
        raise InvalidResponse(f"unknown address type {address_type:#04x} in reply") from None


def decode_port(data: bytes) -> int:
    return struct.unpack("!H", data)[0]
