"""
Tests for the Socksdial wire codec.
"""

import struct

import pytest

from socksdial import protocol
from socksdial.errors import AuthFailed, ConnectRejected, InvalidResponse
from socksdial.protocol import AddressType, AuthMethod, Command


class TestEncoding:
    """Test cases for client frames."""

    def test_greeting_no_auth(self):
        """Test greeting offering only no-auth."""
        assert protocol.encode_greeting([AuthMethod.NO_AUTH]) == b"\x05\x01\x00"

    def test_greeting_with_userpass(self):
        """Test greeting offering no-auth and username/password."""
        frame = protocol.encode_greeting(
            [AuthMethod.NO_AUTH, AuthMethod.USERNAME_PASSWORD]
        )
        assert frame == b"\x05\x02\x00\x02"

    def test_userpass_request(self):
        """Test RFC 1929 request layout."""
        frame = protocol.encode_userpass_request("user", "secret")
        assert frame == b"\x01\x04user\x06secret"

    def test_userpass_request_too_long(self):
        """Test oversized username is rejected."""
        with pytest.raises(ValueError):
            protocol.encode_userpass_request("u" * 256, "p")

    def test_connect_request(self):
        """Test CONNECT request always carries a domain name."""
        frame = protocol.encode_connect_request("example.com", 443)
        assert frame == b"\x05\x01\x00\x03\x0bexample.com\x01\xbb"

    def test_connect_request_ip_literal_sent_as_domain(self):
        """Test IP literals are forwarded as names, never packed."""
        frame = protocol.encode_connect_request("10.0.0.1", 80)
        assert frame[3] == AddressType.DOMAIN
        assert frame[5:13] == b"10.0.0.1"

    @pytest.mark.parametrize("length", [0, 1, 127, 255])
    @pytest.mark.parametrize("port", [0, 1, 1080, 65535])
    def test_connect_request_lengths(self, length, port):
        """Test host length byte and port field for boundary values."""
        host = "a" * length
        frame = protocol.encode_connect_request(host, port)
        assert frame[4] == length
        assert struct.unpack("!H", frame[5 + length:])[0] == port
        assert len(frame) == 7 + length

    def test_connect_request_host_too_long(self):
        """Test hosts over 255 bytes are rejected."""
        with pytest.raises(ValueError):
            protocol.encode_connect_request("a" * 256, 80)

    @pytest.mark.parametrize("port", [-1, 65536])
    def test_connect_request_bad_port(self, port):
        """Test ports outside 0-65535 are rejected."""
        with pytest.raises(ValueError):
            protocol.encode_connect_request("example.com", port)

    def test_bind_command_value(self):
        """Test other commands only change the command byte."""
        frame = protocol.encode_connect_request("h", 1, Command.BIND)
        assert frame[1] == 0x02
        assert Command.UDP_ASSOCIATE == 0x03


class TestDecoding:
    """Test cases for proxy replies."""

    def test_method_selection(self):
        """Test chosen method is returned."""
        assert protocol.decode_method_selection(b"\x05\x02") == 2

    def test_method_selection_bad_version(self):
        """Test version mismatch in method selection."""
        with pytest.raises(InvalidResponse):
            protocol.decode_method_selection(b"\x04\x00")

    def test_userpass_reply(self):
        """Test subnegotiation reply outcomes."""
        protocol.decode_userpass_reply(b"\x01\x00")
        with pytest.raises(AuthFailed):
            protocol.decode_userpass_reply(b"\x01\x01")
        with pytest.raises(InvalidResponse):
            protocol.decode_userpass_reply(b"\x05\x00")

    def test_reply_header_granted(self):
        """Test granted reply returns the address type."""
        assert protocol.decode_reply_header(b"\x05\x00\x00\x01") == (0, 1)

    def test_reply_header_refused(self):
        """Test status 5 maps to connection refused."""
        with pytest.raises(ConnectRejected) as info:
            protocol.decode_reply_header(b"\x05\x05\x00\x01")
        assert info.value.status == 5
        assert str(info.value) == "connection refused by destination host"

    @pytest.mark.parametrize("status", range(1, 9))
    def test_reply_header_defined_statuses(self, status):
        """Test every defined status maps to its own reason."""
        with pytest.raises(ConnectRejected) as info:
            protocol.decode_reply_header(bytes([5, status, 0, 1]))
        assert info.value.reason == protocol.STATUS_REASONS[status]

    def test_reply_header_unknown_status(self):
        """Test unmapped statuses fail generically."""
        with pytest.raises(InvalidResponse):
            protocol.decode_reply_header(b"\x05\x09\x00\x01")

    def test_reply_header_bad_version(self):
        """Test version mismatch in reply."""
        with pytest.raises(InvalidResponse):
            protocol.decode_reply_header(b"\x04\x00\x00\x01")

    def test_bound_address_shapes(self):
        """Test address type dispatch."""
        assert protocol.bound_address_shape(AddressType.IPV4).size == 4
        assert protocol.bound_address_shape(AddressType.IPV6).size == 16
        assert protocol.bound_address_shape(AddressType.DOMAIN).length_prefixed
        with pytest.raises(InvalidResponse):
            protocol.bound_address_shape(0x02)

    def test_status_reasons_immutable(self):
        """Test the status table cannot be modified."""
        with pytest.raises(TypeError):
            protocol.STATUS_REASONS[9] = "nope"
