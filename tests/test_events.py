"""
Tests for the Socksdial event emitter.
"""

import pytest

from socksdial import EventEmitter


class TestEventEmitter:
    """Test cases for EventEmitter."""

    def test_emit(self):
        """Test listeners receive event arguments."""
        events = EventEmitter()
        received = []
        events.on("connect", lambda *args: received.append(args))
        events.emit("connect", "example.com", 80)
        assert received == [("example.com", 80)]

    def test_on_as_decorator(self):
        """Test registering a listener with a decorator."""
        events = EventEmitter()
        received = []

        @events.on("established")
        def handler(host, port):
            received.append((host, port))

        events.emit("established", "h", 1)
        assert received == [("h", 1)]
        assert callable(handler)

    def test_unknown_event(self):
        """Test only handshake events can be subscribed."""
        with pytest.raises(ValueError):
            EventEmitter().on("proxy_data", print)

    def test_off(self):
        """Test listeners can be removed, twice without error."""
        events = EventEmitter()
        calls = []
        handler = calls.append
        events.on("greeting", handler)
        events.off("greeting", handler)
        events.off("greeting", handler)
        events.emit("greeting", [0])
        assert calls == []

    def test_listener_error_does_not_propagate(self):
        """Test a failing listener does not stop the others."""
        events = EventEmitter()
        calls = []

        def broken(*args):
            raise RuntimeError("boom")

        events.on("error", broken)
        events.on("error", lambda error, state: calls.append(state))
        events.emit("error", RuntimeError(), "init")
        assert calls == ["init"]
