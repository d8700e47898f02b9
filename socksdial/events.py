"""
Event system for Socksdial.

Dialers report handshake progress through an EventEmitter:

    greeting         (methods,)
    method_selected  (method,)
    authenticate     (username,)
    connect          (host, port)
    established      (host, port)
    error            (error, failed_state)
"""

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List, Optional

logger = logging.getLogger(__name__)

HANDSHAKE_EVENTS = frozenset(
    {"greeting", "method_selected", "authenticate", "connect", "established", "error"}
)


class EventEmitter:
    """Synchronous event emitter for SOCKS5 handshake events."""

    def __init__(self):
        self._listeners: DefaultDict[str, List[Callable]] = defaultdict(list)

    def on(self, event: str, callback: Optional[Callable] = None):
        """Register ``callback`` for ``event``.

        Without a callback, returns a decorator registering the decorated function.
        """
        if event not in HANDSHAKE_EVENTS:
            raise ValueError(f"unknown handshake event {event!r}")
        if callback is None:
            return lambda func: self.on(event, func)
        self._listeners[event].append(callback)
        return callback

    def off(self, event: str, callback: Callable) -> None:
        """Unregister ``callback``; unknown callbacks are ignored."""
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event: str, *args: Any) -> None:
        """Call every listener of ``event``; listener errors are logged."""
        for callback in list(self._listeners.get(event, ())):
            try:
                callback(*args)
            except Exception:
                logger.exception("Error in %s listener %r", event, callback)
