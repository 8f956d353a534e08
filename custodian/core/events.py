"""Thread-safe event source with disconnectable subscriptions."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Connection:
    """Subscription handle returned by ``Signal.connect``.

    Attributes
    ----------
    callback : Callable[..., Any]
        Function invoked when the signal fires
    """

    def __init__(self, signal: Signal, callback: Callable[..., Any]) -> None:
        self._signal = signal
        self.callback = callback
        self._connected = True

    @property
    def connected(self) -> bool:
        return self._connected

    def disconnect(self) -> None:
        """Stop receiving the signal. Calling it again does nothing."""
        if not self._connected:
            return
        self._connected = False
        self._signal._detach(self)

    def __repr__(self) -> str:
        state = "connected" if self._connected else "disconnected"
        return f"<Connection {self._signal.name or 'signal'} {state}>"


class Signal:
    """Event source satisfying the subscribe/unsubscribe capability.

    Callbacks run in connection order against a snapshot of the current
    connections, so a callback may connect or disconnect handlers, including
    its own, without affecting the ongoing dispatch.

    Parameters
    ----------
    name : str
        Optional label used in logs and ``repr()``
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._connections: list[Connection] = []
        self._lock = threading.Lock()

    def connect(self, callback: Callable[..., Any]) -> Connection:
        """Subscribe a callback.

        Parameters
        ----------
        callback : Callable[..., Any]
            Function called with the arguments passed to ``fire``

        Returns
        -------
        Connection
            Handle whose ``disconnect()`` removes the subscription
        """
        if not callable(callback):
            raise TypeError("callback must be callable")

        connection = Connection(self, callback)
        with self._lock:
            self._connections.append(connection)
        return connection

    def fire(self, *args: Any, **kwargs: Any) -> None:
        """Invoke every connected callback.

        Exceptions raised by a callback propagate to the caller and stop the
        dispatch.
        """
        with self._lock:
            connections = list(self._connections)

        logger.debug("Firing %s to %s connection(s)", self.name or "signal", len(connections))

        for connection in connections:
            if connection.connected:
                connection.callback(*args, **kwargs)

    def disconnect_all(self) -> None:
        """Disconnect every subscription."""
        with self._lock:
            connections = list(self._connections)

        for connection in connections:
            connection.disconnect()

    def _detach(self, connection: Connection) -> None:
        with self._lock:
            if connection in self._connections:
                self._connections.remove(connection)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __repr__(self) -> str:
        return f"<Signal {self.name or '?'} connections={len(self)}>"
