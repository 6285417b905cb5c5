"""Registry of the live connections of a server."""

from __future__ import annotations

import threading

from zinx import stdlog
from zinx.interfaces import AbstractConnection, AbstractConnManager


class ConnectionNotFound(KeyError):
    """No connection is registered under the requested id."""


class ConnManager(AbstractConnManager):
    """Thread-safe map from connection id to connection."""

    def __init__(self):
        self._lock = threading.RLock()
        self._connections: dict[int, AbstractConnection] = {}

    def add(self, conn: AbstractConnection) -> None:
        with self._lock:
            self._connections[conn.conn_id] = conn
        stdlog.info("connection add to ConnManager successfully: conn num =", len(self))

    def remove(self, conn: AbstractConnection) -> None:
        with self._lock:
            self._connections.pop(conn.conn_id, None)
        stdlog.info("connection Remove ConnID=", conn.conn_id,
                    "successfully: conn num =", len(self))

    def get(self, conn_id: int) -> AbstractConnection:
        """Return the connection with ``conn_id``; raise :class:`ConnectionNotFound`."""
        with self._lock:
            try:
                return self._connections[conn_id]
            except KeyError:
                raise ConnectionNotFound("connection not found") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def clear_conn(self) -> None:
        """Stop every connection and forget all of them."""
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
            for conn in connections:
                conn.stop()
        stdlog.info("Clear All Connections successfully: conn num =", len(self))

    def clear_one_conn(self, conn_id: int) -> None:
        """Stop and forget the connection with ``conn_id``, if there is one."""
        with self._lock:
            conn = self._connections.pop(conn_id, None)
            if conn is None:
                stdlog.info("Clear Connections ID:", conn_id, "err")
                return
            conn.stop()
        stdlog.info("Clear Connections ID:", conn_id, "succeed")