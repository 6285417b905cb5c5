"""Abstract bases for connections, connection managers, message handlers and servers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class AbstractConnection(ABC):
    """One client connection: its lifecycle, outgoing messages and properties."""

    conn_id: int

    @abstractmethod
    def start(self) -> None:
        """Start reading from and writing to the client."""

    @abstractmethod
    def stop(self) -> None:
        """End the connection."""

    @abstractmethod
    def send_msg(self, msg_id: int, data: bytes) -> None:
        """Pack a message and write it to the client at once."""

    @abstractmethod
    def send_buff_msg(self, msg_id: int, data: bytes) -> None:
        """Pack a message and queue it for the writer."""

    @abstractmethod
    def set_property(self, key: str, value: Any) -> None:
        """Attach a value to the connection."""

    @abstractmethod
    def get_property(self, key: str) -> Any:
        """Return an attached value; raise ``KeyError`` if there is none."""

    @abstractmethod
    def remove_property(self, key: str) -> None:
        """Detach a value, if present."""


class AbstractConnManager(ABC):
    """Registry of live connections keyed by connection id."""

    @abstractmethod
    def add(self, conn: AbstractConnection) -> None:
        """Register a connection."""

    @abstractmethod
    def remove(self, conn: AbstractConnection) -> None:
        """Unregister a connection."""

    @abstractmethod
    def get(self, conn_id: int) -> AbstractConnection:
        """Return the connection with ``conn_id``."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of registered connections."""

    @abstractmethod
    def clear_conn(self) -> None:
        """Stop and unregister every connection."""


class AbstractMsgHandler(ABC):
    """Dispatches requests to the router registered for their message id."""

    @abstractmethod
    def do_msg_handler(self, request: Any) -> None:
        """Run the router for ``request`` now."""

    @abstractmethod
    def add_router(self, msg_id: int, router: Any) -> None:
        """Register the router for ``msg_id``."""

    @abstractmethod
    def start_worker_pool(self) -> None:
        """Start the workers that drain the task queues."""

    @abstractmethod
    def send_msg_to_task_queue(self, request: Any) -> None:
        """Hand ``request`` to the worker responsible for its connection."""


class AbstractServer(ABC):
    """A server that accepts connections and routes their messages."""

    conn_mgr: AbstractConnManager
    packet: Any

    @abstractmethod
    def start(self) -> None:
        """Start listening without blocking."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the server and its connections."""

    @abstractmethod
    def serve(self) -> None:
        """Start and block."""

    @abstractmethod
    def add_router(self, msg_id: int, router: Any) -> None:
        """Register the router for ``msg_id``."""

    @abstractmethod
    def call_on_conn_start(self, conn: AbstractConnection) -> None:
        """Run the connection-start hook, if any."""

    @abstractmethod
    def call_on_conn_stop(self, conn: AbstractConnection) -> None:
        """Run the connection-stop hook, if any."""