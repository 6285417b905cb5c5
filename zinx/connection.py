"""One client connection: a reader thread, a writer thread and a send buffer."""

from __future__ import annotations

import queue
import socket
import threading
from typing import Any, Optional

from zinx import stdlog
from zinx.config import get_config
from zinx.interfaces import AbstractConnection
from zinx.message import Message
from zinx.request import Request

_BUFF_SEND_TIMEOUT = 0.005
_CLOSE = object()


class ConnectionClosedError(ConnectionError):
    """A message was sent on a connection that has already been closed."""


class Connection(AbstractConnection):
    """A client connection of ``server``.

    ``server`` must provide ``conn_mgr``, ``packet``, ``call_on_conn_start``
    and ``call_on_conn_stop``. The connection registers itself with the
    server's connection manager on creation.
    """

    def __init__(self, server: Any, sock: socket.socket, conn_id: int, msg_handler: Any,
                 max_msg_chan_len: Optional[int] = None):
        if max_msg_chan_len is None:
            max_msg_chan_len = get_config().max_msg_chan_len
        self.server = server
        self.sock = sock
        self.conn_id = conn_id
        self.msg_handler = msg_handler
        self._done = threading.Event()
        self._msg_buff: queue.Queue = queue.Queue(maxsize=max(1, max_msg_chan_len))
        self._lock = threading.RLock()
        self._send_lock = threading.Lock()
        self._properties: dict[str, Any] = {}
        self._property_lock = threading.Lock()
        self._closed = False
        server.conn_mgr.add(self)

    @property
    def done(self) -> threading.Event:
        """Set once the connection has been asked to stop."""
        return self._done

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _read_exact(self, size: int) -> bytes:
        buf = bytearray()
        while len(buf) < size:
            chunk = self.sock.recv(size - len(buf))
            if not chunk:
                raise EOFError("connection closed by peer")
            buf += chunk
        return bytes(buf)

    def _reader(self) -> None:
        stdlog.info("[Reader Goroutine is running]")
        try:
            while not self._done.is_set():
                packet = self.server.packet
                msg = packet.unpack(self._read_exact(packet.head_len()))
                msg.data = self._read_exact(msg.data_len) if msg.data_len > 0 else b""
                request = Request(self, msg)
                if getattr(self.msg_handler, "worker_pool_size", 0) > 0:
                    self.msg_handler.send_msg_to_task_queue(request)
                else:
                    threading.Thread(target=self.msg_handler.do_msg_handler,
                                     args=(request,), daemon=True).start()
        except Exception as exc:
            stdlog.info("read msg error:", repr(exc))
        finally:
            self.stop()
            stdlog.info("conn", self.conn_id, "[conn Reader exit!]")

    def _writer(self) -> None:
        stdlog.info("[Writer Goroutine is running]")
        while True:
            data = self._msg_buff.get()
            if data is _CLOSE or self._done.is_set():
                break
            try:
                with self._send_lock:
                    self.sock.sendall(data)
            except OSError as exc:
                stdlog.info("Send Buff Data error:", repr(exc), "Conn Writer exit")
                break
        stdlog.info("conn", self.conn_id, "[conn Writer exit!]")

    def start(self) -> None:
        """Run the connection; block until it is stopped, then close it."""
        threading.Thread(target=self._reader, name=f"zinx-reader-{self.conn_id}",
                         daemon=True).start()
        threading.Thread(target=self._writer, name=f"zinx-writer-{self.conn_id}",
                         daemon=True).start()
        try:
            self.server.call_on_conn_start(self)
            self._done.wait()
        finally:
            self._done.set()
            self._finalize()

    def stop(self) -> None:
        """Ask the connection to end; :meth:`start` then closes it."""
        self._done.set()

    def remote_addr(self) -> Any:
        """Address of the peer."""
        return self.sock.getpeername()

    def send_msg(self, msg_id: int, data: bytes) -> None:
        """Pack and write a message to the client immediately."""
        with self._lock:
            if self._closed:
                raise ConnectionClosedError("connection closed when send msg")
            frame = self.server.packet.pack(Message(msg_id, bytes(data)))
            with self._send_lock:
                self.sock.sendall(frame)

    def send_buff_msg(self, msg_id: int, data: bytes) -> None:
        """Pack a message and queue it for the writer; raise ``TimeoutError`` if the queue stays full."""
        with self._lock:
            if self._closed:
                raise ConnectionClosedError("connection closed when send buff msg")
            frame = self.server.packet.pack(Message(msg_id, bytes(data)))
            try:
                self._msg_buff.put(frame, timeout=_BUFF_SEND_TIMEOUT)
            except queue.Full:
                raise TimeoutError("send buff msg timeout") from None

    def set_property(self, key: str, value: Any) -> None:
        with self._property_lock:
            self._properties[key] = value

    def get_property(self, key: str) -> Any:
        with self._property_lock:
            try:
                return self._properties[key]
            except KeyError:
                raise KeyError("no property found") from None

    def remove_property(self, key: str) -> None:
        with self._property_lock:
            self._properties.pop(key, None)

    def _finalize(self) -> None:
        self.server.call_on_conn_stop(self)
        with self._lock:
            if self._closed:
                return
            stdlog.info("Conn Stop()...ConnID =", self.conn_id)
            try:
                self.sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self.sock.close()
            self.server.conn_mgr.remove(self)
            try:
                self._msg_buff.put_nowait(_CLOSE)
            except queue.Full:
                pass
            self._closed = True