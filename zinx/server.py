"""TCP server that accepts connections and routes their messages."""

from __future__ import annotations

import socket
import threading
from typing import Any, Callable, Optional

from zinx import stdlog
from zinx.config import GlobalConfig, get_config
from zinx.connection import Connection
from zinx.connmanager import ConnManager
from zinx.datapack import DataPack
from zinx.interfaces import AbstractServer
from zinx.msghandler import MsgHandler

_LOGO = """\
                                        
              ██                        
              ▀▀                        
 ████████   ████     ██▄████▄  ▀██  ██▀ 
     ▄█▀      ██     ██▀   ██    ████   
   ▄█▀        ██     ██    ██    ▄██▄   
 ▄██▄▄▄▄▄  ▄▄▄██▄▄▄  ██    ██   ▄█▀▀█▄  
 ▀▀▀▀▀▀▀▀  ▀▀▀▀▀▀▀▀  ▀▀    ▀▀  ▀▀▀  ▀▀▀ 
                                        """
_TOP_LINE = "┌" + "─" * 51 + "┐"
_BORDER = "│"
_BOTTOM_LINE = "└" + "─" * 51 + "┘"
_ACCEPT_POLL = 0.2

Hook = Callable[[Any], None]


def logo_text(config: Optional[GlobalConfig] = None) -> str:
    """The banner printed when a server is created."""
    config = config if config is not None else get_config()
    return "\n".join([
        _LOGO,
        _TOP_LINE,
        f"{_BORDER} {'[Zinx] lightweight TCP server framework':<49} {_BORDER}",
        _BOTTOM_LINE,
        f"[Zinx] Version: {config.version}, MaxConn: {config.max_conn}, "
        f"MaxPacketSize: {config.max_packet_size}",
    ])


class Server(AbstractServer):
    """Listens on ``host:port`` and runs one :class:`Connection` per client.

    ``packet`` replaces the default framing; ``host`` and ``port`` override the
    configuration. Port 0 picks a free port, see :meth:`address`.
    """

    def __init__(self, config: Optional[GlobalConfig] = None, packet: Any = None,
                 host: Optional[str] = None, port: Optional[int] = None):
        self.config = config if config is not None else get_config()
        print(logo_text(self.config))
        self.name = self.config.name
        self.ip_version = "tcp4"
        self.host = host if host is not None else self.config.host
        self.port = port if port is not None else self.config.tcp_port
        self.msg_handler = MsgHandler(self.config.worker_pool_size,
                                      self.config.max_worker_task_len)
        self.conn_mgr = ConnManager()
        self.packet = packet if packet is not None else DataPack(self.config.max_packet_size)
        self.on_conn_start: Optional[Hook] = None
        self.on_conn_stop: Optional[Hook] = None
        self._lock = threading.Lock()
        self._listener: Optional[socket.socket] = None
        self._accept_thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()

    def start(self) -> None:
        """Start the workers, bind the listener and accept clients in a thread."""
        stdlog.info(f"[START] Server name: {self.name},listenner at IP: {self.host}, "
                    f"Port {self.port} is starting")
        with self._lock:
            if self._listener is not None:
                raise RuntimeError("server already started")
            self._stopped.clear()
            self.msg_handler.start_worker_pool()
            listener = socket.create_server((self.host, self.port), family=socket.AF_INET)
            listener.settimeout(_ACCEPT_POLL)
            self._listener = listener
            self._accept_thread = threading.Thread(
                target=self._accept_loop, args=(listener,), name="zinx-accept", daemon=True)
            self._accept_thread.start()
        stdlog.info("start Zinx server", self.name, "succ, now listenning...")

    def _accept_loop(self, listener: socket.socket) -> None:
        conn_id = 0
        while not self._stopped.is_set():
            try:
                sock, addr = listener.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stopped.is_set():
                    break
                stdlog.error("Accept err", repr(exc))
                continue
            sock.setblocking(True)
            stdlog.info("Get conn remote addr =", addr)
            if len(self.conn_mgr) >= self.config.max_conn:
                sock.close()
                continue
            conn = Connection(self, sock, conn_id, self.msg_handler,
                              self.config.max_msg_chan_len)
            conn_id += 1
            threading.Thread(target=conn.start, name=f"zinx-conn-{conn.conn_id}",
                             daemon=True).start()

    def stop(self) -> None:
        """Stop accepting clients and stop every connection."""
        stdlog.info("[STOP] Zinx server , name", self.name)
        self._stopped.set()
        with self._lock:
            listener, self._listener = self._listener, None
            accept_thread, self._accept_thread = self._accept_thread, None
        if listener is not None:
            listener.close()
        if accept_thread is not None and accept_thread is not threading.current_thread():
            accept_thread.join(2 * _ACCEPT_POLL + 1)
        self.conn_mgr.clear_conn()

    def serve(self) -> None:
        """Start and block until :meth:`stop` is called."""
        self.start()
        self._stopped.wait()

    def address(self) -> tuple[str, int]:
        """The ``(host, port)`` the server listens on."""
        listener = self._listener
        if listener is None:
            raise RuntimeError("server is not started")
        host, port = listener.getsockname()[:2]
        return host, port

    def add_router(self, msg_id: int, router: Any) -> None:
        self.msg_handler.add_router(msg_id, router)

    def set_on_conn_start(self, hook: Optional[Hook]) -> None:
        self.on_conn_start = hook

    def set_on_conn_stop(self, hook: Optional[Hook]) -> None:
        self.on_conn_stop = hook

    def call_on_conn_start(self, conn: Any) -> None:
        if self.on_conn_start is not None:
            stdlog.info("---> CallOnConnStart....")
            self.on_conn_start(conn)

    def call_on_conn_stop(self, conn: Any) -> None:
        if self.on_conn_stop is not None:
            stdlog.info("---> CallOnConnStop....")
            self.on_conn_stop(conn)