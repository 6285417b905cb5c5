"""Example server: answers message 0 with a ping and message 1 with a greeting."""

from __future__ import annotations

import sys
from typing import Any, Optional, Sequence

from zinx import stdlog
from zinx.config import GlobalConfig, load_config
from zinx.router import Router
from zinx.server import Server

PING_REPLY = b"ping...ping...ping[FromServer]"
HELLO_REPLY = b"Hello Zinx Router V0.10"
BEGIN_MSG = b"DoConnection BEGIN..."
DEMO_NAME = "ZinxDemo"
DEMO_HOME = "https://example.com/zinx"


def _text(data: bytes) -> str:
    return data.decode("utf-8", "replace")


class PingRouter(Router):
    """Replies to every request with a ping message (id 0)."""

    def handle(self, request: Any) -> None:
        stdlog.debug("Call PingRouter Handle")
        stdlog.debug("recv from client : msgId=", request.msg_id, ", data=", _text(request.data))
        try:
            request.connection.send_buff_msg(0, PING_REPLY)
        except (OSError, ValueError) as exc:
            stdlog.error(exc)


class HelloZinxRouter(Router):
    """Replies to every request with a greeting (id 1)."""

    def handle(self, request: Any) -> None:
        stdlog.debug("Call HelloZinxRouter Handle")
        stdlog.debug("recv from client : msgId=", request.msg_id, ", data=", _text(request.data))
        try:
            request.connection.send_buff_msg(1, HELLO_REPLY)
        except (OSError, ValueError) as exc:
            stdlog.error(exc)


def do_connection_begin(conn: Any) -> None:
    """Tag a new connection with two properties and greet the client (id 2)."""
    stdlog.debug("DoConnecionBegin is Called ... ")
    stdlog.debug("Set conn Name, Home done!")
    conn.set_property("Name", DEMO_NAME)
    conn.set_property("Home", DEMO_HOME)
    try:
        conn.send_msg(2, BEGIN_MSG)
    except (OSError, ValueError) as exc:
        stdlog.error(exc)


def do_connection_lost(conn: Any) -> None:
    """Log the properties of a connection that is going away."""
    try:
        stdlog.error("Conn Property Name = ", conn.get_property("Name"))
    except KeyError:
        pass
    try:
        stdlog.error("Conn Property Home = ", conn.get_property("Home"))
    except KeyError:
        pass
    stdlog.debug("DoConneciotnLost is Called ... ")


def build_server(config: Optional[GlobalConfig] = None) -> Server:
    """A server with the demo hooks and routers installed."""
    server = Server(config)
    server.set_on_conn_start(do_connection_begin)
    server.set_on_conn_stop(do_connection_lost)
    server.add_router(0, PingRouter())
    server.add_router(1, HelloZinxRouter())
    return server


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the demo server until interrupted."""
    command = [sys.argv[0] if sys.argv else "zinx-demo-server"]
    command += list(sys.argv[1:] if argv is None else argv)
    try:
        config = load_config(command)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 2
    server = build_server(config)
    try:
        server.serve()
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())