"""Example client: sends a ping once per interval and prints the replies."""

from __future__ import annotations

import argparse
import socket
import sys
import time
from typing import Any, Optional, Sequence

from zinx.datapack import DataPack, PacketError
from zinx.message import Message

PING_DATA = b"Zinx client Demo Test MsgID=0, [Ping]"


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = sock.recv(size - len(buf))
        if not chunk:
            raise EOFError("connection closed by peer")
        buf += chunk
    return bytes(buf)


def exchange(sock: socket.socket, packet: Any, msg_id: int, data: bytes) -> Message:
    """Send one framed message and read back one framed reply."""
    sock.sendall(packet.pack(Message(msg_id, bytes(data))))
    reply = packet.unpack(_recv_exact(sock, packet.head_len()))
    if reply.data_len > 0:
        reply.data = _recv_exact(sock, reply.data_len)
    return reply


def run_client(host: str = "127.0.0.1", port: int = 8999,
               rounds: Optional[int] = None, interval: float = 1.0) -> list[Message]:
    """Ping the server ``rounds`` times (forever if ``None``); return the replies.

    Failing to connect raises ``OSError``; a failure later ends the loop.
    """
    packet = DataPack()
    received: list[Message] = []
    with socket.create_connection((host, port)) as sock:
        done = 0
        while rounds is None or done < rounds:
            try:
                reply = exchange(sock, packet, 0, PING_DATA)
            except (EOFError, OSError, PacketError) as exc:
                print("client exchange error:", exc)
                break
            received.append(reply)
            if reply.data_len > 0:
                print("==> Test Router:[Ping] Recv Msg: ID=", reply.msg_id,
                      ", len=", reply.data_len,
                      ", data=", reply.data.decode("utf-8", "replace"))
            done += 1
            if rounds is None or done < rounds:
                time.sleep(interval)
    return received


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the demo client; return the exit status."""
    parser = argparse.ArgumentParser(description="Ping a zinx server.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8999)
    parser.add_argument("--rounds", type=int, default=None)
    parser.add_argument("--interval", type=float, default=1.0)
    args = parser.parse_args(argv)
    try:
        run_client(args.host, args.port, args.rounds, args.interval)
    except OSError as exc:
        print("client start err, exit!", exc)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())