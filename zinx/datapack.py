"""Length-prefixed framing: 4-byte length and 4-byte id, little endian, then the payload."""

from __future__ import annotations

import struct
from typing import Optional

from zinx.config import get_config
from zinx.message import Message

HEAD_LEN = 8
_HEADER = struct.Struct("<II")


class PacketError(ValueError):
    """A message could not be packed or a header could not be unpacked."""


class DataPack:
    """Packs messages into frames and unpacks frame headers.

    ``max_packet_size`` caps the announced payload length; 0 disables the
    check, and ``None`` uses the current configuration's value.
    """

    def __init__(self, max_packet_size: Optional[int] = None):
        self.max_packet_size = max_packet_size

    def head_len(self) -> int:
        """Length of a frame header in bytes."""
        return HEAD_LEN

    def _limit(self) -> int:
        if self.max_packet_size is None:
            return get_config().max_packet_size
        return self.max_packet_size

    def pack(self, msg: Message) -> bytes:
        """Frame ``msg``: its declared length, its id, then its data."""
        try:
            header = _HEADER.pack(msg.data_len, msg.msg_id)
        except struct.error as exc:
            raise PacketError(str(exc)) from exc
        return header + bytes(msg.data)

    def unpack(self, binary_data: bytes) -> Message:
        """Read a header; the returned message has its length and id but no data."""
        if len(binary_data) < HEAD_LEN:
            raise PacketError("unexpected EOF while reading message head")
        data_len, msg_id = _HEADER.unpack_from(binary_data)
        limit = self._limit()
        if limit > 0 and data_len > limit:
            raise PacketError("too large msg data received")
        return Message(msg_id=msg_id, data=b"", data_len=data_len)