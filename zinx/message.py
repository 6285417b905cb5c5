"""A routed message: id, payload and declared payload length."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class Message:
    """One message on the wire.

    ``data_len`` defaults to ``len(data)``; after a header has been unpacked
    it holds the announced length while ``data`` is still empty.
    """

    msg_id: int = 0
    data: bytes = b""
    data_len: Optional[int] = None

    def __post_init__(self) -> None:
        if self.data_len is None:
            self.data_len = len(self.data)