"""A client request: the connection it arrived on and its message."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from zinx.message import Message


@dataclass(frozen=True)
class Request:
    """A message together with the connection that sent it."""

    connection: Any
    msg: Message

    @property
    def data(self) -> bytes:
        """The message payload."""
        return self.msg.data

    @property
    def msg_id(self) -> int:
        """The message id."""
        return self.msg.msg_id