"""Framework-wide settings, with defaults that a JSON file can override."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from zinx import stdlog
from zinx.flags import parse_command_args

_UINT32_MAX = 2**32 - 1
_INT_MIN, _INT_MAX = -(2**63), 2**63 - 1

# JSON key, attribute name, kind of value.
_JSON_FIELDS = (
    ("Host", "host", "str"),
    ("TCPPort", "tcp_port", "int"),
    ("Name", "name", "str"),
    ("Version", "version", "str"),
    ("MaxPacketSize", "max_packet_size", "uint32"),
    ("MaxConn", "max_conn", "int"),
    ("WorkerPoolSize", "worker_pool_size", "uint32"),
    ("MaxWorkerTaskLen", "max_worker_task_len", "uint32"),
    ("MaxMsgChanLen", "max_msg_chan_len", "uint32"),
    ("ConfFilePath", "conf_file_path", "str"),
    ("LogDir", "log_dir", "str"),
    ("LogFile", "log_file", "str"),
    ("LogDebugClose", "log_debug_close", "bool"),
)
_FIELDS_BY_KEY = {key.lower(): (key, attr, kind) for key, attr, kind in _JSON_FIELDS}

_DEFAULT_TIPS = "config file, defaults to <exeDir>/conf/zinx.json"


def _default_conf_path() -> str:
    return os.path.join(os.getcwd(), "conf", "zinx.json")


def _default_log_dir() -> str:
    return os.path.join(os.getcwd(), "log")


def _checked(key: str, kind: str, value: Any) -> Any:
    if kind == "str":
        if not isinstance(value, str):
            raise ValueError(f"config field {key} must be a string, got {value!r}")
        return value
    if kind == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"config field {key} must be a boolean, got {value!r}")
        return value
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"config field {key} must be an integer, got {value!r}")
    low, high = (0, _UINT32_MAX) if kind == "uint32" else (_INT_MIN, _INT_MAX)
    if not low <= value <= high:
        raise ValueError(f"config field {key} out of range: {value}")
    return value


def path_exists(path: str) -> bool:
    """Whether ``path`` exists; errors other than "not found" propagate."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


@dataclass
class GlobalConfig:
    """Settings shared by the server, its connections and its workers."""

    tcp_server: Optional[Any] = None
    host: str = "0.0.0.0"
    tcp_port: int = 8999
    name: str = "ZinxServerApp"

    version: str = "V1.0"
    max_packet_size: int = 4096
    max_conn: int = 12000
    worker_pool_size: int = 10
    max_worker_task_len: int = 1024
    max_msg_chan_len: int = 1024

    conf_file_path: str = field(default_factory=_default_conf_path)

    log_dir: str = field(default_factory=_default_log_dir)
    log_file: str = ""
    log_debug_close: bool = False

    def reload(self) -> None:
        """Override settings from the JSON file at ``conf_file_path``, if it exists.

        Keys are matched case-insensitively; unknown keys and nulls are ignored.
        Malformed JSON or a value of the wrong type raises ``ValueError``.
        """
        try:
            if not path_exists(self.conf_file_path):
                return
        except OSError:
            return

        with open(self.conf_file_path, encoding="utf-8") as handle:
            document = json.load(handle)
        if not isinstance(document, dict):
            raise ValueError("config file must hold a JSON object")

        updates = {}
        for raw_key, value in document.items():
            spec = _FIELDS_BY_KEY.get(raw_key.lower())
            if spec is None or value is None:
                continue
            key, attr, kind = spec
            updates[attr] = _checked(key, kind, value)
        for attr, value in updates.items():
            setattr(self, attr, value)

        if self.log_file:
            stdlog.set_log_file(self.log_dir, self.log_file)
        if self.log_debug_close:
            stdlog.close_debug()


_current: Optional[GlobalConfig] = None


def load_config(argv: Optional[Sequence[str]] = None) -> GlobalConfig:
    """Build the settings from defaults, the ``-c`` flag and the config file.

    ``argv`` is a full command line, program name first; it defaults to
    ``sys.argv``. The result becomes what :func:`get_config` returns.
    """
    global _current
    args = parse_command_args(argv, _default_conf_path(), _DEFAULT_TIPS)
    config = GlobalConfig(conf_file_path=args.config_file)
    config.reload()
    _current = config
    return config


def get_config() -> GlobalConfig:
    """The settings last loaded, or ones loaded now with no command-line flags."""
    if _current is None:
        return load_config([sys.argv[0] if sys.argv else ""])
    return _current