"""Command-line flags with automatic name de-duplication and config-file argument."""

from __future__ import annotations

import datetime
import os
import re
import sys
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

_NS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_PART = r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"([+-]?)((?:{_DURATION_PART})+)")
_LEGACY_OCTAL_RE = re.compile(r"[+-]?0[0-7]+")


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid syntax: {text!r}")


def _parse_int(text: str) -> int:
    if _LEGACY_OCTAL_RE.fullmatch(text):
        return int(text, 8)
    return int(text, 0)


def _parse_duration(text: str) -> datetime.timedelta:
    if text in ("0", "+0", "-0"):
        return datetime.timedelta(0)
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid duration {text!r}")
    total_ns = sum(
        float(number) * _NS_PER_UNIT[unit]
        for number, unit in re.findall(_DURATION_PART, match.group(2))
    )
    if match.group(1) == "-":
        total_ns = -total_ns
    return datetime.timedelta(microseconds=total_ns / 1000)


@dataclass
class _Flag:
    name: str
    usage: str
    default: Any
    convert: Callable[[str], Any]
    is_bool: bool
    value: Any


class FlagSet:
    """A set of single-dash flags; repeated names get a numeric suffix."""

    def __init__(self):
        self._lock = threading.Lock()
        self._name_counts: dict[str, int] = {}
        self._flags: dict[str, _Flag] = {}

    def flag_name(self, expect: str) -> str:
        """Reserve a name: ``expect`` the first time, then ``expect1``, ``expect2``..."""
        with self._lock:
            count = self._name_counts.get(expect)
            if count is None:
                self._name_counts[expect] = 1
                return expect
            self._name_counts[expect] = count + 1
            return f"{expect}{count}"

    def _define(self, expect: str, default: Any, usage: str,
                convert: Callable[[str], Any], is_bool: bool = False) -> str:
        name = self.flag_name(expect)
        with self._lock:
            if name in self._flags:
                raise ValueError(f"flag redefined: {name}")
            self._flags[name] = _Flag(name, usage, default, convert, is_bool, default)
        return name

    def add_bool(self, expect_name: str, default: bool, usage: str) -> str:
        return self._define(expect_name, default, usage, _parse_bool, is_bool=True)

    def add_int(self, expect_name: str, default: int, usage: str) -> str:
        return self._define(expect_name, default, usage, _parse_int)

    def add_float(self, expect_name: str, default: float, usage: str) -> str:
        return self._define(expect_name, default, usage, float)

    def add_string(self, expect_name: str, default: str, usage: str) -> str:
        return self._define(expect_name, default, usage, str)

    def add_duration(self, expect_name: str, default: datetime.timedelta, usage: str) -> str:
        return self._define(expect_name, default, usage, _parse_duration)

    def _usage(self) -> str:
        lines = ["Usage:"]
        for name in sorted(self._flags):
            flag = self._flags[name]
            entry = f"  -{name}\n    \t{flag.usage}"
            if flag.default not in ("", 0, False, None, datetime.timedelta(0)):
                entry += f" (default {flag.default!r})"
            lines.append(entry)
        return "\n".join(lines)

    def parse(self, argv: Sequence[str]) -> list[str]:
        """Set flags from ``argv`` and return the arguments left after the flags."""
        rest = list(argv)
        while rest:
            arg = rest[0]
            if len(arg) < 2 or not arg.startswith("-"):
                break
            rest.pop(0)
            if arg == "--":
                break
            body = arg[2:] if arg.startswith("--") else arg[1:]
            if not body or body[0] in "-=":
                raise ValueError(f"bad flag syntax: {arg}")
            name, has_value, value = body.partition("=")
            flag = self._flags.get(name)
            if flag is None:
                if name in ("h", "help"):
                    raise ValueError(f"help requested\n{self._usage()}")
                raise ValueError(f"flag provided but not defined: -{name}")
            if flag.is_bool and not has_value:
                flag.value = True
                continue
            if not has_value:
                if not rest:
                    raise ValueError(f"flag needs an argument: -{name}")
                value = rest.pop(0)
            try:
                flag.value = flag.convert(value)
            except ValueError as exc:
                raise ValueError(f"invalid value {value!r} for flag -{name}: {exc}") from exc
        return rest

    def __getitem__(self, name: str) -> Any:
        return self._flags[name].value


@dataclass(frozen=True)
class CommandArgs:
    """Where the program runs from and which config file it should read."""

    exe_abs_dir: str
    exe_name: str
    config_file: str


def parse_command_args(
    argv: Optional[Sequence[str]] = None,
    default_config: Optional[str] = None,
    tips: str = "config file, defaults to <exeDir>/conf/zinx.json",
) -> CommandArgs:
    """Parse ``-c <config>`` from a full command line (program name first).

    ``argv`` defaults to ``sys.argv``; a relative config path is made absolute
    against the working directory.
    """
    argv = list(sys.argv if argv is None else argv)
    exe = argv[0] if argv else ""
    cwd = os.getcwd()
    if default_config is None:
        default_config = os.path.join(cwd, "conf", "zinx.json")

    flag_set = FlagSet()
    name = flag_set.add_string("c", default_config, tips)
    flag_set.parse(argv[1:])

    config_file = flag_set[name]
    if not os.path.isabs(config_file):
        config_file = os.path.normpath(os.path.join(cwd, config_file))
    return CommandArgs(
        exe_abs_dir=cwd,
        exe_name=os.path.basename(exe.rstrip("/")) or ".",
        config_file=config_file,
    )