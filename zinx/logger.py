"""Leveled logger with a configurable line header."""

from __future__ import annotations

import datetime
import os
import sys
import threading
import traceback
from enum import IntEnum
from typing import IO, Any, Optional

LOG_MAX_BUF = 1024 * 1024

# Header flags, combined as a bit mask.
BIT_DATE = 1 << 0  # 2019/01/23
BIT_TIME = 1 << 1  # 01:23:12
BIT_MICROSECONDS = 1 << 2  # 01:23:12.111222
BIT_LONG_FILE = 1 << 3  # /home/go/src/zinx/server.py
BIT_SHORT_FILE = 1 << 4  # server.py
BIT_LEVEL = 1 << 5  # [DEBUG] ... [FATAL]
BIT_STD_FLAG = BIT_DATE | BIT_TIME
BIT_DEFAULT = BIT_LEVEL | BIT_SHORT_FILE | BIT_STD_FLAG


class Level(IntEnum):
    """Severity of a log line."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    PANIC = 4
    FATAL = 5

    @property
    def label(self) -> str:
        """The tag written in the header, e.g. ``[DEBUG]``."""
        return f"[{self.name}]"


class LogPanic(RuntimeError):
    """Raised by the panic methods after the message has been written."""


def _sprint(args: tuple) -> str:
    """Join operands, adding a space only between two non-string operands."""
    parts: list[str] = []
    prev_is_str = True
    for position, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if position and not is_str and not prev_is_str:
            parts.append(" ")
        parts.append(str(arg))
        prev_is_str = is_str
    return "".join(parts)


def _sprintln(args: tuple) -> str:
    return " ".join(str(arg) for arg in args) + "\n"


def _sprintf(fmt: str, args: tuple) -> str:
    return fmt % args if args else fmt


def _all_thread_stacks() -> str:
    frames = sys._current_frames()
    dumps = []
    for thread in threading.enumerate():
        frame = frames.get(thread.ident)
        if frame is None:
            continue
        dumps.append(f"thread {thread.name}:\n" + "".join(traceback.format_stack(frame)))
    return "\n".join(dumps)[:LOG_MAX_BUF]


class ZinxLogger:
    """A thread-safe logger writing one formatted line per call.

    ``out`` is a text stream; ``None`` means the current ``sys.stderr``.
    """

    def __init__(self, out: Optional[IO[str]] = None, prefix: str = "", flag: int = BIT_DEFAULT):
        self._lock = threading.Lock()
        self._out = out
        self._prefix = prefix
        self._flag = flag
        self._file: Optional[IO[str]] = None
        self._debug_closed = False
        # Frames between output() and the code that asked for the log line.
        self.call_depth = 2

    def __enter__(self) -> "ZinxLogger":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def debug_closed(self) -> bool:
        """Whether debug lines are being dropped."""
        return self._debug_closed

    def _stream(self) -> IO[str]:
        return self._out if self._out is not None else sys.stderr

    def _format_header(self, now: datetime.datetime, file: str, line: int, level: int) -> str:
        flag = self._flag
        parts: list[str] = []
        if self._prefix:
            parts.append(f"<{self._prefix}>")

        if flag & (BIT_DATE | BIT_TIME | BIT_MICROSECONDS):
            if flag & BIT_DATE:
                parts.append(f"{now.year:04d}/{now.month:02d}/{now.day:02d} ")
            if flag & (BIT_TIME | BIT_MICROSECONDS):
                parts.append(f"{now.hour:02d}:{now.minute:02d}:{now.second:02d}")
                if flag & BIT_MICROSECONDS:
                    parts.append(f".{now.microsecond:06d}")
                parts.append(" ")
            if flag & BIT_LEVEL:
                parts.append(Level(level).label)
            if flag & (BIT_SHORT_FILE | BIT_LONG_FILE):
                if flag & BIT_SHORT_FILE:
                    slash = file.rfind("/")
                    if slash > 0:
                        file = file[slash + 1:]
                parts.append(f"{file}:{line}: ")
        return "".join(parts)

    def output(self, level: int, s: str) -> None:
        """Write ``s`` at ``level`` with the configured header."""
        now = datetime.datetime.now()
        file, line = "", 0
        if self._flag & (BIT_SHORT_FILE | BIT_LONG_FILE):
            try:
                frame = sys._getframe(self.call_depth)
            except ValueError:
                file, line = "unknown-file", 0
            else:
                file, line = frame.f_code.co_filename, frame.f_lineno
                if os.sep != "/":
                    file = file.replace(os.sep, "/")

        with self._lock:
            text = self._format_header(now, file, line, level) + s
            if s and not s.endswith("\n"):
                text += "\n"
            stream = self._stream()
            stream.write(text)
            flush = getattr(stream, "flush", None)
            if flush is not None:
                flush()

    def debug(self, *args: Any) -> None:
        if self._debug_closed:
            return
        self.output(Level.DEBUG, _sprintln(args))

    def debugf(self, format: str, *args: Any) -> None:
        if self._debug_closed:
            return
        self.output(Level.DEBUG, _sprintf(format, args))

    def info(self, *args: Any) -> None:
        self.output(Level.INFO, _sprintln(args))

    def infof(self, format: str, *args: Any) -> None:
        self.output(Level.INFO, _sprintf(format, args))

    def warn(self, *args: Any) -> None:
        self.output(Level.WARN, _sprintln(args))

    def warnf(self, format: str, *args: Any) -> None:
        self.output(Level.WARN, _sprintf(format, args))

    def error(self, *args: Any) -> None:
        self.output(Level.ERROR, _sprintln(args))

    def errorf(self, format: str, *args: Any) -> None:
        self.output(Level.ERROR, _sprintf(format, args))

    def fatal(self, *args: Any) -> None:
        """Log at FATAL level and exit the process with status 1."""
        self.output(Level.FATAL, _sprintln(args))
        raise SystemExit(1)

    def fatalf(self, format: str, *args: Any) -> None:
        """Log at FATAL level and exit the process with status 1."""
        self.output(Level.FATAL, _sprintf(format, args))
        raise SystemExit(1)

    def panic(self, *args: Any) -> None:
        """Log at PANIC level and raise :class:`LogPanic`."""
        s = _sprintln(args)
        self.output(Level.PANIC, s)
        raise LogPanic(s)

    def panicf(self, format: str, *args: Any) -> None:
        """Log at PANIC level and raise :class:`LogPanic`."""
        s = _sprintf(format, args)
        self.output(Level.PANIC, s)
        raise LogPanic(s)

    def stack(self, *args: Any) -> None:
        """Log the message followed by the stacks of all threads, at ERROR level."""
        s = _sprint(args) + "\n" + _all_thread_stacks() + "\n"
        self.output(Level.ERROR, s)

    def flags(self) -> int:
        with self._lock:
            return self._flag

    def reset_flags(self, flag: int) -> None:
        with self._lock:
            self._flag = flag

    def add_flag(self, flag: int) -> None:
        with self._lock:
            self._flag |= flag

    def set_prefix(self, prefix: str) -> None:
        with self._lock:
            self._prefix = prefix

    def set_log_file(self, file_dir: str, file_name: str) -> None:
        """Append log lines to ``file_dir/file_name``, creating the directory."""
        try:
            os.makedirs(file_dir, exist_ok=True)
        except OSError:
            pass
        handle = open(f"{file_dir}/{file_name}", "a", encoding="utf-8")
        with self._lock:
            self._close_file()
            self._file = handle
            self._out = handle

    def _close_file(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._out = None

    def close(self) -> None:
        """Close the bound log file, if any, and write to stderr again."""
        with self._lock:
            self._close_file()

    def close_debug(self) -> None:
        self._debug_closed = True

    def open_debug(self) -> None:
        self._debug_closed = False