"""Process-wide default logger and module-level shortcuts to it."""

from __future__ import annotations

from typing import Any

from zinx.logger import BIT_DEFAULT, ZinxLogger

std_logger = ZinxLogger(None, "", BIT_DEFAULT)
# Each shortcut adds one frame between the caller and output().
std_logger.call_depth = 3


def flags() -> int:
    return std_logger.flags()


def reset_flags(flag: int) -> None:
    std_logger.reset_flags(flag)


def add_flag(flag: int) -> None:
    std_logger.add_flag(flag)


def set_prefix(prefix: str) -> None:
    std_logger.set_prefix(prefix)


def set_log_file(file_dir: str, file_name: str) -> None:
    std_logger.set_log_file(file_dir, file_name)


def close_debug() -> None:
    std_logger.close_debug()


def open_debug() -> None:
    std_logger.open_debug()


def debug(*args: Any) -> None:
    std_logger.debug(*args)


def debugf(format: str, *args: Any) -> None:
    std_logger.debugf(format, *args)


def info(*args: Any) -> None:
    std_logger.info(*args)


def infof(format: str, *args: Any) -> None:
    std_logger.infof(format, *args)


def warn(*args: Any) -> None:
    std_logger.warn(*args)


def warnf(format: str, *args: Any) -> None:
    std_logger.warnf(format, *args)


def error(*args: Any) -> None:
    std_logger.error(*args)


def errorf(format: str, *args: Any) -> None:
    std_logger.errorf(format, *args)


def fatal(*args: Any) -> None:
    std_logger.fatal(*args)


def fatalf(format: str, *args: Any) -> None:
    std_logger.fatalf(format, *args)


def panic(*args: Any) -> None:
    std_logger.panic(*args)


def panicf(format: str, *args: Any) -> None:
    std_logger.panicf(format, *args)


def stack(*args: Any) -> None:
    std_logger.stack(*args)