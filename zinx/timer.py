"""One-shot timers with millisecond precision."""

from __future__ import annotations

import datetime
import threading
import time
from dataclasses import dataclass
from typing import Union

from zinx.delayfunc import DelayFunc

HOUR_NAME = "HOUR"
HOUR_INTERVAL = 60 * 60 * 1000
HOUR_SCALES = 12

MINUTE_NAME = "MINUTE"
MINUTE_INTERVAL = 60 * 1000
MINUTE_SCALES = 60

SECOND_NAME = "SECOND"
SECOND_INTERVAL = 1000
SECOND_SCALES = 60

TIMERS_MAX_CAP = 2048

Duration = Union[datetime.timedelta, int, float]


def _duration_ns(duration: Duration) -> int:
    """Nanoseconds in ``duration``: a timedelta, or a number of seconds."""
    if isinstance(duration, datetime.timedelta):
        whole = duration.days * 86400 + duration.seconds
        return whole * 1_000_000_000 + duration.microseconds * 1000
    return int(duration * 1_000_000_000)


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // b
    return quotient if a >= 0 else -quotient


def unix_milli() -> int:
    """Milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


@dataclass
class Timer:
    """A deferred call due at ``unixts`` milliseconds since the epoch."""

    delay_func: DelayFunc
    unixts: int

    def run(self) -> threading.Thread:
        """Call the function at its due time in a daemon thread; return the thread."""

        def wait_and_call() -> None:
            now = unix_milli()
            if self.unixts > now:
                time.sleep((self.unixts - now) / 1000)
            self.delay_func.call()

        thread = threading.Thread(target=wait_and_call, daemon=True)
        thread.start()
        return thread


def new_timer_at(delay_func: DelayFunc, unix_nano: int) -> Timer:
    """A timer due at ``unix_nano`` nanoseconds since the epoch, kept in milliseconds."""
    return Timer(delay_func, _trunc_div(unix_nano, 1_000_000))


def new_timer_after(delay_func: DelayFunc, duration: Duration) -> Timer:
    """A timer due ``duration`` (timedelta or seconds) from now."""
    return new_timer_at(delay_func, time.time_ns() + _duration_ns(duration))