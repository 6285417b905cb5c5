"""Scheduler driving an hour/minute/second timing wheel."""

from __future__ import annotations

import queue
import threading
import time

from zinx import stdlog
from zinx.delayfunc import DelayFunc
from zinx.timer import (
    HOUR_INTERVAL,
    HOUR_NAME,
    HOUR_SCALES,
    MINUTE_INTERVAL,
    MINUTE_NAME,
    MINUTE_SCALES,
    SECOND_INTERVAL,
    SECOND_NAME,
    SECOND_SCALES,
    TIMERS_MAX_CAP,
    Duration,
    new_timer_after,
    new_timer_at,
    unix_milli,
)
from zinx.timewheel import TimeWheel

MAX_CHAN_BUFF = 2048
MAX_TIME_DELAY = 100  # ms


class TimerScheduler:
    """Creates timers and moves the due ones to a trigger queue.

    The wheels start turning on construction; :meth:`start` begins polling
    for due timers. Call :meth:`stop` to end all threads.
    """

    def __init__(self):
        second = TimeWheel(SECOND_NAME, SECOND_INTERVAL, SECOND_SCALES, TIMERS_MAX_CAP)
        minute = TimeWheel(MINUTE_NAME, MINUTE_INTERVAL, MINUTE_SCALES, TIMERS_MAX_CAP)
        hour = TimeWheel(HOUR_NAME, HOUR_INTERVAL, HOUR_SCALES, TIMERS_MAX_CAP)
        hour.add_time_wheel(minute)
        minute.add_time_wheel(second)
        self._wheels = (second, minute, hour)
        for wheel in self._wheels:
            wheel.run()
        self._tw = hour
        self.id_gen = 0
        self._triggers: queue.Queue = queue.Queue(maxsize=MAX_CHAN_BUFF)
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    def __enter__(self) -> "TimerScheduler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def create_timer_at(self, delay_func: DelayFunc, unix_nano: int) -> int:
        """Schedule ``delay_func`` at ``unix_nano``; return the new timer id."""
        with self._lock:
            self.id_gen += 1
            self._tw.add_timer(self.id_gen, new_timer_at(delay_func, unix_nano))
            return self.id_gen

    def create_timer_after(self, delay_func: DelayFunc, duration: Duration) -> int:
        """Schedule ``delay_func`` ``duration`` from now; return the new timer id."""
        with self._lock:
            self.id_gen += 1
            self._tw.add_timer(self.id_gen, new_timer_after(delay_func, duration))
            return self.id_gen

    def cancel_timer(self, tid: int) -> None:
        """Remove the timer with ``tid`` from every wheel."""
        with self._lock:
            wheel = self._tw
            while wheel is not None:
                wheel.remove_timer(tid)
                wheel = wheel.next_wheel

    def trigger_queue(self) -> queue.Queue:
        """Queue of the delay functions whose timers have fired."""
        return self._triggers

    def _poll(self) -> None:
        while not self._stopped.is_set():
            now = unix_milli()
            due = self._tw.get_timer_within(MAX_TIME_DELAY / 1000)
            for timer in due.values():
                if abs(now - timer.unixts) > MAX_TIME_DELAY:
                    stdlog.error("want call at", timer.unixts, "; real call at", now,
                                 "; delay", now - timer.unixts)
                self._triggers.put(timer.delay_func)
            self._stopped.wait(MAX_TIME_DELAY / 2 / 1000)

    def start(self) -> None:
        """Poll for due timers in a daemon thread."""
        threading.Thread(target=self._poll, name="zinx-timer-scheduler", daemon=True).start()

    def stop(self) -> None:
        """Stop polling and stop the wheels."""
        self._stopped.set()
        for wheel in self._wheels:
            wheel.stop()


def _dispatch(scheduler: TimerScheduler) -> None:
    triggers = scheduler.trigger_queue()
    while not scheduler.stopped:
        try:
            delay_func = triggers.get(timeout=0.1)
        except queue.Empty:
            continue
        threading.Thread(target=delay_func.call, daemon=True).start()


def new_auto_exec_timer_scheduler() -> TimerScheduler:
    """A started scheduler that calls each fired function in its own thread."""
    scheduler = TimerScheduler()
    scheduler.start()
    threading.Thread(target=_dispatch, args=(scheduler,), name="zinx-timer-dispatch",
                     daemon=True).start()
    time.sleep(0)
    return scheduler