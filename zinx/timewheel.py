"""Hierarchical timing wheel."""

from __future__ import annotations

import threading
from typing import Optional

from zinx import stdlog
from zinx.timer import Duration, Timer, _duration_ns, unix_milli


class TimeWheel:
    """A ring of ``scales`` slots, each ``interval`` milliseconds wide.

    Timers closer than one slot are handed to the next, finer wheel; the
    finest wheel keeps them in its current slot until they are taken out.
    """

    def __init__(self, name: str, interval: int, scales: int, max_cap: int):
        self.name = name
        self.interval = interval
        self.scales = scales
        self.max_cap = max_cap
        self.cur_index = 0
        self.timer_queue: list[dict[int, Timer]] = [{} for _ in range(scales)]
        self.next_wheel: Optional[TimeWheel] = None
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        stdlog.info("Init timerWhell name =", self.name, "is Done!")

    def _add_timer(self, tid: int, timer: Timer, force_next: bool) -> None:
        delay = timer.unixts - unix_milli()
        if delay >= self.interval:
            steps = delay // self.interval
            self.timer_queue[(self.cur_index + steps) % self.scales][tid] = timer
            return
        if self.next_wheel is None:
            if force_next:
                # A slot that has turned past would never be looked at again.
                self.timer_queue[(self.cur_index + 1) % self.scales][tid] = timer
            else:
                self.timer_queue[self.cur_index][tid] = timer
            return
        self.next_wheel.add_timer(tid, timer)

    def add_timer(self, tid: int, timer: Timer) -> None:
        """Place ``timer`` under id ``tid`` in this wheel or a finer one."""
        with self._lock:
            self._add_timer(tid, timer, False)

    def remove_timer(self, tid: int) -> None:
        """Drop the timer with ``tid`` from every slot of this wheel."""
        with self._lock:
            for slot in self.timer_queue:
                slot.pop(tid, None)

    def add_time_wheel(self, next_wheel: "TimeWheel") -> None:
        """Set the finer wheel that receives timers closer than one slot."""
        self.next_wheel = next_wheel
        stdlog.info(f"Add timerWhell[{self.name}]'s next [{next_wheel.name}] is succ!")

    def tick(self) -> None:
        """Turn the wheel one slot, re-placing the timers of the current and next slots."""
        with self._lock:
            current = self.timer_queue[self.cur_index]
            self.timer_queue[self.cur_index] = {}
            for tid, timer in current.items():
                self._add_timer(tid, timer, True)

            following = (self.cur_index + 1) % self.scales
            upcoming = self.timer_queue[following]
            self.timer_queue[following] = {}
            for tid, timer in upcoming.items():
                self._add_timer(tid, timer, True)

            self.cur_index = following

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval / 1000):
            self.tick()

    def run(self) -> None:
        """Turn the wheel once per interval in a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop_event,),
                                        name=f"zinx-timewheel-{self.name}", daemon=True)
        self._thread.start()
        stdlog.info("timerwheel name =", self.name, "is running...")

    def stop(self) -> None:
        """Stop turning the wheel."""
        self._stop_event.set()

    def get_timer_within(self, duration: Duration) -> dict[int, Timer]:
        """Take out the finest wheel's current timers due within ``duration``."""
        leaf = self
        while leaf.next_wheel is not None:
            leaf = leaf.next_wheel
        window_ms = _duration_ns(duration) // 1_000_000
        with leaf._lock:
            now = unix_milli()
            slot = leaf.timer_queue[leaf.cur_index]
            due = {tid: timer for tid, timer in slot.items() if timer.unixts - now < window_ms}
            for tid in due:
                del slot[tid]
        return due