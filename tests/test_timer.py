import datetime
import time

from zinx.delayfunc import DelayFunc
from zinx.timer import new_timer_after, new_timer_at, unix_milli


def test_new_timer_at_truncates_to_milliseconds():
    timer = new_timer_at(DelayFunc(print), 1_500_000_123)
    assert timer.unixts == 1500


def test_new_timer_at_keeps_delay_func():
    df = DelayFunc(print, ["x"])
    assert new_timer_at(df, 2_000_000).delay_func is df


def test_unix_milli_tracks_wall_clock():
    assert abs(unix_milli() - time.time() * 1000) < 1000


def test_new_timer_after_accepts_timedelta():
    before = unix_milli()
    timer = new_timer_after(DelayFunc(print), datetime.timedelta(seconds=2))
    after = unix_milli()
    assert before + 2000 - 1 <= timer.unixts <= after + 2000


def test_new_timer_after_accepts_seconds():
    before = unix_milli()
    timer = new_timer_after(DelayFunc(print), 0.5)
    assert before + 499 <= timer.unixts <= unix_milli() + 500


def test_timers_fire_after_their_delay():
    fired = {}

    def my_func(number, delay_ms):
        fired[number] = time.monotonic()

    start = time.monotonic()
    threads = [
        new_timer_after(DelayFunc(my_func, [i, 20 * i]), 0.02 * i).run()
        for i in range(5)
    ]
    for thread in threads:
        thread.join(5)
    assert sorted(fired) == [0, 1, 2, 3, 4]
    for i, when in fired.items():
        assert when - start >= 0.02 * i - 0.005


def test_past_timer_fires_at_once():
    seen = []
    timer = new_timer_at(DelayFunc(seen.append, ["late"]), time.time_ns() - 10**9)
    start = time.monotonic()
    timer.run().join(5)
    assert seen == ["late"]
    assert time.monotonic() - start < 0.5