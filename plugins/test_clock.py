#!/usr/bin/env python3
"""
Tests for the animation clock and frame ticker.

Verifies:
1. Elapsed time follows the time source and scales with speed
2. Pause/resume shifts the timeline by exactly the paused duration
3. Restart zeroes the clock
4. FrameTicker ticks, pauses without scheduling, survives callback errors, cancels
"""

import threading
import time

import numpy as np

from generative_patterns.clock import AnimationClock, FrameTicker


class FakeTime:
    """Manually advanced time source."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


def test_elapsed_tracks_time_source():
    fake = FakeTime()
    clock = AnimationClock(fake)
    assert clock.elapsed() == 0.0
    fake.now += 2.5
    assert clock.elapsed() == 2.5
    assert clock.elapsed(speed=2.0) == 5.0
    assert clock.elapsed(speed=float("nan")) == 2.5


def test_pause_resume_shift():
    """The post-resume sequence equals the uninterrupted one shifted by the pause."""
    print("Testing pause/resume continuity...")
    delta = 3.25
    fake_a = FakeTime()
    fake_b = FakeTime()
    paused_clock = AnimationClock(fake_a)
    steady_clock = AnimationClock(fake_b)

    fake_a.now += 5.0
    fake_b.now += 5.0
    assert paused_clock.elapsed() == steady_clock.elapsed()

    paused_clock.pause()
    assert paused_clock.paused
    fake_a.now += delta
    assert paused_clock.elapsed() == 5.0, "Elapsed time freezes while paused"
    paused_clock.resume()
    assert not paused_clock.paused

    for step in np.linspace(0.0, 4.0, 9):
        observed = paused_clock.elapsed()
        expected = steady_clock.elapsed()
        assert np.isclose(observed, expected, atol=1e-9), (step, observed, expected)
        fake_a.now += 0.5
        fake_b.now += 0.5
    print("  ✓ shifted by exactly the paused duration")


def test_double_pause_and_resume_are_noops():
    fake = FakeTime()
    clock = AnimationClock(fake)
    fake.now += 1.0
    clock.pause()
    fake.now += 1.0
    clock.pause()             # must not move the pause point
    fake.now += 1.0
    clock.resume()
    clock.resume()            # must not shift again
    assert np.isclose(clock.elapsed(), 1.0)


def test_restart():
    fake = FakeTime()
    clock = AnimationClock(fake)
    fake.now += 10.0
    clock.restart()
    assert clock.elapsed() == 0.0
    fake.now += 1.0
    assert clock.elapsed() == 1.0

    clock.pause()
    clock.restart()
    assert clock.paused and clock.elapsed() == 0.0
    fake.now += 4.0
    assert clock.elapsed() == 0.0


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_ticker_runs_and_stops():
    print("Testing FrameTicker...")
    calls = []
    ticker = FrameTicker(lambda: calls.append(1), fps=200)
    assert ticker.daemon and ticker.target_fps == 200
    ticker.start()
    try:
        assert _wait_for(lambda: ticker.frames >= 5), "Ticker did not tick"
    finally:
        ticker.stop()
    assert not ticker.is_alive()
    assert ticker.cancelled
    print(f"  ✓ {ticker.frames} ticks before stop")


def test_ticker_pause_schedules_nothing():
    ticker = FrameTicker(lambda: None, fps=200)
    ticker.start()
    try:
        assert _wait_for(lambda: ticker.frames >= 2)
        ticker.pause()
        assert ticker.paused
        time.sleep(0.05)              # let an in-flight tick finish
        frozen = ticker.frames
        time.sleep(0.1)
        assert ticker.frames == frozen, "No ticks while paused"

        ticker.resume()
        assert _wait_for(lambda: ticker.frames > frozen)
    finally:
        ticker.stop()
    assert not ticker.is_alive()


def test_ticker_cancel_while_paused():
    ticker = FrameTicker(lambda: None, fps=50)
    ticker.pause()
    ticker.start()
    ticker.stop(timeout=1.0)
    assert not ticker.is_alive()
    assert ticker.frames == 0


def test_ticker_survives_errors():
    calls = []
    done = threading.Event()

    def flaky():
        calls.append(1)
        if len(calls) >= 4:
            done.set()
        if len(calls) % 2:
            raise RuntimeError("bad frame")

    ticker = FrameTicker(flaky, fps=200)
    ticker.start()
    try:
        assert done.wait(2.0), "Ticker stopped after a callback error"
    finally:
        ticker.stop()
    assert ticker.frames >= 2
    assert len(calls) > ticker.frames


def test_ticker_bad_fps():
    assert FrameTicker(lambda: None, fps=0).target_fps == 1.0
    assert FrameTicker(lambda: None, fps=float("nan")).target_fps == 30.0


if __name__ == "__main__":
    print("\n=== Testing Animation Clock ===\n")

    test_elapsed_tracks_time_source()
    test_pause_resume_shift()
    test_double_pause_and_resume_are_noops()
    test_restart()
    test_ticker_runs_and_stops()
    test_ticker_pause_schedules_nothing()
    test_ticker_cancel_while_paused()
    test_ticker_survives_errors()
    test_ticker_bad_fps()

    print("\n✓ All tests passed!\n")
