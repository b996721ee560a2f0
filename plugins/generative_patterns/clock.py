"""
Animation Clock & Frame Scheduling

AnimationClock measures elapsed wall-clock time (never a fixed per-frame
delta) and keeps it continuous across pause/resume by shifting the
recorded start forward by the paused duration.

FrameTicker is the explicit scheduler: a daemon thread that invokes one
frame callback at a target rate. Pausing stops scheduling entirely,
cancel() ends the thread. A slow callback simply delays the next tick;
there is no frame queue.
"""

import threading
import time

from .params import finite


class AnimationClock:
    """Monotonic elapsed-time source with pause/resume continuity.

    Args:
        time_source: zero-argument callable returning seconds
                     (time.perf_counter by default; tests inject a fake)
    """

    def __init__(self, time_source=time.perf_counter):
        self._now = time_source
        self._start = self._now()
        self._paused_at = None

    @property
    def paused(self):
        return self._paused_at is not None

    def raw_elapsed(self):
        """Seconds since start, excluding paused time."""
        now = self._paused_at if self._paused_at is not None else self._now()
        return now - self._start

    def elapsed(self, speed=1.0):
        """Animation time: raw elapsed seconds scaled by ``speed``."""
        return self.raw_elapsed() * finite(speed, 1.0)

    def pause(self):
        if self._paused_at is None:
            self._paused_at = self._now()

    def resume(self):
        if self._paused_at is not None:
            self._start += self._now() - self._paused_at
            self._paused_at = None

    def restart(self):
        """Zero the clock (keeps the paused state)."""
        self._start = self._now()
        if self._paused_at is not None:
            self._paused_at = self._start


class FrameTicker(threading.Thread):
    """Background thread calling ``callback()`` at ``fps`` frames per second.

    Errors raised by the callback are reported and the ticker keeps
    running; the callback owns its own error containment.
    """

    def __init__(self, callback, fps=30, name="pattern-ticker"):
        super().__init__(daemon=True, name=name)
        self._callback = callback
        self._target_fps = max(1.0, finite(fps, 30))
        self._active = threading.Event()     # cleared while paused
        self._active.set()
        self._cancelled = threading.Event()
        self.frames = 0

    @property
    def target_fps(self):
        return self._target_fps

    @property
    def paused(self):
        return not self._active.is_set()

    @property
    def cancelled(self):
        return self._cancelled.is_set()

    def run(self):
        print(f"[GP] Frame ticker started ({self._target_fps:g} fps)")
        interval = 1.0 / self._target_fps
        while not self._cancelled.is_set():
            # Paused: block here until resume() or cancel(), nothing scheduled
            self._active.wait()
            if self._cancelled.is_set():
                break

            start = time.perf_counter()
            try:
                self._callback()
                self.frames += 1
            except Exception as e:
                print(f"[GP] Frame ticker error: {e}")

            sleep_time = interval - (time.perf_counter() - start)
            if sleep_time > 0:
                self._cancelled.wait(sleep_time)
        print("[GP] Frame ticker stopped")

    def pause(self):
        self._active.clear()

    def resume(self):
        self._active.set()

    def cancel(self):
        """Cancel the pending tick and end the thread."""
        self._cancelled.set()
        self._active.set()

    def stop(self, timeout=1.0):
        """Cancel and wait for the thread to exit."""
        self.cancel()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout)
