"""Tick timing and per-frame callback scheduling."""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional
import itertools
import time


def perf_counter_ms() -> float:
    """Monotonic time in milliseconds."""
    return time.perf_counter() * 1000.0


TimeSource = Callable[[], float]
FrameCallback = Callable[[], None]


@dataclass
class TickClock:
    """
    Decides when the next simulation tick is due.

    The host calls in once per rendered frame; a tick fires only when the
    time since the previous tick reaches the current tick interval, so the
    simulation rate is independent of the frame rate.
    """

    time_source: TimeSource = field(default=perf_counter_ms)

    # Internal state
    _tick: int = field(default=0, init=False)
    _last_tick_time: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self._last_tick_time = self.time_source()

    @property
    def tick(self) -> int:
        """Number of ticks fired since the last reset."""
        return self._tick

    def elapsed(self) -> float:
        """Milliseconds since the last tick (or baseline)."""
        return self.time_source() - self._last_tick_time

    def reset_baseline(self) -> None:
        """Restart elapsed-time measurement from now."""
        self._last_tick_time = self.time_source()

    def consume_if_due(self, interval_ms: float) -> Optional[float]:
        """
        Fire a tick if one is due.

        Returns:
            The elapsed milliseconds covered by the tick, or None if the
            interval has not been reached yet.
        """
        now = self.time_source()
        elapsed = now - self._last_tick_time
        if elapsed < interval_ms:
            return None

        self._last_tick_time = now
        self._tick += 1
        return elapsed

    def reset(self) -> None:
        """Reset clock to initial state."""
        self._tick = 0
        self._last_tick_time = self.time_source()


class FrameScheduler:
    """
    One-shot per-frame callback queue driven by the host loop.

    ``request_frame`` queues a callback for the next frame and returns a
    handle that ``cancel_frame`` accepts. ``run_frame`` is called once per
    display refresh; callbacks requested while a frame is running wait for
    the following frame.
    """

    def __init__(self) -> None:
        self._callbacks: Dict[int, FrameCallback] = {}
        self._ids = itertools.count(1)
        self._frame = 0

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._callbacks[handle] = callback
        return handle

    def cancel_frame(self, handle: Optional[int]) -> None:
        """Cancel a pending callback. Unknown or spent handles are ignored."""
        if handle is not None:
            self._callbacks.pop(handle, None)

    def run_frame(self) -> int:
        """Run all callbacks queued before this frame. Returns how many ran."""
        self._frame += 1
        ran = 0

        for handle in list(self._callbacks):
            callback = self._callbacks.pop(handle, None)
            if callback is None:
                continue  # cancelled by an earlier callback this frame
            callback()
            ran += 1
        return ran

    @property
    def pending_count(self) -> int:
        return len(self._callbacks)

    @property
    def frame(self) -> int:
        """Number of frames run so far."""
        return self._frame
