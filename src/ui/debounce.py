"""
Debounced Task

A trailing-edge debounce modelled as a cancellable scheduled task:

- schedule() cancels whatever is pending and starts a new countdown
- only the last scheduled call runs, delay seconds after it was scheduled
- cancel() drops the pending call; used when the view goes away
- flush() runs the pending call right away instead of waiting

A generation counter guards the window where a timer has already fired
but the call was cancelled or superseded in the meantime.
"""

import functools
import threading
from typing import Any, Callable, Optional


TimerFactory = Callable[[float, Callable[[], None]], Any]


def _thread_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class DebouncedTask:
    """Runs the most recently scheduled call after a quiet period."""

    def __init__(self, delay: float, timer_factory: Optional[TimerFactory] = None):
        self._delay = delay
        self._timer_factory = timer_factory or _thread_timer
        self._lock = threading.Lock()
        self._timer = None
        self._call: Optional[Callable[[], Any]] = None
        self._generation = 0

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self, func: Callable[..., Any], *args, **kwargs) -> None:
        """Replace any pending call with func(*args, **kwargs)."""
        with self._lock:
            self._cancel_locked()
            generation = self._generation

            def fire() -> None:
                with self._lock:
                    if generation != self._generation:
                        return
                    self._timer = None
                    self._call = None
                func(*args, **kwargs)

            self._call = functools.partial(func, *args, **kwargs)
            self._timer = self._timer_factory(self._delay, fire)
            self._timer.start()

    def flush(self) -> bool:
        """Run the pending call now, on the caller's thread. False if none was pending."""
        with self._lock:
            call = self._call
            self._cancel_locked()
        if call is None:
            return False
        call()
        return True

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        self._generation += 1
        self._call = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
