"""Cancellable, timer-based debounce."""

import threading
from typing import Any, Callable, Optional


class Debouncer:
    """
    Delay a call until triggers have paused for ``delay`` seconds.

    Every ``trigger`` cancels the pending call and re-arms the timer with
    the latest arguments, so only the last call of a burst runs.
    """

    def __init__(self, delay: float, func: Callable[..., Any]):
        self.delay = delay
        self.func = func
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._call = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._call is not None

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._call = (args, kwargs)
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A newer trigger or a flush already superseded this timer
            if generation != self._generation or self._call is None:
                return
            args, kwargs = self._take()
        self.func(*args, **kwargs)

    def _take(self):
        call, self._call, self._timer = self._call, None, None
        return call

    def flush(self) -> bool:
        """Run the pending call now. Returns False when nothing was pending."""
        with self._lock:
            if self._call is None:
                return False
            self._timer.cancel()
            args, kwargs = self._take()
        self.func(*args, **kwargs)
        return True

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._call = None
            self._timer = None
