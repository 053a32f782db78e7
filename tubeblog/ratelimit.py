import math
import time
import threading


class RateLimiter:
    """Per-user cooldown: one admitted call per ``window`` seconds.

    State lives in process memory, so each worker process keeps its own map.
    """

    def __init__(self, window=30, clock=time.monotonic):
        self.window = window
        self.clock = clock
        self._last = {}
        self._lock = threading.Lock()

    def try_acquire(self, user_id, now=None):
        """Return ``(True, 0)`` and start a new window, or ``(False, wait)``."""
        if now is None:
            now = self.clock()
        with self._lock:
            last = self._last.get(user_id)
            if last is not None:
                elapsed = now - last
                if elapsed < self.window:
                    return False, max(1, math.ceil(self.window - elapsed))
            self._last[user_id] = now
        return True, 0

