# /classroom-ai-backend/app/services/clock.py

import time
import threading


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class TimeIdGenerator:
    """
    Hands out ids derived from the creation time (epoch milliseconds as a
    decimal string). Within one process the values are strictly increasing:
    a second call in the same millisecond gets the previous value plus one.
    """

    def __init__(self, clock=now_ms):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_value(self) -> int:
        with self._lock:
            value = max(self._clock(), self._last + 1)
            self._last = value
            return value

    def next_id(self) -> str:
        return str(self.next_value())


# Shared by sessions and messages so two ids never collide inside a process.
id_generator = TimeIdGenerator()
