import threading
from datetime import datetime, timezone
from typing import Callable, Optional


class IdFactory:
    """Issues ``<kind>-<epoch millis>`` ids, bumping the stamp on collisions."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._last = 0
        self._lock = threading.Lock()

    def new(self, kind: str) -> str:
        with self._lock:
            stamp = int(self._clock().timestamp() * 1000)
            if stamp <= self._last:
                stamp = self._last + 1
            self._last = stamp
        return f"{kind}-{stamp}"
