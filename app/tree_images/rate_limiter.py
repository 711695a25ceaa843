import threading
import time
from collections import deque
from collections.abc import Callable

from app.logging.logger import Log
from app.tree_images.base import BaseImageProvider
from app.tree_images.exceptions import RateLimitError

_HOUR_SECONDS = 3600.0


class RateLimitedImageProvider(BaseImageProvider):
    """Feeds a provider one call at a time within an hourly quota.

    Calls are serialized behind a single lock, spaced by at least
    min_interval_seconds, and refused locally with RateLimitError once
    max_per_hour calls fall inside the trailing hour.
    """

    def __init__(
        self,
        inner: BaseImageProvider,
        *,
        max_per_hour: int,
        min_interval_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._inner = inner
        self._max_per_hour = max_per_hour
        self._min_interval = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._calls: deque[float] = deque()

    def search(self, tree_name: str) -> str:
        with self._lock:
            now = self._clock()
            while self._calls and now - self._calls[0] >= _HOUR_SECONDS:
                self._calls.popleft()
            if len(self._calls) >= self._max_per_hour:
                raise RateLimitError(
                    f"Hourly quota of {self._max_per_hour} provider calls exhausted"
                )
            if self._calls:
                wait = self._min_interval - (now - self._calls[-1])
                if wait > 0:
                    Log.debug(f"Waiting {wait:.2f}s before next provider call")
                    self._sleep(wait)
                    now = self._clock()
            self._calls.append(now)
            return self._inner.search(tree_name)
