"""Session lifetime timer. A blunt logout, not request cancellation."""

from __future__ import annotations

import time
from collections.abc import Callable

DEFAULT_TIMEOUT_MINUTES = 10


class SessionTimer:
    def __init__(
        self,
        timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout_seconds = timeout_minutes * 60
        self._clock = clock
        self.started_at = clock()

    def remaining(self) -> float:
        return max(0.0, self.timeout_seconds - (self._clock() - self.started_at))

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def restart(self) -> None:
        self.started_at = self._clock()
