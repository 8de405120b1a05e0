"""Per-client request limiter over a rolling window."""

from __future__ import annotations

import math
import time
from collections import deque
from typing import Callable, Mapping

from .errors import RateLimitExceeded

MAX_REQUESTS = 20
WINDOW_SECONDS = 60


def client_identifier(
    headers: Mapping[str, str] | None = None,
    user_id: int | str | None = None,
    remote_addr: str | None = None,
) -> str:
    """Logged-in users are keyed by id, everyone else by the first forwarded address."""
    if user_id:
        return f"user_{user_id}"
    headers = headers or {}
    lowered = {k.lower(): v for k, v in headers.items()}
    for name in ("cf-connecting-ip", "x-forwarded-for", "x-real-ip"):
        value = (lowered.get(name) or "").split(",")[0].strip()
        if value:
            return f"ip_{value}"
    return f"ip_{remote_addr or 'unknown'}"


class RateLimiter:
    def __init__(
        self,
        max_requests: int = MAX_REQUESTS,
        window: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}

    def _prune(self, now: float) -> None:
        for identity in list(self._hits):
            hits = self._hits[identity]
            while hits and now - hits[0] >= self.window:
                hits.popleft()
            if not hits:
                del self._hits[identity]

    def _window(self, identity: str, now: float) -> deque[float]:
        self._prune(now)
        return self._hits.get(identity, deque())

    def check(self, identity: str) -> None:
        now = self._clock()
        hits = self._window(identity, now)
        if len(hits) >= self.max_requests:
            retry_after = max(1, math.ceil(self.window - (now - hits[0])))
            raise RateLimitExceeded(retry_after)
        hits.append(now)
        self._hits[identity] = hits

    def remaining(self, identity: str) -> int:
        hits = self._window(identity, self._clock())
        return max(0, self.max_requests - len(hits))

    def __len__(self) -> int:
        return len(self._hits)
