from __future__ import annotations

import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional, Tuple


@dataclass
class RateLimitResult:
    allowed: bool
    retry_after: float


class RateLimiter:
    """Sliding-window limiter keyed by ``(user, action)``.

    Actions listed in ``overrides`` get their own ``(max_calls, period_seconds)``.
    """

    def __init__(
        self,
        max_calls: int,
        period_seconds: float,
        overrides: Optional[Dict[str, Tuple[int, float]]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_calls = max_calls
        self.period_seconds = period_seconds
        self.overrides = dict(overrides or {})
        self._clock = clock
        self._calls: Dict[Tuple[int, str], Deque[float]] = defaultdict(deque)

    def _limits(self, action: str) -> Tuple[int, float]:
        return self.overrides.get(action, (self.max_calls, self.period_seconds))

    def allow(self, user_id: int, action: str) -> RateLimitResult:
        max_calls, period = self._limits(action)
        now = self._clock()
        window = self._calls[(user_id, action)]
        while window and now - window[0] > period:
            window.popleft()
        if len(window) >= max_calls:
            retry_after = period - (now - window[0])
            return RateLimitResult(False, max(retry_after, 0))
        window.append(now)
        return RateLimitResult(True, 0)

    def reset(self) -> None:
        self._calls.clear()


# token guesses through /start are held to a tighter window
rate_limiter = RateLimiter(max_calls=5, period_seconds=10, overrides={"reveal": (3, 60)})
