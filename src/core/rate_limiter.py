"""Sliding-window throttle for login attempts, kept in process memory."""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable, NamedTuple

from src.core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThrottlePolicy:
    """How many attempts a key may make per window."""

    max_attempts: int = 10
    window_seconds: int = 300
    sweep_interval_seconds: int = 300

    @classmethod
    def from_settings(cls) -> "ThrottlePolicy":
        settings = get_settings()
        return cls(
            max_attempts=settings.rate_limit_login_attempts,
            window_seconds=settings.rate_limit_window_seconds,
        )


class Decision(NamedTuple):
    """Outcome of one throttled attempt."""

    allowed: bool
    remaining: int
    retry_after: int


class LoginThrottle:
    """Counts attempts per key inside a sliding window.

    Each key keeps a deque of attempt times, oldest first. A key is never
    allowed more than ``max_attempts`` entries, so once it is full the
    oldest entry decides when the next attempt is allowed.

    A background task sweeps keys whose attempts have all expired.
    """

    def __init__(
        self,
        policy: ThrottlePolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.policy = policy or ThrottlePolicy()
        self._clock = clock
        self._attempts: dict[str, deque[float]] = {}
        self._lock = Lock()
        self._sweeper: asyncio.Task | None = None

    @property
    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._attempts)

    def _expire(self, attempts: deque[float], now: float) -> None:
        cutoff = now - self.policy.window_seconds
        while attempts and attempts[0] <= cutoff:
            attempts.popleft()

    async def hit(self, key: str) -> Decision:
        """Record an attempt for ``key`` unless its window is full.

        Args:
            key: Throttle key, e.g. ``login:<login_id>``.

        Returns:
            Decision: Whether the attempt is allowed, how many remain and,
            when refused, the seconds until the next one is allowed.
        """
        now = self._clock()
        with self._lock:
            attempts = self._attempts.setdefault(key, deque())
            self._expire(attempts, now)

            if len(attempts) >= self.policy.max_attempts:
                wait = attempts[0] + self.policy.window_seconds - now
                return Decision(False, 0, max(1, int(wait) + 1))

            attempts.append(now)
            return Decision(True, self.policy.max_attempts - len(attempts), 0)

    async def reset(self, key: str) -> None:
        """Forget every attempt recorded for ``key``."""
        with self._lock:
            self._attempts.pop(key, None)

    async def sweep(self) -> int:
        """Drop keys with no attempts left in the window.

        Returns:
            int: Number of keys dropped.
        """
        now = self._clock()
        with self._lock:
            for attempts in self._attempts.values():
                self._expire(attempts, now)
            idle = [key for key, attempts in self._attempts.items() if not attempts]
            for key in idle:
                del self._attempts[key]
        return len(idle)

    async def start(self) -> None:
        if self._sweeper is None:
            self._sweeper = asyncio.create_task(self._sweep_forever())
            logger.info("Login throttle sweeper started")

    async def stop(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.info("Login throttle sweeper stopped")

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.policy.sweep_interval_seconds)
            dropped = await self.sweep()
            if dropped:
                logger.debug("Login throttle dropped %d idle keys", dropped)


_throttle: LoginThrottle | None = None


def get_login_throttle() -> LoginThrottle:
    """Get or create the process-wide login throttle."""
    global _throttle
    if _throttle is None:
        _throttle = LoginThrottle(ThrottlePolicy.from_settings())
    return _throttle


async def init_login_throttle() -> LoginThrottle:
    """Start the login throttle's sweeper. Called at app startup."""
    throttle = get_login_throttle()
    await throttle.start()
    return throttle


async def shutdown_login_throttle() -> None:
    """Stop the login throttle's sweeper. Called at app shutdown."""
    if _throttle is not None:
        await _throttle.stop()
