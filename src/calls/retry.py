# src/calls/retry.py — v2
"""Rate-limit aware call wrapper for external services.

Two states: CALLING and COOLING_DOWN. A call failing with a rate-limit
error puts the shared CooldownState into COOLING_DOWN for a fixed
interval, then the same call is retried. Any other error is not retried.

Only one cooldown runs at a time: callers hitting a rate limit while a
cooldown is already in flight wait on that cooldown instead of starting
another. The state object is built once per process and injected into
every external-call site.
"""

from __future__ import annotations

import asyncio
import logging
import random
from enum import Enum
from typing import Any, Awaitable, Callable

from candidaterank.core.errors import RateLimitRetryExhausted

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

_RATE_LIMIT_MARKERS = (
    "429",
    "rate limit",
    "rate-limit",
    "ratelimit",
    "rate_limit",
    "too many requests",
    "throttl",
)


class CallState(str, Enum):
    CALLING = "calling"
    COOLING_DOWN = "cooling_down"


def classify_error(error: Exception) -> str:
    """Classify an exception into 'rate_limit', 'timeout', 'server_error' or 'unknown'."""
    status = getattr(error, "status_code", None) or getattr(error, "status", None)
    if status == 429:
        return "rate_limit"

    msg = str(error).lower()
    name = type(error).__name__.lower()

    if "ratelimit" in name or any(marker in msg for marker in _RATE_LIMIT_MARKERS):
        return "rate_limit"
    if "timeout" in name or "timeout" in msg:
        return "timeout"
    if isinstance(status, int) and 500 <= status < 600:
        return "server_error"
    if any(c in msg for c in ("500", "502", "503", "504")):
        return "server_error"
    return "unknown"


def is_rate_limited(error: Exception) -> bool:
    return classify_error(error) == "rate_limit"


class CooldownState:
    """Process-wide cooldown shared by every rate-limited call site."""

    def __init__(
        self,
        cooldown_s: float = 180.0,
        jitter_s: float = 0.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._cooldown_s = cooldown_s
        self._jitter_s = jitter_s
        self._sleep = sleep
        self._cooldown: asyncio.Future[None] | None = None
        self.cooldowns_started = 0

    @property
    def state(self) -> CallState:
        if self._cooldown is not None and not self._cooldown.done():
            return CallState.COOLING_DOWN
        return CallState.CALLING

    async def wait_if_cooling(self) -> None:
        """Block while a cooldown is in flight; return immediately otherwise."""
        cooldown = self._cooldown
        if cooldown is not None and not cooldown.done():
            await asyncio.shield(cooldown)

    async def cool_down(self) -> None:
        """Start a cooldown unless one is active, then wait for it to finish."""
        if self._cooldown is None or self._cooldown.done():
            duration = self._cooldown_s
            if self._jitter_s:
                duration += random.uniform(0, self._jitter_s)  # noqa: S311
            self.cooldowns_started += 1
            logger.warning("Rate limited; cooling down for %.1fs", duration)
            self._cooldown = asyncio.ensure_future(self._sleep(duration))
        # Shielded: a cancelled waiter must not cancel the shared cooldown.
        await asyncio.shield(self._cooldown)


class RateLimitedCaller:
    """Executes external calls through a shared CooldownState.

    Rate-limit failures are retried after the cooldown, without limit
    unless ``max_retries`` is set. Hard failures are not retried.
    """

    def __init__(
        self,
        state: CooldownState,
        max_retries: int | None = None,
    ) -> None:
        self._state = state
        self._max_retries = max_retries

    @property
    def state(self) -> CooldownState:
        return self._state

    async def execute(
        self,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        call_name: str | None = None,
        **kwargs: Any,
    ) -> Any | None:
        """Run ``fn``; return its result, or None on a hard failure."""
        name = call_name or getattr(fn, "__name__", "call")
        try:
            return await self.execute_strict(fn, *args, call_name=name, **kwargs)
        except RateLimitRetryExhausted as e:
            logger.warning("%s", e)
            return None
        except Exception as e:
            logger.warning("Call '%s' failed (%s): %s", name, classify_error(e), e)
            return None

    async def execute_strict(
        self,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        call_name: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Run ``fn``, retrying on rate limits; hard failures are re-raised.

        Raises:
            RateLimitRetryExhausted: If a retry cap is configured and reached.
        """
        name = call_name or getattr(fn, "__name__", "call")
        attempts = 0

        while True:
            await self._state.wait_if_cooling()
            try:
                return await fn(*args, **kwargs)
            except Exception as e:
                if not is_rate_limited(e):
                    raise
                attempts += 1
                if self._max_retries is not None and attempts > self._max_retries:
                    raise RateLimitRetryExhausted(name, attempts, e) from e
                logger.info("Call '%s' rate limited (attempt %d)", name, attempts)
                await self._state.cool_down()


def build_caller(settings: Any) -> RateLimitedCaller:
    """Build a caller with its own CooldownState from Settings fields."""
    state = CooldownState(
        cooldown_s=settings.rate_limit_cooldown_s,
        jitter_s=settings.rate_limit_jitter_s,
    )
    return RateLimitedCaller(state, max_retries=settings.rate_limit_max_retries)
