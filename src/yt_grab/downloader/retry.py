"""Retry loop shared by every download mode."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from yt_grab.downloader.commands import HARDENED_PROFILE
from yt_grab.downloader.models import RetryState

logger = logging.getLogger(__name__)

T = TypeVar("T")

Backoff = Callable[[int], float]
Sleep = Callable[[float], Awaitable[None]]

DEFAULT_MAX_ATTEMPTS = 3
FIXED_BACKOFF_SECONDS = 2.0
LINEAR_BACKOFF_STEP_SECONDS = 5.0


def fixed_backoff(seconds: float) -> Backoff:
    """Same delay after every failed attempt."""

    def _delay(_attempts_made: int) -> float:
        return seconds

    return _delay


def linear_backoff(step_seconds: float) -> Backoff:
    """Delay grows by ``step_seconds`` with each failed attempt."""

    def _delay(attempts_made: int) -> float:
        return step_seconds * attempts_made

    return _delay


def backoff_for_profile(profile: str) -> Backoff:
    if profile == HARDENED_PROFILE:
        return linear_backoff(LINEAR_BACKOFF_STEP_SECONDS)
    return fixed_backoff(FIXED_BACKOFF_SECONDS)


def is_transient(error: BaseException) -> bool:
    """Errors carrying ``transient=False`` are final; everything else retries."""

    return bool(getattr(error, "transient", False))


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """How often and how patiently to retry a failing operation."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff: Backoff = field(default_factory=lambda: fixed_backoff(FIXED_BACKOFF_SECONDS))
    retryable: Callable[[BaseException], bool] = is_transient


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Await ``operation(attempt)`` until it returns or the policy gives up.

    ``attempt`` is 1-based. The last error is re-raised unchanged once the
    attempt budget is spent or the error is not retryable.
    """

    if policy.max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {policy.max_attempts}")

    state = RetryState(max_attempts=policy.max_attempts, backoff=policy.backoff)
    while True:
        try:
            return await operation(state.attempts_made + 1)
        except Exception as error:
            state.attempts_made += 1
            if state.exhausted or not policy.retryable(error):
                raise
            delay = state.next_delay()
            logger.info(
                "Retry attempt %d/%d in %.1fs...",
                state.attempts_made,
                state.max_attempts,
                delay,
            )
            await sleep(delay)
