"""
================================================================================
Retry Executor
================================================================================

Bounded retry with constant backoff for async UI actions.

Features:
    - Sequential attempts, never concurrent
    - Fixed delay between failed attempts (no jitter, no growth)
    - Last failure surfaced with the attempt count
    - Cancellation is never retried

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar

import allure
from loguru import logger


T = TypeVar("T")


class RetryError(Exception):
    """Base class for retry executor errors."""
    pass


class ActionFailed(RetryError):
    """Raised (internally) when a single attempt of an action fails."""

    def __init__(self, attempt: int, cause: BaseException):
        self.attempt = attempt
        self.cause = cause
        super().__init__(f"Attempt {attempt} failed: {cause}")


class RetriesExhausted(RetryError):
    """Raised when every attempt of an action has failed."""

    def __init__(self, attempts: int, last_failure: ActionFailed):
        self.attempts = attempts
        self.last_failure = last_failure
        super().__init__(
            f"All {attempts} attempts failed. Last error: {last_failure.cause}"
        )

    @property
    def cause(self) -> BaseException:
        """Original exception raised by the final attempt."""
        return self.last_failure.cause


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry settings for a single call.

    Attributes:
        max_attempts: Total number of attempts (>= 1)
        delay_ms: Constant pause between failed attempts in milliseconds
    """
    max_attempts: int = 3
    delay_ms: int = 1000

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise ValueError(f"max_attempts must be an integer, got {self.max_attempts!r}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if isinstance(self.delay_ms, bool) or not isinstance(self.delay_ms, int):
            raise ValueError(f"delay_ms must be an integer, got {self.delay_ms!r}")
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000


class RetryExecutor:
    """
    Runs an async action until it succeeds or the policy runs out.

    Usage:
        executor = RetryExecutor()
        title = await executor.execute(
            lambda: page.title(),
            RetryPolicy(max_attempts=3, delay_ms=500),
        )

    A hanging attempt is not interrupted; wrap the call in
    ``asyncio.wait_for`` if a deadline is needed.
    """

    def __init__(self, log: Optional[Any] = None):
        """
        Initialize executor.

        Args:
            log: Loguru logger to report progress on (bound default if None)
        """
        self.log = log or logger.bind(component="retry")

    async def execute(
        self,
        action: Callable[[], Awaitable[T]],
        policy: Optional[RetryPolicy] = None,
    ) -> T:
        """
        Execute action with retry.

        Args:
            action: Zero-argument coroutine function
            policy: Retry policy (defaults to 3 attempts, 1000ms apart)

        Returns:
            Value produced by the first successful attempt

        Raises:
            RetriesExhausted: If all attempts fail
        """
        policy = policy or RetryPolicy()
        last_failure: Optional[ActionFailed] = None

        for attempt in range(1, policy.max_attempts + 1):
            self.log.info(f"🔄 Attempt {attempt} of {policy.max_attempts}...")
            try:
                result = await action()
            except Exception as e:
                last_failure = ActionFailed(attempt, e)
                self.log.warning(f"❌ Attempt {attempt} failed: {e}")

                if attempt < policy.max_attempts:
                    self.log.debug(f"⏳ Waiting {policy.delay_ms}ms before retry...")
                    await asyncio.sleep(policy.delay_seconds)
                continue

            self.log.info("✅ Action completed successfully")
            return result

        self.log.error(f"💥 All {policy.max_attempts} attempts failed")
        raise RetriesExhausted(policy.max_attempts, last_failure) from last_failure


async def retry_action(
    action: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay_ms: int = 1000,
    log: Optional[Any] = None,
) -> T:
    """
    Shortcut for ``RetryExecutor(log).execute(action, RetryPolicy(...))``.
    """
    with allure.step(f"Retry action (max {max_attempts} attempts, {delay_ms}ms apart)"):
        return await RetryExecutor(log).execute(
            action, RetryPolicy(max_attempts=max_attempts, delay_ms=delay_ms)
        )


def async_retry(policy: Optional[RetryPolicy] = None):
    """
    Decorator adding retry to a coroutine function.

    Args:
        policy: RetryPolicy for every call of the decorated function

    Example:
        @async_retry(RetryPolicy(max_attempts=5, delay_ms=200))
        async def open_menu(page):
            await page.get_by_role("button", name="Sapient AI").click()
    """
    policy = policy or RetryPolicy()

    def decorator(func: Callable[..., Awaitable[T]]):
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            executor = RetryExecutor(logger.bind(component="retry", action=func.__name__))
            return await executor.execute(lambda: func(*args, **kwargs), policy)

        return wrapper
    return decorator


__all__ = [
    "RetryError",
    "ActionFailed",
    "RetriesExhausted",
    "RetryPolicy",
    "RetryExecutor",
    "retry_action",
    "async_retry",
]
