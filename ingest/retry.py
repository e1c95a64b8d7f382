"""
Retry with exponential backoff and jitter for transient GitLab failures.
Only 429 and 5xx responses are retried; everything else propagates on first occurrence.
"""

import logging
import random
import threading
import time
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 10.0
JITTER_RATIO = 0.1


class RetryPolicy:
    """
    Bounded retry policy. Delays are in seconds; attempt 1 is the original call.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS, base_delay: float = DEFAULT_BASE_DELAY, max_delay: float = DEFAULT_MAX_DELAY):
        if int(max_attempts) < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = int(max_attempts)
        self.base_delay = float(base_delay)
        self.max_delay = float(max_delay)

    def __repr__(self):
        return f"RetryPolicy(max_attempts={self.max_attempts}, base_delay={self.base_delay}, max_delay={self.max_delay})"


def is_retryable(error: BaseException) -> bool:
    """True when the error carries a 429 or >=500 status. Timeouts and network errors carry none."""
    status = getattr(error, "status", None)
    if not isinstance(status, int):
        return False
    return status == 429 or status >= 500


def compute_backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    """Deterministic part of the delay before attempt+1."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


def backoff_with_jitter(attempt: int, base_delay: float, max_delay: float) -> float:
    delay = compute_backoff(attempt, base_delay, max_delay)
    # jitter is only ever added, up to 10% of the exponential term
    return delay + random.uniform(0, delay * JITTER_RATIO)


def retry_with_backoff(
    fn: Callable[[], T],
    policy: Optional[RetryPolicy] = None,
    correlation_id: Optional[str] = None,
    sleep: Optional[Callable[[float], Any]] = None,
    cancel: Optional[threading.Event] = None,
) -> T:
    """
    Call fn until it succeeds, a non-retryable error is raised, or policy.max_attempts is reached.
    The last error is re-raised unchanged so callers can inspect its classification.
    Once cancel is set no further attempt is made: the pending error is raised instead of sleeping.
    """
    policy = policy or RetryPolicy()
    sleep = sleep or time.sleep
    attempt = 1
    while True:
        try:
            return fn()
        except Exception as exc:
            if not is_retryable(exc) or attempt >= policy.max_attempts:
                raise
            if cancel is not None and cancel.is_set():
                raise
            delay = backoff_with_jitter(attempt, policy.base_delay, policy.max_delay)
            logger.warning(
                "Retrying request after error (attempt %d/%d, delay %.2fs, correlation_id=%s): %s",
                attempt,
                policy.max_attempts,
                delay,
                correlation_id,
                exc,
                extra={"attempt": attempt, "delay": delay, "correlation_id": correlation_id},
            )
            sleep(delay)
            if cancel is not None and cancel.is_set():
                raise
            attempt += 1


__all__ = ["RetryPolicy", "is_retryable", "compute_backoff", "backoff_with_jitter", "retry_with_backoff"]
