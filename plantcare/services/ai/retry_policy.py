"""
Advisory Retry Policy
=====================
Attempt outcomes and the loop that interprets them.

An attempt function returns one of:

* :class:`Success` carrying the value;
* :class:`RetryableFailure` with the delay before the next attempt and
  whether that attempt should run degraded;
* :class:`FatalFailure` wrapping the error to raise.

:func:`run_with_retries` drives attempts until success, a fatal outcome or
the attempt limit. Sleeping goes through an injectable callable so tests run
without real delays.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, NoReturn, TypeVar, Union

from plantcare.constants import AdvisoryDefaults
from plantcare.domain.exceptions import PlantCareError, RateLimitExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class RetryableFailure:
    error: PlantCareError
    delay_s: float
    degrade: bool = False


@dataclass(frozen=True)
class FatalFailure:
    error: Exception


AttemptOutcome = Union[Success, RetryableFailure, FatalFailure]


@dataclass(frozen=True)
class AttemptContext:
    """What an attempt knows about its position in the retry sequence."""

    number: int  # 1-based
    degraded: bool


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = AdvisoryDefaults.MAX_ATTEMPTS
    backoff_base_ms: int = AdvisoryDefaults.BACKOFF_BASE_MS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1 (got {self.max_attempts})")
        if self.backoff_base_ms < 0:
            raise ValueError(f"backoff_base_ms must not be negative (got {self.backoff_base_ms})")

    def backoff_delay(self, failed_attempt: int, retry_after_s: float | None = None) -> float:
        """
        Seconds to wait after ``failed_attempt`` (1-based) was rate limited.

        A server hint wins; otherwise the delay doubles per attempt starting
        at ``backoff_base_ms``.
        """
        if retry_after_s is not None:
            return retry_after_s
        return (self.backoff_base_ms / 1000.0) * (2 ** (failed_attempt - 1))


@dataclass
class RetryRun(Generic[T]):
    value: T
    attempts: int
    degraded: bool


def run_with_retries(
    attempt: Callable[[AttemptContext], AttemptOutcome],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Any] = time.sleep,
    label: str = "advisory",
) -> RetryRun:
    """
    Run ``attempt`` until it succeeds or gives up.

    Raises
    ------
    Exception
        The error from a :class:`FatalFailure`.
    RateLimitExhausted
        The last allowed attempt was rate limited.
    PlantCareError
        The last allowed attempt ended in another retryable failure.
    """
    degraded = False

    for number in range(1, policy.max_attempts + 1):
        outcome = attempt(AttemptContext(number=number, degraded=degraded))

        if isinstance(outcome, Success):
            if number > 1:
                logger.info("%s succeeded on attempt %d/%d", label, number, policy.max_attempts)
            return RetryRun(value=outcome.value, attempts=number, degraded=degraded)

        if isinstance(outcome, FatalFailure):
            raise outcome.error

        if number == policy.max_attempts:
            _give_up(outcome, policy, label)

        if outcome.degrade and not degraded:
            logger.warning("%s attempt %d failed (%s); retrying degraded", label, number, outcome.error)
            degraded = True
        else:
            logger.warning(
                "%s attempt %d/%d failed (%s); retrying in %.2fs",
                label,
                number,
                policy.max_attempts,
                outcome.error,
                outcome.delay_s,
            )
        if outcome.delay_s > 0:
            sleep(outcome.delay_s)

    raise RuntimeError(f"{label} retry loop ended without an outcome")


def _give_up(failure: RetryableFailure, policy: RetryPolicy, label: str) -> NoReturn:
    logger.error("%s gave up after %d attempts: %s", label, policy.max_attempts, failure.error)
    if failure.degrade:
        raise failure.error
    raise RateLimitExhausted(
        f"{label} still rate limited after {policy.max_attempts} attempts",
        detail={"attempts": policy.max_attempts},
    ) from failure.error
