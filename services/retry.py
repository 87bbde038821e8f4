"""Bounded retry of asynchronous actions with per-attempt reporting."""

from __future__ import annotations

from typing import Awaitable, Callable, TypeVar

from services.reporter import Reporter

T = TypeVar("T")

RetryPredicate = Callable[[Exception], bool]


def retry_all(_exc: Exception) -> bool:
    """Default classification: every failure is worth another attempt."""
    return True


async def retry(
    attempts: int,
    action: Callable[[], Awaitable[T]],
    description: str,
    reporter: Reporter,
    is_retryable: RetryPredicate = retry_all,
) -> T:
    """Await ``action`` until it succeeds or ``attempts`` tries are used up.

    Every try reports an info event, a success reports a success event and
    each failure reports an error event. The last failure, or a failure rejected
    by ``is_retryable``, is reported as a failure event and re-raised as is.
    There is no delay between attempts.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1.")

    attempt = 1
    while True:
        context = {"description": description, "attempt": attempt, "attempts": attempts}
        try:
            reporter.info(f"Try to {description} ({attempt} of {attempts})", **context)
            result = await action()
        except Exception as exc:
            message = f"Fail to {description} ({attempt} of {attempts})"
            if attempt >= attempts or not is_retryable(exc):
                reporter.failure(message, exception=exc, **context)
                raise
            reporter.error(message, exception=exc, **context)
            attempt += 1
            continue

        reporter.success(f"Succeed to {description}", **context)
        return result
