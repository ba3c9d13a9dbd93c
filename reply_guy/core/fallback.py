"""
Ordered fallback over interchangeable providers.

Both helpers try candidates top-to-bottom and stop at the first one whose
attempt returns without raising. Only exceptions listed in ``errors`` count as
a candidate failure; anything else propagates immediately. When every attempt
fails, the failures are collected into FallbackExhausted in the order they
happened.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Iterable, TypeVar

from .errors import FallbackExhausted

C = TypeVar("C")
R = TypeVar("R")


def first_success(
    candidates: Iterable[C],
    attempt: Callable[[C], R],
    on_failure: Callable[[C, Exception], None] | None = None,
    errors: type[Exception] | tuple[type[Exception], ...] = Exception,
) -> R:
    """Return the result of the first candidate whose attempt succeeds.

    Args:
        candidates: Ordered providers to try
        attempt: Operation applied to one candidate; raising means failure
        on_failure: Optional hook called with each failed candidate
        errors: Exception types that move on to the next candidate

    Raises:
        FallbackExhausted: If every candidate failed (or there were none)
    """
    failures: list[tuple[C, Exception]] = []
    for candidate in candidates:
        try:
            return attempt(candidate)
        except errors as exc:
            failures.append((candidate, exc))
            if on_failure is not None:
                on_failure(candidate, exc)
    raise FallbackExhausted(failures)


async def first_success_async(
    candidates: Iterable[C],
    attempt: Callable[[C], Awaitable[R]],
    on_failure: Callable[[C, Exception], None] | None = None,
    errors: type[Exception] | tuple[type[Exception], ...] = Exception,
) -> R:
    """Async variant of first_success; candidates are still tried one at a time."""
    failures: list[tuple[C, Exception]] = []
    for candidate in candidates:
        try:
            return await attempt(candidate)
        except errors as exc:
            failures.append((candidate, exc))
            if on_failure is not None:
                on_failure(candidate, exc)
    raise FallbackExhausted(failures)
