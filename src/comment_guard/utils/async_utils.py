"""Async utilities: sync bridging and isolated concurrent fan-out."""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine in a sync context.

    Reuses the current event loop if available, otherwise creates a new one.
    The loop is NOT closed after use because httpx clients cached by the
    adapters are bound to it.

    Args:
        coro: The coroutine to execute.

    Returns:
        The result of the coroutine.
    """
    try:
        loop = asyncio.get_event_loop()
        if loop.is_closed():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


@dataclass
class Outcome(Generic[T, R]):
    """Result of running one item through a fan-out: a value or an error."""

    item: T
    value: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_outcomes(
    items: Iterable[T],
    func: Callable[[T], Awaitable[R]],
    max_concurrency: int | None = None,
) -> list[Outcome[T, R]]:
    """Run ``func`` over every item concurrently, isolating failures.

    Each item gets its own :class:`Outcome` carrying the item itself, so
    results never depend on index alignment. An exception raised for one
    item is captured in its outcome and never cancels the others.

    Args:
        items: Inputs to fan out over.
        func: Async callable applied to each item.
        max_concurrency: Cap on simultaneously running calls (None = no cap).

    Returns:
        One outcome per item, in input order.
    """
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _run(item: T) -> Outcome[T, R]:
        try:
            if semaphore is None:
                return Outcome(item=item, value=await func(item))
            async with semaphore:
                return Outcome(item=item, value=await func(item))
        except Exception as e:
            return Outcome(item=item, error=e)

    return list(await asyncio.gather(*(_run(item) for item in items)))
