"""Concurrent join of two coroutine functions.

``Sink.parallel`` fans every phase out to two sinks and waits for both.
anyio task groups report child failures as an ``ExceptionGroup``; the
stream contract requires the original exception to reach the caller
unchanged, so each branch records its own outcome and the join re-raises
the winner after both branches have settled.

Tie-break: when both branches fail in the same phase, the left branch's
exception is raised.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import anyio


async def join_pair[A, B](
    left: Callable[[], Awaitable[A]],
    right: Callable[[], Awaitable[B]],
) -> tuple[A, B]:
    """Run ``left()`` and ``right()`` concurrently and return both results.

    Neither branch is cancelled when its sibling fails; the slower branch
    gates the join. A ``BaseException`` that is not an ``Exception`` is
    left to the task group, which reports it in a ``BaseExceptionGroup``.
    """
    results: list[Any] = [None, None]
    errors: list[Exception | None] = [None, None]

    async def _settle(index: int, fn: Callable[[], Awaitable[Any]]) -> None:
        try:
            results[index] = await fn()
        except Exception as exc:
            errors[index] = exc

    async with anyio.create_task_group() as tg:
        tg.start_soon(_settle, 0, left)
        tg.start_soon(_settle, 1, right)

    for error in errors:
        if error is not None:
            raise error
    return results[0], results[1]
