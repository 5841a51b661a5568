"""Await user callbacks that may or may not be coroutine functions.

Three kinds of callback reach sluice in either flavour:

- ``Sink.fold`` accumulators, called once per item;
- ``Source.concat_async`` and ``Source.from_async_iterable`` factories,
  called once per activation;
- transport openers for the ``sluice.io`` adapters, called at the start of
  every activation.

A plain function may also hand back an awaitable (a factory returning a
coroutine, say), so the check is on the result, not on the callable.
"""

import inspect
from typing import Any


async def invoke(fn: Any, *args: Any) -> Any:
    """Return ``fn(*args)``, awaited first if it is awaitable.

    ::

        await invoke(lambda total, n: total + n, 1, 2)    # 3
        await invoke(open_connection)                     # async opener
    """
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
