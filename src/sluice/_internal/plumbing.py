"""State-threading plumbing shared by the source combinators.

Every source combinator wraps the downstream sink in a new sink and pipes
the upstream source into it. Three shapes cover all of them:

- ``intercept()`` swaps out ``on_data`` and/or ``on_end`` and keeps the
  downstream ``on_start`` (map_async, filter_async, flat_map, concat).
- ``resume()`` continues an activation that already has a state, so the
  downstream ``on_start`` is not called a second time (concat, flat_map).
- ``threaded()`` pairs a private state with the downstream state in a
  ``Threaded`` value (map_with_state, filter_with_state).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from sluice._internal.types import DataFn, EndFn
from sluice.sink import Sink, SinkLike


@dataclass(frozen=True, slots=True)
class Threaded[Own, Inner]:
    """Composite state: a combinator's own state next to the wrapped one.

    ``inner`` belongs to the downstream sink and is only ever passed back
    to it.
    """

    own: Own
    inner: Inner


async def _identity(state: Any) -> Any:
    return state


def intercept[I, S, R](
    sink: SinkLike[Any, S, R],
    *,
    on_data: DataFn[S, I] | None = None,
    on_end: EndFn[S, R] | None = None,
) -> Sink[I, S, R]:
    """Wrap ``sink``, replacing the given phases and forwarding the rest."""
    return Sink(
        sink.on_start,
        on_data if on_data is not None else sink.on_data,
        on_end if on_end is not None else sink.on_end,
    )


def resume[I, S, R](
    sink: SinkLike[I, S, Any],
    state: S,
    *,
    on_end: EndFn[S, R] | None = None,
) -> Sink[I, S, R]:
    """Continue an activation of ``sink`` from ``state``.

    ``on_start`` hands back ``state`` instead of starting ``sink`` again;
    data goes straight to ``sink``. The end step is ``sink.on_end`` unless
    another one is given.
    """

    async def on_start() -> S:
        return state

    return Sink(on_start, sink.on_data, on_end if on_end is not None else sink.on_end)


def hand_back[I, S](sink: SinkLike[I, S, Any], state: S) -> Sink[I, S, S]:
    """Continue from ``state`` and return the state at end without ending ``sink``."""
    return resume(sink, state, on_end=_identity)


def threaded[O, I, S, R](
    sink: SinkLike[Any, S, R],
    init: O,
    step: Callable[[O, S, I], Awaitable[Threaded[O, S]]],
) -> Sink[I, Threaded[O, S], R]:
    """Thread a private state seeded at ``init`` alongside ``sink``'s state.

    ``step(own, inner, item)`` decides what reaches ``sink`` and returns
    the next pair. The private half is dropped at the end.
    """

    async def on_start() -> Threaded[O, S]:
        return Threaded(init, await sink.on_start())

    async def on_data(state: Threaded[O, S], item: I) -> Threaded[O, S]:
        return await step(state.own, state.inner, item)

    async def on_end(state: Threaded[O, S]) -> R:
        return await sink.on_end(state.inner)

    return Sink(on_start, on_data, on_end)
