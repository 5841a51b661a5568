"""Sinks — three-phase stream consumers.

A sink is anything matching::

    async def on_start() -> State: ...
    async def on_data(state: State, item: Input) -> State: ...
    async def on_end(state: State) -> Result: ...

No base class required. Sources check the shape, not the lineage: a
``SinkLike`` protocol describes the contract, and ``Sink`` is the frozen
dataclass that carries the constructors and combinators.

``State`` is private to each sink. A combinator may pair it with its own
state but never looks inside it.

Usage::

    total = Sink.fold(0, lambda acc, n: acc + n)
    both = total.parallel(Sink.const("done"))
    await Source.from_iterable([1, 2, 3]).pipe(both)   # (6, "done")
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Any, Never, Protocol

from sluice._internal.invoke import invoke
from sluice._internal.join import join_pair
from sluice._internal.types import DataFn, EndFn, Factory, StartFn
from sluice.config import DEFAULT_CONFIG, StreamConfig

if TYPE_CHECKING:
    from anyio.abc import ByteSendStream

    from sluice.io import WriteState


class SinkLike[Input, State, Result](Protocol):
    """Protocol for stream consumers.

    Accepts ``Sink`` values and any object with the same three coroutine
    methods::

        class Counter:
            async def on_start(self) -> int:
                return 0

            async def on_data(self, state: int, item: object) -> int:
                return state + 1

            async def on_end(self, state: int) -> int:
                return state
    """

    def on_start(self) -> Awaitable[State]: ...

    def on_data(self, state: State, item: Input, /) -> Awaitable[State]: ...

    def on_end(self, state: State, /) -> Awaitable[Result]: ...


async def _keep(state: Any, item: Any) -> Any:
    return state


async def _identity(state: Any) -> Any:
    return state


@dataclass(frozen=True, slots=True)
class Sink[Input, State, Result]:
    """Immutable description of a consumer.

    Holds the three phase functions. Constructing a sink has no effects;
    everything happens when a source drives it. Every combinator returns a
    new ``Sink``; the receiver is never changed.
    """

    on_start: StartFn[State]
    on_data: DataFn[State, Input]
    on_end: EndFn[State, Result]

    # ── Constructors ─────────────────────────────────────────────────────

    @staticmethod
    def unit() -> Sink[Any, None, None]:
        """Ignore every item and report ``None``."""
        return Sink.const(None)

    @staticmethod
    def const[R](value: R) -> Sink[Any, R, R]:
        """Ignore every item and report ``value``."""

        async def on_start() -> R:
            return value

        return Sink(on_start, _keep, _identity)

    @staticmethod
    def fail(error: Exception) -> Sink[Any, Never, Never]:
        """A sink whose first operation raises ``error``.

        No state is ever produced, so a well-behaved source stops at
        ``on_start``. The other two phases raise the same error if called.
        """

        async def on_start() -> Never:
            raise error

        async def on_data(state: Any, item: Any) -> Never:
            raise error

        async def on_end(state: Any) -> Never:
            raise error

        return Sink(on_start, on_data, on_end)

    @staticmethod
    def fold[I, S](init: S, accumulate: Callable[[S, I], S | Awaitable[S]]) -> Sink[I, S, S]:
        """Reduce the stream with ``accumulate``, starting from ``init``.

        ``accumulate`` may be a plain function or a coroutine function.
        The final accumulator is the result.
        """

        async def on_start() -> S:
            return init

        async def on_data(state: S, item: I) -> S:
            return await invoke(accumulate, state, item)

        return Sink(on_start, on_data, _identity)

    @staticmethod
    def fold_async[I, S](init: S, accumulate: Callable[[S, I], Awaitable[S]]) -> Sink[I, S, S]:
        """Like ``fold`` but ``accumulate`` is always awaited."""

        async def on_start() -> S:
            return init

        async def on_data(state: S, item: I) -> S:
            return await accumulate(state, item)

        return Sink(on_start, on_data, _identity)

    @staticmethod
    def into_byte_stream(
        open_stream: Factory[ByteSendStream],
        /,
        *,
        config: StreamConfig = DEFAULT_CONFIG,
    ) -> Sink[bytes, WriteState, None]:
        """Write every chunk to a fresh anyio byte stream. See ``sluice.io``."""
        from sluice.io import byte_stream_sink

        return byte_stream_sink(open_stream, config=config)

    @staticmethod
    def into_file(
        path: str | Path,
        /,
        *,
        append: bool = False,
        config: StreamConfig = DEFAULT_CONFIG,
    ) -> Sink[bytes, WriteState, None]:
        """Write every chunk to ``path``. See ``sluice.io``."""
        from sluice.io import file_sink

        return file_sink(path, append=append, config=config)

    # ── Combinators ──────────────────────────────────────────────────────

    def map[R](self, f: Callable[[Result], R]) -> Sink[Input, State, R]:
        """Post-process the result through ``f``."""
        end = self.on_end

        async def on_end(state: State) -> R:
            return f(await end(state))

        return Sink(self.on_start, self.on_data, on_end)

    def map_async[R](self, f: Callable[[Result], Awaitable[R]]) -> Sink[Input, State, R]:
        """Post-process the result through the coroutine function ``f``."""
        end = self.on_end

        async def on_end(state: State) -> R:
            return await f(await end(state))

        return Sink(self.on_start, self.on_data, on_end)

    def parallel[S2, R2](
        self, other: SinkLike[Input, S2, R2]
    ) -> Sink[Input, tuple[State, S2], tuple[Result, R2]]:
        """Feed the same stream to ``self`` and ``other`` concurrently.

        State and result are ``(mine, theirs)`` pairs. Each phase runs both
        sinks at once and waits for both before returning, so the slower
        sink sets the pace. A failure in either branch fails the phase with
        that exception; if both fail, ``self``'s exception wins. Only
        ``Exception`` subclasses pass through unwrapped; cancellation and
        other ``BaseException``s propagate through the task group.
        """
        left = self

        async def on_start() -> tuple[State, S2]:
            return await join_pair(left.on_start, other.on_start)

        async def on_data(states: tuple[State, S2], item: Input) -> tuple[State, S2]:
            mine, theirs = states
            return await join_pair(
                partial(left.on_data, mine, item),
                partial(other.on_data, theirs, item),
            )

        async def on_end(states: tuple[State, S2]) -> tuple[Result, R2]:
            mine, theirs = states
            return await join_pair(
                partial(left.on_end, mine),
                partial(other.on_end, theirs),
            )

        return Sink(on_start, on_data, on_end)
