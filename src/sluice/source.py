"""Sources — reusable descriptions of producers.

A source is a single operation: given any sink, drive it through
``on_start``, zero or more ``on_data`` calls and ``on_end``, and return
what ``on_end`` returned. Nothing runs until ``pipe()`` is awaited, and
every ``pipe()`` call is an independent activation.

The driving source awaits each step before issuing the next one. That is
the whole backpressure mechanism: no item is produced before the previous
one was accepted, and nothing is buffered.

Each method returns a new frozen ``Source``; the receiver is never
mutated. Usage::

    from sluice import Source

    evens = await (
        Source.from_iterable(range(10))
        .filter(lambda n: n % 2 == 0)
        .map(lambda n: n * 10)
        .to_list()
    )
    # [0, 20, 40, 60, 80]

Failures are never caught. The first exception raised by any step is what
``pipe()`` raises, and no further sink operation is invoked.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Never

from sluice._internal.invoke import invoke
from sluice._internal.plumbing import Threaded, hand_back, intercept, resume, threaded
from sluice._internal.types import Factory, PipeFn
from sluice.config import DEFAULT_CONFIG, StreamConfig
from sluice.sink import Sink, SinkLike

if TYPE_CHECKING:
    from anyio.abc import ByteReceiveStream, ByteSendStream


@dataclass(frozen=True, slots=True)
class Source[Output]:
    """Immutable description of a producer.

    ``pipe`` is the coroutine function that drives a sink. Construct one
    directly only when none of the constructors fit::

        async def countdown(sink):
            state = await sink.on_start()
            for n in (3, 2, 1):
                state = await sink.on_data(state, n)
            return await sink.on_end(state)

        Source(countdown)
    """

    pipe: PipeFn

    # ── Constructors ─────────────────────────────────────────────────────

    @staticmethod
    def empty() -> Source[Never]:
        """Start and end the sink without any data."""

        async def pipe[S, R](sink: SinkLike[Any, S, R]) -> R:
            state = await sink.on_start()
            return await sink.on_end(state)

        return Source(pipe)

    @staticmethod
    def singleton[T](value: T) -> Source[T]:
        """Produce ``value`` once."""

        async def pipe[S, R](sink: SinkLike[T, S, R]) -> R:
            state = await sink.on_start()
            state = await sink.on_data(state, value)
            return await sink.on_end(state)

        return Source(pipe)

    @staticmethod
    def fail(error: Exception) -> Source[Never]:
        """Raise ``error`` from ``pipe()`` without touching the sink."""

        async def pipe(sink: SinkLike[Any, Any, Any]) -> Never:
            raise error

        return Source(pipe)

    @staticmethod
    def from_iterable[T](items: Iterable[T]) -> Source[T]:
        """Produce ``items`` in order.

        The items are captured when the source is built, so one-shot
        iterators and generators still give a reusable source.
        """
        captured = tuple(items)

        async def pipe[S, R](sink: SinkLike[T, S, R]) -> R:
            state = await sink.on_start()
            for item in captured:
                state = await sink.on_data(state, item)
            return await sink.on_end(state)

        return Source(pipe)

    @staticmethod
    def from_async_iterable[T](factory: Factory[AsyncIterable[T]]) -> Source[T]:
        """Pull items from a fresh async iterable per activation.

        ``factory()`` is called after ``on_start``. The next item is only
        requested once the sink accepted the previous one. Async
        generators are closed when the activation stops, successfully or
        not.
        """

        async def pipe[S, R](sink: SinkLike[T, S, R]) -> R:
            state = await sink.on_start()
            iterable = await invoke(factory)
            iterator = aiter(iterable)
            try:
                async for item in iterator:
                    state = await sink.on_data(state, item)
            finally:
                await _aclose(iterator)
            return await sink.on_end(state)

        return Source(pipe)

    @staticmethod
    def from_byte_stream(
        open_stream: Factory[ByteReceiveStream],
        /,
        *,
        config: StreamConfig = DEFAULT_CONFIG,
    ) -> Source[bytes]:
        """Read chunks from a fresh anyio byte stream. See ``sluice.io``."""
        from sluice.io import byte_stream_source

        return byte_stream_source(open_stream, config=config)

    @staticmethod
    def from_file(path: str | Path, /, *, config: StreamConfig = DEFAULT_CONFIG) -> Source[bytes]:
        """Read chunks from the file at ``path``. See ``sluice.io``."""
        from sluice.io import file_source

        return file_source(path, config=config)

    # ── Sequencing ───────────────────────────────────────────────────────

    def concat(self, following: Source[Output]) -> Source[Output]:
        """Produce everything from ``self``, then everything from ``following``."""

        def factory() -> Source[Output]:
            return following

        return self.concat_async(factory)

    def concat_async(self, factory: Factory[Source[Output]]) -> Source[Output]:
        """Continue with the source returned by ``factory()``.

        ``factory`` (sync or async) is called once ``self`` has fully
        drained, at the point ``self`` would end the sink, so the choice of
        continuation can depend on what happened so far. The continuation
        picks up the intermediate state; the sink is started once and
        ended once.
        """
        first = self

        async def pipe[S, R](sink: SinkLike[Output, S, R]) -> R:
            async def on_end(state: S) -> R:
                following = await invoke(factory)
                return await following.pipe(resume(sink, state))

            return await first.pipe(intercept(sink, on_end=on_end))

        return Source(pipe)

    # ── Transforming ─────────────────────────────────────────────────────

    def map[T](self, f: Callable[[Output], T]) -> Source[T]:
        """Replace every item with ``f(item)``."""

        def step(own: None, item: Output) -> tuple[None, T]:
            return own, f(item)

        return self.map_with_state(None, step)

    def map_with_state[O, T](self, init: O, f: Callable[[O, Output], tuple[O, T]]) -> Source[T]:
        """Replace every item using a private state seeded at ``init``.

        ``f(state, item)`` returns ``(next_state, new_item)``. The state
        never reaches the downstream sink::

            numbered = source.map_with_state(0, lambda i, x: (i + 1, (i, x)))
        """
        upstream = self

        async def pipe[S, R](sink: SinkLike[T, S, R]) -> R:
            async def step(own: O, inner: S, item: Output) -> Threaded[O, S]:
                own, mapped = f(own, item)
                return Threaded(own, await sink.on_data(inner, mapped))

            return await upstream.pipe(threaded(sink, init, step))

        return Source(pipe)

    def map_async[T](self, f: Callable[[Output], Awaitable[T]]) -> Source[T]:
        """Replace every item with ``await f(item)``.

        The next upstream item is requested only after the mapped item was
        accepted downstream.
        """
        upstream = self

        async def pipe[S, R](sink: SinkLike[T, S, R]) -> R:
            async def on_data(state: S, item: Output) -> S:
                return await sink.on_data(state, await f(item))

            return await upstream.pipe(intercept(sink, on_data=on_data))

        return Source(pipe)

    def flat_map[T](self, f: Callable[[Output], Source[T]]) -> Source[T]:
        """Replace every item with all items of the source ``f(item)``.

        Children are drained one at a time, in upstream order, and never
        interleave. The sink is started and ended once for the whole run.
        """
        upstream = self

        async def pipe[S, R](sink: SinkLike[T, S, R]) -> R:
            async def on_data(state: S, item: Output) -> S:
                return await f(item).pipe(hand_back(sink, state))

            return await upstream.pipe(intercept(sink, on_data=on_data))

        return Source(pipe)

    # ── Filtering ────────────────────────────────────────────────────────

    def filter(self, pred: Callable[[Output], bool]) -> Source[Output]:
        """Keep only the items for which ``pred(item)`` is true."""

        def step(own: None, item: Output) -> tuple[None, bool]:
            return own, pred(item)

        return self.filter_with_state(None, step)

    def filter_with_state[O](self, init: O, pred: Callable[[O, Output], tuple[O, bool]]) -> Source[Output]:
        """Filter using a private state seeded at ``init``.

        ``pred(state, item)`` returns ``(next_state, keep)``. The state
        advances for every item, kept or dropped::

            every_third = source.filter_with_state(0, lambda i, _: (i + 1, i % 3 == 0))
        """
        upstream = self

        async def pipe[S, R](sink: SinkLike[Output, S, R]) -> R:
            async def step(own: O, inner: S, item: Output) -> Threaded[O, S]:
                own, keep = pred(own, item)
                if not keep:
                    return Threaded(own, inner)
                return Threaded(own, await sink.on_data(inner, item))

            return await upstream.pipe(threaded(sink, init, step))

        return Source(pipe)

    def filter_async(self, pred: Callable[[Output], Awaitable[bool]]) -> Source[Output]:
        """Keep only the items for which ``await pred(item)`` is true."""
        upstream = self

        async def pipe[S, R](sink: SinkLike[Output, S, R]) -> R:
            async def on_data(state: S, item: Output) -> S:
                if not await pred(item):
                    return state
                return await sink.on_data(state, item)

            return await upstream.pipe(intercept(sink, on_data=on_data))

        return Source(pipe)

    # ── Running ──────────────────────────────────────────────────────────

    async def fold[S](self, init: S, accumulate: Callable[[S, Output], S]) -> S:
        """Reduce every item into ``init`` and return the result.

        ::

            await Source.from_iterable([1, 2, 3]).fold(42, lambda a, b: a + b)   # 48
        """
        return await self.pipe(Sink.fold(init, accumulate))

    async def fold_async[S](self, init: S, accumulate: Callable[[S, Output], Awaitable[S]]) -> S:
        """Like ``fold`` with a coroutine function as the accumulator."""
        return await self.pipe(Sink.fold_async(init, accumulate))

    async def to_list(self) -> list[Output]:
        """Collect every item, in arrival order."""
        return await self.pipe(_collect())

    async def into_byte_stream(
        self: Source[bytes],
        open_stream: Factory[ByteSendStream],
        /,
        *,
        config: StreamConfig = DEFAULT_CONFIG,
    ) -> None:
        """Write every chunk to a fresh anyio byte stream and close it."""
        await self.pipe(Sink.into_byte_stream(open_stream, config=config))

    async def into_file(
        self: Source[bytes],
        path: str | Path,
        /,
        *,
        append: bool = False,
        config: StreamConfig = DEFAULT_CONFIG,
    ) -> None:
        """Write every chunk to ``path``."""
        await self.pipe(Sink.into_file(path, append=append, config=config))


def _collect[T]() -> Sink[T, list[T], list[T]]:
    # A fresh list per activation keeps re-runs independent.
    async def on_start() -> list[T]:
        return []

    async def on_data(items: list[T], item: T) -> list[T]:
        items.append(item)
        return items

    async def on_end(items: list[T]) -> list[T]:
        return items

    return Sink(on_start, on_data, on_end)


async def _aclose(iterator: AsyncIterator[Any]) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is not None:
        await aclose()
