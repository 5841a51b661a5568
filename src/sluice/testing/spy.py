"""Recording sink for assertions about what a source did."""

from typing import Any

from sluice.sink import Sink, SinkLike


class SpySink:
    """Record every sink call, then delegate to ``inner``.

    ``inner`` defaults to ``Sink.unit()``. Calls are recorded before they
    are delegated, so a failing inner sink still shows the attempt::

        spy = SpySink()
        await Source.from_iterable([1, 2]).pipe(spy)
        assert spy.phases == ["on_start", "on_data", "on_data", "on_end"]
        assert spy.items == [1, 2]
    """

    def __init__(self, inner: SinkLike[Any, Any, Any] | None = None) -> None:
        self.inner = inner if inner is not None else Sink.unit()
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def on_start(self) -> Any:
        self.calls.append(("on_start", ()))
        return await self.inner.on_start()

    async def on_data(self, state: Any, item: Any) -> Any:
        self.calls.append(("on_data", (state, item)))
        return await self.inner.on_data(state, item)

    async def on_end(self, state: Any) -> Any:
        self.calls.append(("on_end", (state,)))
        return await self.inner.on_end(state)

    @property
    def phases(self) -> list[str]:
        """Names of the recorded calls, in order."""
        return [name for name, _ in self.calls]

    @property
    def items(self) -> list[Any]:
        """Items passed to ``on_data``, in order."""
        return [args[1] for name, args in self.calls if name == "on_data"]

    def count(self, phase: str | None = None) -> int:
        """Number of recorded calls, optionally only those of ``phase``."""
        if phase is None:
            return len(self.calls)
        return sum(1 for name, _ in self.calls if name == phase)

    def reset(self) -> None:
        self.calls.clear()
