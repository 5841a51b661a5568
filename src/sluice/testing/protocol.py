"""Runtime enforcement of the sink lifecycle.

Every activation is a small state machine::

    NOT_STARTED --on_start--> DRAINING --on_data--> DRAINING --on_end--> ENDED
         \\                       \\
          +------ any failure -----+--> FAILED

``checked(sink)`` wraps a sink so each activation carries its own machine
inside the state it hands out. Any call the machine does not allow raises
``ProtocolError`` instead of reaching the wrapped sink: data before start,
anything after end or after a failed step, a state that was already
superseded, or a second operation while one is still in flight.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sluice.errors import ProtocolError
from sluice.sink import Sink, SinkLike


class Phase(Enum):
    """Where an activation is in the sink lifecycle."""

    NOT_STARTED = "not started"
    DRAINING = "draining"
    ENDED = "ended"
    FAILED = "failed"


class _Activation:
    __slots__ = ("busy", "phase", "step")

    def __init__(self) -> None:
        self.phase = Phase.NOT_STARTED
        self.busy = False
        self.step = 0


@dataclass(frozen=True, slots=True)
class CheckedState:
    """State handed out by a checked sink: the machine, a step counter, the wrapped state."""

    activation: _Activation
    step: int
    inner: Any


def _verify(operation: str, state: Any) -> _Activation:
    if not isinstance(state, CheckedState):
        raise ProtocolError(operation, Phase.NOT_STARTED.value, "state was not produced by on_start")
    activation = state.activation
    if activation.busy:
        raise ProtocolError(operation, activation.phase.value, "another operation is still in flight")
    if activation.phase is not Phase.DRAINING:
        raise ProtocolError(operation, activation.phase.value)
    if state.step != activation.step:
        raise ProtocolError(operation, activation.phase.value, "state was already superseded")
    return activation


async def _run(activation: _Activation, call: Callable[[], Awaitable[Any]]) -> Any:
    activation.busy = True
    try:
        return await call()
    except Exception:
        activation.phase = Phase.FAILED
        raise
    finally:
        activation.busy = False


def checked[I, S, R](sink: SinkLike[I, S, R]) -> Sink[I, CheckedState, R]:
    """Wrap ``sink`` so lifecycle violations raise ``ProtocolError``.

    Usage::

        result = await source.pipe(checked(Sink.fold(0, add)))
    """

    async def on_start() -> CheckedState:
        activation = _Activation()
        inner = await _run(activation, sink.on_start)
        activation.phase = Phase.DRAINING
        return CheckedState(activation, activation.step, inner)

    async def on_data(state: CheckedState, item: I) -> CheckedState:
        activation = _verify("on_data", state)
        inner = await _run(activation, lambda: sink.on_data(state.inner, item))
        activation.step += 1
        return CheckedState(activation, activation.step, inner)

    async def on_end(state: CheckedState) -> R:
        activation = _verify("on_end", state)
        result = await _run(activation, lambda: sink.on_end(state.inner))
        activation.phase = Phase.ENDED
        return result

    return Sink(on_start, on_data, on_end)
