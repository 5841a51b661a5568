"""Sluice — composable sources and sinks with strict backpressure.

A ``Source`` describes a producer and a ``Sink`` describes a three-phase
consumer. Both are immutable values; nothing runs until a source is
piped into a sink, and every ``pipe()`` is one independent activation.

Basic usage::

    from sluice import Sink, Source

    total = await Source.from_iterable([1, 2, 3]).fold(42, lambda a, b: a + b)   # 48

    both = Sink.fold(0, lambda n, _: n + 1).parallel(Sink.const("x"))
    await Source.from_iterable("abc").pipe(both)   # (3, "x")

Byte transports (anyio streams and files)::

    await Source.from_file("in.bin").into_file("out.bin")
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "ProtocolError",
    "Sink",
    "SinkLike",
    "SluiceError",
    "Source",
    "StreamConfig",
    "Threaded",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "sluice.errors",
    "ProtocolError": "sluice.errors",
    "Sink": "sluice.sink",
    "SinkLike": "sluice.sink",
    "SluiceError": "sluice.errors",
    "Source": "sluice.source",
    "StreamConfig": "sluice.config",
    "Threaded": "sluice._internal.plumbing",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import sluice`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
