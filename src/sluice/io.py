"""Byte transport adapters built on anyio byte streams.

Input::

    chunks = await Source.from_byte_stream(lambda: receive_stream).to_list()

Output::

    await Source.from_iterable([b"a", b"b"]).into_byte_stream(lambda: send_stream)

Both sides only use the public source/sink contract. Transports are
opened lazily, once per activation, through a factory (sync or async),
so the sources and sinks here stay reusable values.

Backpressure carries through to the transport: the input side does not
receive the next chunk until the sink accepted the previous one, and the
output side awaits ``send()`` (which suspends while the transport is not
ready) before the source may produce more. Transport exceptions propagate
unchanged as the failure of the step in flight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path

import anyio
from anyio.abc import ByteReceiveStream, ByteSendStream
from anyio.streams.file import FileReadStream, FileWriteStream

from sluice._internal.invoke import invoke
from sluice._internal.types import Factory
from sluice.config import DEFAULT_CONFIG, StreamConfig
from sluice.sink import Sink, SinkLike
from sluice.source import Source

logger = logging.getLogger("sluice.io")


async def _close_after_failure(stream: ByteReceiveStream | ByteSendStream) -> None:
    """Force-close ``stream`` while another exception is propagating.

    A close error here is logged and dropped so the failure in flight
    reaches ``pipe()`` as raised.
    """
    try:
        await anyio.aclose_forcefully(stream)
    except Exception as exc:
        logger.debug("Closing %r after a failure also failed: %r", stream, exc)


# ── Input ──


def byte_stream_source(
    open_stream: Factory[ByteReceiveStream],
    /,
    *,
    config: StreamConfig = DEFAULT_CONFIG,
) -> Source[bytes]:
    """A source reading chunks of at most ``config.max_chunk_size`` bytes.

    Per activation: start the sink, open the stream, feed it chunk by
    chunk, close the stream, end the sink. End of stream is the signal to
    end the sink. The stream is closed however the reading loop exits; if
    closing fails after another failure, the earlier failure is raised.
    """

    async def pipe[S, R](sink: SinkLike[bytes, S, R]) -> R:
        state = await sink.on_start()
        stream = await invoke(open_stream)
        logger.debug("Reading from %r", stream)
        chunks = 0
        try:
            while True:
                try:
                    chunk = await stream.receive(config.max_chunk_size)
                except anyio.EndOfStream:
                    break
                state = await sink.on_data(state, chunk)
                chunks += 1
        except BaseException as exc:
            logger.debug("Reading from %r failed after %d chunks: %r", stream, chunks, exc)
            await _close_after_failure(stream)
            raise
        await stream.aclose()
        logger.debug("Read %d chunks from %r", chunks, stream)
        return await sink.on_end(state)

    return Source(pipe)


def file_source(path: str | Path, /, *, config: StreamConfig = DEFAULT_CONFIG) -> Source[bytes]:
    """A source reading the file at ``path``; the file is opened per activation."""

    async def open_file() -> FileReadStream:
        return await FileReadStream.from_path(path)

    return byte_stream_source(open_file, config=config)


# ── Output ──


@dataclass(frozen=True, slots=True)
class WriteState:
    """State of the output sink: the open transport and chunks written so far."""

    stream: ByteSendStream
    chunks: int = 0


def byte_stream_sink(
    open_stream: Factory[ByteSendStream],
    /,
    *,
    config: StreamConfig = DEFAULT_CONFIG,
) -> Sink[bytes, WriteState, None]:
    """A sink writing every chunk to a stream opened at ``on_start``.

    ``on_data`` resolves once the transport accepted the chunk.
    ``on_end`` finalizes the transport with ``aclose()``, once, after every
    chunk was accepted. A failed write force-closes the transport when
    ``config.close_on_error`` is set; the write's exception is what
    propagates.
    """

    async def on_start() -> WriteState:
        stream = await invoke(open_stream)
        logger.debug("Writing to %r", stream)
        return WriteState(stream)

    async def on_data(state: WriteState, chunk: bytes) -> WriteState:
        try:
            await state.stream.send(chunk)
        except Exception as exc:
            logger.debug("Writing to %r failed after %d chunks: %r", state.stream, state.chunks, exc)
            if config.close_on_error:
                await _close_after_failure(state.stream)
            raise
        return replace(state, chunks=state.chunks + 1)

    async def on_end(state: WriteState) -> None:
        await state.stream.aclose()
        logger.debug("Wrote %d chunks to %r", state.chunks, state.stream)

    return Sink(on_start, on_data, on_end)


def file_sink(
    path: str | Path,
    /,
    *,
    append: bool = False,
    config: StreamConfig = DEFAULT_CONFIG,
) -> Sink[bytes, WriteState, None]:
    """A sink writing to the file at ``path``; the file is opened per activation."""

    async def open_file() -> FileWriteStream:
        return await FileWriteStream.from_path(path, append)

    return byte_stream_sink(open_file, config=config)

