"""Test utilities for sluice pipelines.

Provides a recording sink, a lifecycle checker, and in-memory anyio byte
streams with injectable transport failures. All public names are
re-exported here::

    from sluice.testing import SpySink, checked, memory_byte_stream
"""

from sluice.testing.protocol import Phase, checked
from sluice.testing.spy import SpySink
from sluice.testing.streams import (
    MemoryByteReceiveStream,
    MemoryByteSendStream,
    memory_byte_stream,
)

__all__ = [
    "MemoryByteReceiveStream",
    "MemoryByteSendStream",
    "Phase",
    "SpySink",
    "checked",
    "memory_byte_stream",
]
