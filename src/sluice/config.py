"""Stream adapter configuration.

StreamConfig is a frozen dataclass: immutable after creation and
validated once at construction.
"""

from dataclasses import dataclass

from sluice.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class StreamConfig:
    """Settings for the byte transport adapters. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = StreamConfig(max_chunk_size=4096)
        chunks = await Source.from_file("data.bin", config=config).to_list()
    """

    # Input: upper bound handed to ByteReceiveStream.receive()
    max_chunk_size: int = 64 * 1024  # 64 KiB

    # Output: force-close the transport after a failed write
    close_on_error: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.max_chunk_size, bool) or not isinstance(self.max_chunk_size, int):
            msg = f"max_chunk_size must be an int, got {type(self.max_chunk_size).__name__}"
            raise ConfigurationError(msg)
        if self.max_chunk_size <= 0:
            msg = f"max_chunk_size must be positive, got {self.max_chunk_size}"
            raise ConfigurationError(msg)


DEFAULT_CONFIG = StreamConfig()
