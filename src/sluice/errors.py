"""Sluice exception hierarchy.

These are the only exceptions sluice raises on its own account. Failures
raised by sinks, sources, user callbacks or transports are never wrapped:
the original exception object is what ``pipe()`` raises.
"""

from dataclasses import dataclass


class SluiceError(Exception):
    """Base for all sluice-specific errors."""


class ConfigurationError(SluiceError):
    """Raised when a ``StreamConfig`` value is invalid.

    Raised from ``StreamConfig.__post_init__`` at construction time.
    """


@dataclass(frozen=True, slots=True)
class ProtocolError(SluiceError):
    """A source broke the sink lifecycle.

    Raised by ``sluice.testing.checked()`` when a sink operation arrives
    out of order: data before start, anything after end or after a failed
    step, a stale state, or two operations in flight at once.
    """

    operation: str
    phase: str
    detail: str = ""

    def __str__(self) -> str:
        message = f"{self.operation} called while {self.phase}"
        if self.detail:
            return f"{message}: {self.detail}"
        return message
