"""Shared type aliases used across sluice modules."""

from collections.abc import Awaitable, Callable
from typing import Any

# The three phases of a sink, as plain coroutine functions
type StartFn[S] = Callable[[], Awaitable[S]]
type DataFn[S, I] = Callable[[S, I], Awaitable[S]]
type EndFn[S, R] = Callable[[S], Awaitable[R]]

# A value that will resolve to T (already resolved or awaitable)
type Pending[T] = T | Awaitable[T]

# Zero-argument callable producing a fresh value per activation
type Factory[T] = Callable[[], Pending[T]]

# Drives any sink to completion and returns its result
type PipeFn = Callable[[Any], Awaitable[Any]]
