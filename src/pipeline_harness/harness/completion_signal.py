# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Single-assignment completion signal.

A CompletionSignal wraps an ``asyncio.Future`` that is only ever resolved
with a value, never with an exception: terminal errors of the engine are
values from the harness' point of view. It resolves at most once and any
number of waiters observe the same resolution.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CompletionSignal(Generic[T]):
    """Single-assignment future with named, idempotent resolution.

    Must be created while an event loop is running.

    Example:
        >>> signal: CompletionSignal[int] = CompletionSignal("answer")
        >>> signal.resolve(42)
        True
        >>> signal.resolve(43)  # ignored
        False
        >>> await signal.wait()
        42
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_resolved(self) -> bool:
        return self._future.done()

    def resolve(self, value: T) -> bool:
        """Resolve the signal.

        Returns:
            True if this call resolved the signal, False if it was already
            resolved (the earlier value is kept).
        """
        if self._future.done():
            logger.debug("Signal %s already resolved, ignoring", self._name)
            return False
        self._future.set_result(value)
        return True

    def result(self) -> T:
        """Return the resolved value.

        Raises:
            asyncio.InvalidStateError: If the signal has not resolved yet.
        """
        return self._future.result()

    async def wait(self) -> T:
        """Wait for resolution. Cancelling the waiter does not affect the signal."""
        return await asyncio.shield(self._future)

    def as_future(self) -> asyncio.Future[T]:
        """Expose the underlying future for multi-wait primitives like asyncio.wait."""
        return self._future

    def __repr__(self) -> str:
        state = "resolved" if self._future.done() else "pending"
        return f"CompletionSignal(name={self._name!r}, state={state})"


__all__: list[str] = ["CompletionSignal"]
