# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Cancellation scope shared between the harness and the engine under test.

Cancellation is one-directional and monotonic: once ``cancel()`` has been
called the scope stays cancelled and later calls are no-ops. The first
reason given is the one that is kept.
"""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class CancellationScope:
    """Monotonic cancellation flag that can be awaited.

    Example:
        >>> scope = CancellationScope()
        >>> scope.cancel("assertions converged")
        >>> await scope.wait()  # returns immediately
        >>> scope.reason
        'assertions converged'
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        """Return True once cancel() has been called."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Return the reason given to the first cancel() call."""
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel the scope. Never retracted; repeated calls are ignored."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.debug("Cancellation scope cancelled: %s", reason)

    async def wait(self) -> None:
        """Block until the scope is cancelled."""
        await self._event.wait()


__all__: list[str] = ["CancellationScope"]
