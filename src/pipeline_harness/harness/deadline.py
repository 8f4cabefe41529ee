# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Global deadline timer.

The deadline is armed before the engine and the poller are started, which
guarantees that the race always has at least one signal that will resolve.
"""

from __future__ import annotations

import asyncio
import logging

from pipeline_harness.harness.completion_signal import CompletionSignal

logger = logging.getLogger(__name__)


class Deadline:
    """Timer that resolves a CompletionSignal after ``timeout_seconds``."""

    def __init__(self, timeout_seconds: float) -> None:
        self._timeout_seconds = timeout_seconds
        self.signal: CompletionSignal[None] = CompletionSignal("deadline")
        self._handle: asyncio.TimerHandle | None = None

    @classmethod
    def arm(cls, timeout_seconds: float) -> Deadline:
        """Create a deadline and start its timer immediately."""
        deadline = cls(timeout_seconds)
        loop = asyncio.get_running_loop()
        deadline._handle = loop.call_later(timeout_seconds, deadline._fire)
        logger.debug("Deadline armed (timeout=%ss)", timeout_seconds)
        return deadline

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    @property
    def expired(self) -> bool:
        return self.signal.is_resolved

    def disarm(self) -> None:
        """Stop the timer. A deadline that already fired stays expired."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self.signal.resolve(None):
            logger.warning("Deadline of %ss expired", self._timeout_seconds)


__all__: list[str] = ["Deadline"]
