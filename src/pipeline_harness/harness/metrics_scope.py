# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Scoped swap of the process-wide default metrics targets.

Before a test runs, the default registerer and gatherer are replaced with a
fresh, test-local ``CollectorRegistry`` so that metrics emitted by the engine
under test neither leak into nor collide with other tests. The previous
targets are restored unconditionally when the scope is released, including
when the test fails or raises.

This is the only global mutable state the harness touches. Tests that use
it must not run concurrently inside one process.

Example:
    >>> with MetricsScope() as registry:
    ...     await run_engine(arguments, scope)  # registers on ``registry``
    >>> # previous defaults are back in place
"""

from __future__ import annotations

import logging
from types import TracebackType

from prometheus_client import CollectorRegistry

from pipeline_harness.engine.telemetry import MetricsTargets, set_default_targets

logger = logging.getLogger(__name__)


class MetricsScope:
    """Paired acquire/release of a test-local metrics registry."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry if registry is not None else CollectorRegistry()
        self._previous: MetricsTargets | None = None

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    @property
    def is_acquired(self) -> bool:
        return self._previous is not None

    def acquire(self) -> CollectorRegistry:
        """Install the scope's registry as the default targets.

        Raises:
            RuntimeError: If the scope is already acquired.
        """
        if self._previous is not None:
            raise RuntimeError("MetricsScope is already acquired")
        self._previous = set_default_targets(
            MetricsTargets(registerer=self._registry, gatherer=self._registry)
        )
        logger.debug("Metrics scope acquired")
        return self._registry

    def release(self) -> None:
        """Restore the targets that were active at acquire time. Idempotent."""
        if self._previous is None:
            return
        set_default_targets(self._previous)
        self._previous = None
        logger.debug("Metrics scope released")

    def __enter__(self) -> CollectorRegistry:
        return self.acquire()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()


__all__: list[str] = ["MetricsScope"]
