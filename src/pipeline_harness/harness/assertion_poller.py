# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Assertion poller.

Evaluates a predicate against the runtime handle at a fixed interval until a
round reports zero failures. The engine changes its state asynchronously and
offers no push interface, so convergence is detected by retrying rather than
by notification.

Polling Semantics:
    - No predicate: ``done`` resolves on the poller's first step (vacuous
      convergence).
    - Each round's failures replace the previous round's; only the most recent
      round is kept for diagnostics.
    - Coroutine predicates are awaited on the loop; plain callables run in a
      worker thread, so a blocking predicate cannot stall the race.
    - A predicate that raises (including a bare ``assert``) counts as one
      failure for that round.
    - The poller does not enforce a deadline. It checks its stop flag on every
      iteration and exits promptly once ``stop()`` is called.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from uuid import UUID

from pipeline_harness.harness.completion_signal import CompletionSignal
from pipeline_harness.models import ModelRuntimeHandle

logger = logging.getLogger(__name__)

PredicateResult = Sequence[str] | str | None
Predicate = Callable[
    [ModelRuntimeHandle],
    PredicateResult | Awaitable[PredicateResult],
]


class AssertionPoller:
    """Retries a predicate until it converges.

    Attributes:
        done: Resolves exactly once, with the (empty) failures of the
            converging round.
    """

    def __init__(
        self,
        predicate: Predicate | None,
        handle: ModelRuntimeHandle,
        interval_seconds: float,
        *,
        correlation_id: UUID | None = None,
    ) -> None:
        self._predicate = predicate
        self._handle = handle
        self._interval_seconds = interval_seconds
        self._correlation_id = correlation_id
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._last_failures: tuple[str, ...] = ()
        self._rounds = 0
        self.done: CompletionSignal[tuple[str, ...]] = CompletionSignal("poller")

    @property
    def has_predicate(self) -> bool:
        return self._predicate is not None

    @property
    def last_failures(self) -> tuple[str, ...]:
        """Failures reported by the most recent round."""
        return self._last_failures

    @property
    def rounds(self) -> int:
        """Number of completed evaluation rounds."""
        return self._rounds

    def start(self) -> None:
        if self._task is not None:
            raise RuntimeError("AssertionPoller already started")
        self._task = asyncio.create_task(self._run(), name="assertion-poller")

    def stop(self) -> None:
        """Ask the poller to exit after its current round."""
        self._stop.set()

    async def wait_stopped(self, timeout_seconds: float) -> None:
        """Stop the poller and wait for its task, cancelling it on overrun."""
        self.stop()
        if self._task is None or self._task.done():
            return
        done, _ = await asyncio.wait({self._task}, timeout=timeout_seconds)
        if not done:
            logger.warning(
                "Assertion poller did not stop within %ss, cancelling "
                "(correlation_id=%s)",
                timeout_seconds,
                self._correlation_id,
            )
            self._task.cancel()
            await asyncio.wait({self._task})

    async def _run(self) -> None:
        if self._predicate is None:
            logger.debug(
                "No assertion predicate, converged immediately (correlation_id=%s)",
                self._correlation_id,
            )
            self.done.resolve(())
            return

        predicate = self._predicate
        while not self._stop.is_set():
            failures = await self._evaluate(predicate)
            self._rounds += 1
            self._last_failures = failures

            if not failures:
                logger.info(
                    "Assertions converged after %d round(s) (correlation_id=%s)",
                    self._rounds,
                    self._correlation_id,
                )
                self.done.resolve(failures)
                return

            logger.debug(
                "Assertion round %d reported %d failure(s) (correlation_id=%s)",
                self._rounds,
                len(failures),
                self._correlation_id,
                extra={"failures": list(failures)},
            )
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval_seconds)
            except TimeoutError:
                continue

    async def _evaluate(self, predicate: Predicate) -> tuple[str, ...]:
        try:
            if inspect.iscoroutinefunction(predicate):
                result = await predicate(self._handle)
            else:
                # Sync predicates may block; keep the loop free for the deadline.
                result = await asyncio.to_thread(predicate, self._handle)
                if inspect.isawaitable(result):
                    result = await result
        except Exception as e:
            return (f"{type(e).__name__}: {e}",)

        if not result:
            return ()
        if isinstance(result, str):
            return (result,)
        return tuple(str(failure) for failure in result)


__all__: list[str] = ["AssertionPoller", "Predicate", "PredicateResult"]
