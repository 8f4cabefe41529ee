# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Race between the global deadline, assertion convergence and engine exit.

The coordinator waits for the first of three single-resolution signals and
turns it into exactly one ModelRaceResult. Whatever is still in flight
afterwards is abandoned; its eventual resolution is ignored.

Tie-Breaking:
    ``asyncio.wait`` may report several signals at once when they resolve in
    the same loop iteration. They are then inspected in a fixed order:

    1. deadline  - expiry is always fatal, it must never be masked
    2. launcher  - a process that is already gone needs no shutdown handshake
    3. poller    - assertions converged
"""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from pipeline_harness.enums import EnumRaceOutcome
from pipeline_harness.harness.completion_signal import CompletionSignal
from pipeline_harness.models import ModelRaceResult

logger = logging.getLogger(__name__)


class RaceCoordinator:
    """Single-use multi-wait over deadline, poller and launcher signals."""

    def __init__(
        self,
        deadline: CompletionSignal[None],
        poller_done: CompletionSignal[tuple[str, ...]],
        launcher_done: CompletionSignal[BaseException | None],
        *,
        correlation_id: UUID | None = None,
    ) -> None:
        self._deadline = deadline
        self._poller_done = poller_done
        self._launcher_done = launcher_done
        self._correlation_id = correlation_id
        self._result: ModelRaceResult | None = None

    @property
    def result(self) -> ModelRaceResult | None:
        """The decided outcome, or None before wait_first() returns."""
        return self._result

    async def wait_first(self) -> ModelRaceResult:
        """Block until one signal resolves and return the decided outcome.

        Calling it again returns the same result without waiting.
        """
        if self._result is not None:
            return self._result

        await asyncio.wait(
            {
                self._deadline.as_future(),
                self._poller_done.as_future(),
                self._launcher_done.as_future(),
            },
            return_when=asyncio.FIRST_COMPLETED,
        )

        if self._deadline.is_resolved:
            result = ModelRaceResult(outcome=EnumRaceOutcome.DEADLINE_EXCEEDED)
        elif self._launcher_done.is_resolved:
            result = ModelRaceResult(
                outcome=EnumRaceOutcome.PROCESS_EXITED,
                exit_error=self._launcher_done.result(),
            )
        else:
            result = ModelRaceResult(outcome=EnumRaceOutcome.CONVERGED)

        logger.info(
            "Race decided: %s (correlation_id=%s)",
            result.outcome.value,
            self._correlation_id,
        )
        self._result = result
        return result


__all__: list[str] = ["RaceCoordinator"]
