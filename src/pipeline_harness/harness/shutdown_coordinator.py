# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shutdown handshake for the converged path.

Cancels the engine through the shared cancellation scope, then races a
bounded grace window against the launcher's completion signal:

    - Engine exits first: its exit error is verified.
    - Grace window expires first: fatal (ShutdownTimeoutError) when the test
      case requires a clean shutdown, otherwise a warning and a note.
"""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from pipeline_harness.enums import EnumHarnessPhase
from pipeline_harness.errors import ModelHarnessErrorContext, ShutdownTimeoutError
from pipeline_harness.harness.completion_signal import CompletionSignal
from pipeline_harness.harness.error_verifier import verify_exit_error
from pipeline_harness.models import ModelShutdownResult, ModelTestCaseSpec
from pipeline_harness.utils.util_cancellation_scope import CancellationScope

logger = logging.getLogger(__name__)

SHUTDOWN_OVERRUN_NOTE = "engine failed to shut down within deadline"


class ShutdownCoordinator:
    """Cancel-then-wait handshake with a bounded grace window."""

    def __init__(
        self,
        cancellation_scope: CancellationScope,
        launcher_done: CompletionSignal[BaseException | None],
        test_case: ModelTestCaseSpec,
        grace_seconds: float,
        *,
        correlation_id: UUID | None = None,
    ) -> None:
        self._scope = cancellation_scope
        self._launcher_done = launcher_done
        self._test_case = test_case
        self._grace_seconds = grace_seconds
        self._correlation_id = correlation_id

    async def shutdown(self) -> ModelShutdownResult:
        """Run the handshake.

        Returns:
            The handshake result. ``clean`` is False only when an overrun was
            tolerated.

        Raises:
            ShutdownTimeoutError: Grace window overrun with clean shutdown required.
            ErrorVerificationError: Engine exited in time with an unexpected error.
        """
        logger.info(
            "Cancelling engine, waiting up to %ss for exit (correlation_id=%s)",
            self._grace_seconds,
            self._correlation_id,
        )
        self._scope.cancel("assertions converged")

        try:
            exit_error = await asyncio.wait_for(
                self._launcher_done.wait(), timeout=self._grace_seconds
            )
        except TimeoutError:
            if self._test_case.require_clean_shutdown:
                raise ShutdownTimeoutError(
                    self._grace_seconds,
                    context=ModelHarnessErrorContext(
                        phase=EnumHarnessPhase.SHUTDOWN,
                        operation="await_engine_exit",
                        target_name=str(self._test_case.config_source),
                        correlation_id=self._correlation_id,
                    ),
                ) from None
            logger.warning(
                "%s (grace=%ss, correlation_id=%s)",
                SHUTDOWN_OVERRUN_NOTE,
                self._grace_seconds,
                self._correlation_id,
            )
            return ModelShutdownResult(clean=False, note=SHUTDOWN_OVERRUN_NOTE)

        verify_exit_error(
            self._test_case.expected_error_substring,
            exit_error,
            correlation_id=self._correlation_id,
        )
        return ModelShutdownResult(clean=True, exit_error=exit_error)


__all__: list[str] = ["SHUTDOWN_OVERRUN_NOTE", "ShutdownCoordinator"]
