# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Engine launcher.

Starts the pipeline engine as an independent asyncio task and reports its
terminal error through a single-resolution CompletionSignal. There is no
retry: a launch failure is a terminal condition reported the same way as any
other exit.

Engine Entrypoint Contract:
    ``async def engine(arguments: ModelLaunchArguments, scope: CancellationScope) -> None``

    - Runs until ``scope`` is cancelled, then shuts down and returns None
    - Reports failures by raising; the exception becomes the exit error
    - Binds ``arguments.listen_address`` and writes below ``arguments.storage_path``
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from uuid import UUID

from pipeline_harness.harness.completion_signal import CompletionSignal
from pipeline_harness.models import ModelLaunchArguments
from pipeline_harness.utils.util_cancellation_scope import CancellationScope

logger = logging.getLogger(__name__)

EngineEntrypoint = Callable[[ModelLaunchArguments, CancellationScope], Awaitable[None]]


class ProcessLauncher:
    """Runs one engine invocation as a task with a completion signal.

    Attributes:
        done: Resolves exactly once with the terminal error, or None.

    Example:
        >>> launcher = ProcessLauncher(run_engine, arguments, scope)
        >>> launcher.start()
        >>> exit_error = await launcher.done.wait()
    """

    def __init__(
        self,
        entrypoint: EngineEntrypoint,
        arguments: ModelLaunchArguments,
        cancellation_scope: CancellationScope,
        *,
        correlation_id: UUID | None = None,
    ) -> None:
        self._entrypoint = entrypoint
        self._arguments = arguments
        self._scope = cancellation_scope
        self._correlation_id = correlation_id
        self._task: asyncio.Task[None] | None = None
        self._started_at: float | None = None
        self.done: CompletionSignal[BaseException | None] = CompletionSignal(
            "launcher"
        )

    @property
    def arguments(self) -> ModelLaunchArguments:
        return self._arguments

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Create the engine task and return immediately.

        Raises:
            RuntimeError: If the launcher was already started.
        """
        if self._task is not None:
            raise RuntimeError("ProcessLauncher already started")

        logger.info(
            "Launching engine: %s (correlation_id=%s)",
            " ".join(self._arguments.to_argv()),
            self._correlation_id,
        )
        self._started_at = time.monotonic()
        self._task = asyncio.create_task(
            self._run(),
            name=f"pipeline-engine-{self._arguments.listen_address}",
        )

    async def _run(self) -> None:
        try:
            await self._entrypoint(self._arguments, self._scope)
        except asyncio.CancelledError as e:
            self._finish(e)
            raise
        except Exception as e:
            self._finish(e)
        else:
            self._finish(None)

    def _finish(self, error: BaseException | None) -> None:
        duration = time.monotonic() - (self._started_at or time.monotonic())
        if error is None:
            logger.info(
                "Engine exited cleanly after %.3fs (correlation_id=%s)",
                duration,
                self._correlation_id,
            )
        else:
            logger.info(
                "Engine exited with %s after %.3fs: %s (correlation_id=%s)",
                type(error).__name__,
                duration,
                error,
                self._correlation_id,
                extra={"error_type": type(error).__name__},
            )
        self.done.resolve(error)

    async def reap(self, timeout_seconds: float) -> None:
        """Make sure the engine task does not outlive the test.

        Cancels the scope, waits up to ``timeout_seconds`` for the engine to
        return, then cancels the task outright. Used during teardown only.
        """
        if self._task is None or self._task.done():
            return

        self._scope.cancel("harness teardown")
        done, _ = await asyncio.wait({self._task}, timeout=timeout_seconds)
        if done:
            return

        logger.warning(
            "Engine still running %ss after teardown cancellation, cancelling task "
            "(correlation_id=%s)",
            timeout_seconds,
            self._correlation_id,
        )
        self._task.cancel()
        await asyncio.wait({self._task})


__all__: list[str] = ["EngineEntrypoint", "ProcessLauncher"]
