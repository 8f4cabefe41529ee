# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Test case runner.

Wires the harness components together for one test case:

    1. MetricsScope acquired (fresh default registry for the engine)
    2. Runtime context acquired (port, storage directory, capture sink)
    3. Global deadline armed
    4. Engine launched, assertion poller started
    5. Race decided:
        - deadline:  fatal, AssertionTimeoutError / HarnessDeadlineError
        - converged: shutdown handshake, then exit error verification
        - exited:    exit error verification, no handshake
    6. Teardown: poller stopped, leftover engine task reaped, runtime
       context and metrics scope released in reverse order

Usage:
    >>> report = await run_test_case(
    ...     ModelTestCaseSpec(config_source=Path("testdata/empty.yaml"),
    ...                       require_clean_shutdown=True),
    ... )
    >>> report.outcome
    <EnumRaceOutcome.CONVERGED: 'converged'>
"""

from __future__ import annotations

import logging
import time
from uuid import UUID

from pipeline_harness.engine.kernel import run_engine
from pipeline_harness.enums import EnumHarnessPhase, EnumRaceOutcome
from pipeline_harness.errors import (
    AssertionTimeoutError,
    HarnessDeadlineError,
    ModelHarnessErrorContext,
)
from pipeline_harness.harness.assertion_poller import AssertionPoller
from pipeline_harness.harness.deadline import Deadline
from pipeline_harness.harness.error_verifier import verify_exit_error
from pipeline_harness.harness.metrics_scope import MetricsScope
from pipeline_harness.harness.process_launcher import EngineEntrypoint, ProcessLauncher
from pipeline_harness.harness.race_coordinator import RaceCoordinator
from pipeline_harness.harness.runtime_context import runtime_context
from pipeline_harness.harness.shutdown_coordinator import ShutdownCoordinator
from pipeline_harness.models import (
    ModelHarnessConfig,
    ModelHarnessReport,
    ModelLaunchArguments,
    ModelRaceResult,
    ModelTestCaseSpec,
)
from pipeline_harness.utils.correlation import generate_correlation_id
from pipeline_harness.utils.util_cancellation_scope import CancellationScope

logger = logging.getLogger(__name__)


async def run_test_case(
    test_case: ModelTestCaseSpec,
    config: ModelHarnessConfig | None = None,
    *,
    engine: EngineEntrypoint | None = None,
) -> ModelHarnessReport:
    """Run one test case against the engine and return its report.

    Args:
        test_case: Declarative test case.
        config: Timing configuration. Defaults to ``ModelHarnessConfig.from_env()``.
        engine: Engine entrypoint. Defaults to the reference engine.

    Returns:
        Report of the passing run.

    Raises:
        HarnessDeadlineError: The global deadline expired first.
        AssertionTimeoutError: The deadline expired while the predicate was
            still failing.
        ShutdownTimeoutError: Clean shutdown required but the grace window
            was overrun.
        ErrorVerificationError: The exit error did not match the expectation.
    """
    config = config or ModelHarnessConfig.from_env()
    entrypoint = engine or run_engine
    correlation_id = generate_correlation_id()
    started_at = time.monotonic()

    logger.info(
        "Running test case %s (correlation_id=%s)",
        test_case.config_source,
        correlation_id,
        extra={
            "has_predicate": test_case.assertion_predicate is not None,
            "expected_error_substring": test_case.expected_error_substring,
            "require_clean_shutdown": test_case.require_clean_shutdown,
        },
    )

    with MetricsScope():
        async with runtime_context(config) as handle:
            deadline = Deadline.arm(config.default_timeout_seconds)
            scope = CancellationScope()
            launcher = ProcessLauncher(
                entrypoint,
                ModelLaunchArguments(
                    config_path=test_case.config_source,
                    listen_address=handle.listen_address,
                    storage_path=handle.storage_path,
                    variables=handle.config_variables(),
                ),
                scope,
                correlation_id=correlation_id,
            )
            poller = AssertionPoller(
                test_case.assertion_predicate,
                handle,
                config.assertion_check_interval_seconds,
                correlation_id=correlation_id,
            )

            try:
                launcher.start()
                poller.start()
                race = RaceCoordinator(
                    deadline.signal,
                    poller.done,
                    launcher.done,
                    correlation_id=correlation_id,
                )
                result = await race.wait_first()
                poller.stop()

                if result.outcome is EnumRaceOutcome.DEADLINE_EXCEEDED:
                    raise _deadline_error(
                        config.default_timeout_seconds, poller, test_case, correlation_id
                    )

                if result.outcome is EnumRaceOutcome.PROCESS_EXITED:
                    verify_exit_error(
                        test_case.expected_error_substring,
                        result.exit_error,
                        correlation_id=correlation_id,
                    )
                    return _report(result, poller, started_at, correlation_id)

                logger.info(
                    "assertion checks done, shutting down engine (correlation_id=%s)",
                    correlation_id,
                )
                shutdown = await ShutdownCoordinator(
                    scope,
                    launcher.done,
                    test_case,
                    config.shutdown_timeout_seconds,
                    correlation_id=correlation_id,
                ).shutdown()
                return _report(
                    result,
                    poller,
                    started_at,
                    correlation_id,
                    shutdown_clean=shutdown.clean,
                    exit_error=shutdown.exit_error,
                    notes=(shutdown.note,) if shutdown.note else (),
                )
            finally:
                deadline.disarm()
                await poller.wait_stopped(config.assertion_check_interval_seconds * 10)
                await launcher.reap(config.shutdown_timeout_seconds)


def _deadline_error(
    timeout_seconds: float,
    poller: AssertionPoller,
    test_case: ModelTestCaseSpec,
    correlation_id: UUID,
) -> HarnessDeadlineError:
    context = ModelHarnessErrorContext(
        phase=EnumHarnessPhase.RACE,
        operation="wait_first_signal",
        target_name=str(test_case.config_source),
        correlation_id=correlation_id,
    )
    if poller.rounds > 0:
        return AssertionTimeoutError(
            timeout_seconds,
            last_failures=poller.last_failures,
            rounds=poller.rounds,
            context=context,
        )
    return HarnessDeadlineError(timeout_seconds, context=context)


def _report(
    result: ModelRaceResult,
    poller: AssertionPoller,
    started_at: float,
    correlation_id: UUID,
    *,
    shutdown_clean: bool | None = None,
    exit_error: BaseException | None = None,
    notes: tuple[str, ...] = (),
) -> ModelHarnessReport:
    error = exit_error if exit_error is not None else result.exit_error
    report = ModelHarnessReport(
        outcome=result.outcome,
        shutdown_clean=shutdown_clean,
        exit_error=str(error) if error is not None else None,
        notes=notes,
        last_failures=poller.last_failures,
        rounds=poller.rounds,
        duration_seconds=time.monotonic() - started_at,
        correlation_id=correlation_id,
    )
    logger.info(
        "Test case passed: %s in %.3fs (correlation_id=%s)",
        report.outcome.value,
        report.duration_seconds,
        correlation_id,
    )
    return report


__all__: list[str] = ["run_test_case"]
