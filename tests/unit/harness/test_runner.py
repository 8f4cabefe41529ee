# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for run_test_case() with fake engines.

The fake engines stand in for the pipeline engine so that each branch of
the race and of the shutdown handshake can be driven deterministically.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

import pytest

from pipeline_harness.engine.telemetry import MetricsTargets, get_default_targets
from pipeline_harness.enums import EnumRaceOutcome
from pipeline_harness.errors import (
    AssertionTimeoutError,
    ErrorVerificationError,
    HarnessDeadlineError,
    ShutdownTimeoutError,
)
from pipeline_harness.harness.runner import run_test_case
from pipeline_harness.harness.shutdown_coordinator import SHUTDOWN_OVERRUN_NOTE
from pipeline_harness.models import (
    ModelHarnessConfig,
    ModelLaunchArguments,
    ModelRuntimeHandle,
    ModelTestCaseSpec,
)
from pipeline_harness.utils.util_cancellation_scope import CancellationScope
from tests.helpers.fake_engines import (
    RecordingEngine,
    cooperative_engine,
    exiting_engine,
    failing_engine,
    failing_on_shutdown_engine,
    ignoring_engine,
    slow_shutdown_engine,
)

CONFIG = Path("pipeline.yaml")


class TestRunnerConverged:
    """Tests for the converged path."""

    async def test_no_predicate_converges_and_shuts_down(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test vacuous convergence followed by a clean handshake."""
        report = await run_test_case(
            ModelTestCaseSpec(config_source=CONFIG, require_clean_shutdown=True),
            fast_config,
            engine=cooperative_engine,
        )

        assert report.outcome is EnumRaceOutcome.CONVERGED
        assert report.shutdown_clean is True
        assert report.exit_error is None
        assert report.notes == ()
        assert report.rounds == 0

    async def test_predicate_converges_after_retries(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that the report records how many rounds convergence took."""
        rounds = 0

        def predicate(handle: ModelRuntimeHandle) -> list[str]:
            nonlocal rounds
            rounds += 1
            return [] if rounds >= 3 else [f"round {rounds} not ready"]

        report = await run_test_case(
            ModelTestCaseSpec(config_source=CONFIG, assertion_predicate=predicate),
            fast_config,
            engine=cooperative_engine,
        )

        assert report.outcome is EnumRaceOutcome.CONVERGED
        assert report.rounds == 3
        assert report.last_failures == ()

    async def test_expected_error_on_shutdown(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that an expected error raised during shutdown passes."""
        report = await run_test_case(
            ModelTestCaseSpec(
                config_source=CONFIG, expected_error_substring="flush failed"
            ),
            fast_config,
            engine=failing_on_shutdown_engine(RuntimeError("final flush failed")),
        )

        assert report.shutdown_clean is True
        assert report.exit_error == "final flush failed"

    async def test_unexpected_error_on_shutdown(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that an unexpected error raised during shutdown fails."""
        with pytest.raises(ErrorVerificationError, match="final flush failed"):
            await run_test_case(
                ModelTestCaseSpec(config_source=CONFIG),
                fast_config,
                engine=failing_on_shutdown_engine(RuntimeError("final flush failed")),
            )


class TestRunnerProcessExited:
    """Tests for the engine-exited path."""

    async def test_expected_startup_error(self, fast_config: ModelHarnessConfig) -> None:
        """Test that an expected startup failure passes without a handshake."""
        report = await run_test_case(
            ModelTestCaseSpec(
                config_source=CONFIG,
                expected_error_substring="no such file or directory",
                require_clean_shutdown=True,
            ),
            fast_config,
            engine=failing_engine(OSError("pipeline.yaml: no such file or directory")),
        )

        assert report.outcome is EnumRaceOutcome.PROCESS_EXITED
        assert report.shutdown_clean is None
        assert report.exit_error == "pipeline.yaml: no such file or directory"

    async def test_unexpected_startup_error(self, fast_config: ModelHarnessConfig) -> None:
        """Test that an unexpected startup failure is reported."""
        with pytest.raises(ErrorVerificationError, match="command returned unexpected error"):
            await run_test_case(
                ModelTestCaseSpec(config_source=CONFIG),
                fast_config,
                engine=failing_engine(RuntimeError("bind failed")),
            )

    async def test_clean_exit_with_expected_error(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that a clean exit fails when an error was expected."""
        with pytest.raises(ErrorVerificationError, match="returned no error"):
            await run_test_case(
                ModelTestCaseSpec(
                    config_source=CONFIG,
                    assertion_predicate=lambda handle: ["never converges"],
                    expected_error_substring="boom",
                ),
                fast_config,
                engine=exiting_engine(after_seconds=0.05),
            )

    async def test_exit_before_convergence_skips_predicate_result(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that an exit during polling is verified, not the predicate."""
        report = await run_test_case(
            ModelTestCaseSpec(
                config_source=CONFIG,
                assertion_predicate=lambda handle: ["still failing"],
                expected_error_substring="crashed",
            ),
            fast_config,
            engine=failing_engine(RuntimeError("crashed"), after_seconds=0.05),
        )

        assert report.outcome is EnumRaceOutcome.PROCESS_EXITED
        assert report.last_failures == ("still failing",)


class TestRunnerDeadline:
    """Tests for deadline expiry."""

    async def test_deadline_with_failing_predicate(self) -> None:
        """Test that the most recent round's failures are reported."""
        config = ModelHarnessConfig(
            default_timeout_seconds=0.2,
            assertion_check_interval_seconds=0.01,
            shutdown_timeout_seconds=0.5,
        )

        with pytest.raises(AssertionTimeoutError) as exc_info:
            await run_test_case(
                ModelTestCaseSpec(
                    config_source=CONFIG,
                    assertion_predicate=lambda handle: ["expected 1 target, got 0.0"],
                ),
                config,
                engine=cooperative_engine,
            )

        assert exc_info.value.last_failures == ("expected 1 target, got 0.0",)
        assert exc_info.value.rounds > 1
        assert "expected 1 target, got 0.0" in str(exc_info.value)

    async def test_deadline_without_completed_round(self) -> None:
        """Test the plain deadline error when no round ever finished."""
        config = ModelHarnessConfig(
            default_timeout_seconds=0.1,
            assertion_check_interval_seconds=0.01,
            shutdown_timeout_seconds=0.5,
        )

        async def hung(handle: ModelRuntimeHandle) -> None:
            await asyncio.sleep(3600)

        with pytest.raises(HarnessDeadlineError) as exc_info:
            await run_test_case(
                ModelTestCaseSpec(config_source=CONFIG, assertion_predicate=hung),
                config,
                engine=cooperative_engine,
            )

        assert not isinstance(exc_info.value, AssertionTimeoutError)
        assert "failed to complete within deadline" in str(exc_info.value)

    async def test_deadline_fires_during_blocking_predicate(self) -> None:
        """Test that a sync predicate stuck in a blocking call cannot hold the race."""
        config = ModelHarnessConfig(
            default_timeout_seconds=0.2,
            assertion_check_interval_seconds=0.01,
            shutdown_timeout_seconds=0.5,
        )

        def blocking(handle: ModelRuntimeHandle) -> list[str]:
            time.sleep(1.5)
            return ["slow"]

        started = time.monotonic()
        with pytest.raises(HarnessDeadlineError):
            await run_test_case(
                ModelTestCaseSpec(config_source=CONFIG, assertion_predicate=blocking),
                config,
                engine=cooperative_engine,
            )

        assert time.monotonic() - started < 1.0


class TestRunnerShutdownOverrun:
    """Tests for the shutdown grace window."""

    async def test_overrun_fatal_when_clean_shutdown_required(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that a slow engine fails a strict test case."""
        with pytest.raises(ShutdownTimeoutError):
            await run_test_case(
                ModelTestCaseSpec(config_source=CONFIG, require_clean_shutdown=True),
                fast_config,
                engine=slow_shutdown_engine(2.0),
            )

    async def test_overrun_tolerated_when_not_required(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that a slow engine only adds a note to a lenient test case."""
        report = await run_test_case(
            ModelTestCaseSpec(config_source=CONFIG),
            fast_config,
            engine=ignoring_engine,
        )

        assert report.outcome is EnumRaceOutcome.CONVERGED
        assert report.shutdown_clean is False
        assert report.notes == (SHUTDOWN_OVERRUN_NOTE,)


class TestRunnerResources:
    """Tests for per-run resources and their release."""

    async def test_engine_receives_runtime_arguments(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that the engine is launched against the runtime handle."""
        engine = RecordingEngine()

        await run_test_case(
            ModelTestCaseSpec(config_source=CONFIG), fast_config, engine=engine
        )

        (arguments,) = engine.calls
        assert arguments.config_path == CONFIG
        assert arguments.listen_host == "127.0.0.1"
        assert arguments.listen_port > 0
        assert arguments.variables["remote_write_url"].startswith("http://127.0.0.1:")
        assert arguments.variables["remote_write_url"].endswith("/api/v1/write")
        assert arguments.variables["listen_address"] == arguments.listen_address
        assert not arguments.storage_path.exists()
        assert engine.cancel_reasons == ["assertions converged"]

    async def test_metrics_targets_restored_after_failure(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that a failing run does not leak its metrics scope."""
        previous = get_default_targets()

        with pytest.raises(ErrorVerificationError):
            await run_test_case(
                ModelTestCaseSpec(config_source=CONFIG),
                fast_config,
                engine=failing_engine(RuntimeError("boom")),
            )

        assert get_default_targets() is previous

    async def test_engine_sees_scoped_metrics_targets(
        self, fast_config: ModelHarnessConfig
    ) -> None:
        """Test that the engine runs against a test-local registry."""
        outside = get_default_targets()
        seen: list[MetricsTargets] = []

        async def engine(
            arguments: ModelLaunchArguments, scope: CancellationScope
        ) -> None:
            seen.append(get_default_targets())
            await scope.wait()

        await run_test_case(ModelTestCaseSpec(config_source=CONFIG), fast_config, engine=engine)

        assert seen[0] is not outside
        assert seen[0].registerer is seen[0].gatherer

    async def test_predicate_sees_live_sink(self, fast_config: ModelHarnessConfig) -> None:
        """Test that the predicate can query the running capture sink."""
        observed: list[float] = []

        def predicate(handle: ModelRuntimeHandle) -> None:
            assert handle.sink.is_running
            observed.append(handle.sink.find_last_sample_matching("up"))

        await run_test_case(
            ModelTestCaseSpec(config_source=CONFIG, assertion_predicate=predicate),
            fast_config,
            engine=cooperative_engine,
        )

        assert observed == [0.0]
