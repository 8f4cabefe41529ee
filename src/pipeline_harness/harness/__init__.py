# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Integration harness for the pipeline engine.

Components:
    - ProcessLauncher: Runs the engine as a cancellable task
    - AssertionPoller: Retries the test predicate at a fixed interval
    - RaceCoordinator: First of deadline / convergence / engine exit
    - ShutdownCoordinator: Cancel-then-wait handshake with bounded grace
    - MetricsScope: Test-local default metrics registry
    - error_verifier: Exit error vs. expected substring

Entry point:
    run_test_case(): Runs one ModelTestCaseSpec end to end
"""

from pipeline_harness.harness.assertion_poller import (
    AssertionPoller,
    Predicate,
    PredicateResult,
)
from pipeline_harness.harness.completion_signal import CompletionSignal
from pipeline_harness.harness.deadline import Deadline
from pipeline_harness.harness.error_verifier import error_matches, verify_exit_error
from pipeline_harness.harness.metrics_scope import MetricsScope
from pipeline_harness.harness.process_launcher import EngineEntrypoint, ProcessLauncher
from pipeline_harness.harness.race_coordinator import RaceCoordinator
from pipeline_harness.harness.runner import run_test_case
from pipeline_harness.harness.runtime_context import reserve_free_port, runtime_context
from pipeline_harness.harness.shutdown_coordinator import (
    SHUTDOWN_OVERRUN_NOTE,
    ShutdownCoordinator,
)
from pipeline_harness.harness.soft_assertions import SoftAssertions

__all__: list[str] = [
    "SHUTDOWN_OVERRUN_NOTE",
    "AssertionPoller",
    "CompletionSignal",
    "Deadline",
    "EngineEntrypoint",
    "MetricsScope",
    "Predicate",
    "PredicateResult",
    "ProcessLauncher",
    "RaceCoordinator",
    "ShutdownCoordinator",
    "SoftAssertions",
    "error_matches",
    "reserve_free_port",
    "run_test_case",
    "runtime_context",
    "verify_exit_error",
]
