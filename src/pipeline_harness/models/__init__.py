# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pipeline Harness Models.

Exports:
    ModelHarnessConfig: Timing configuration (deadline, interval, grace)
    ModelHarnessReport: Summary of a passing run
    ModelLaunchArguments: Resolved engine invocation arguments
    ModelRaceResult: Single outcome of a race
    ModelRuntimeHandle: Read-only view of the running engine
    ModelShutdownResult: Outcome of the shutdown handshake
    ModelTestCaseSpec: Declarative test case
"""

from pipeline_harness.models.model_harness_config import ModelHarnessConfig
from pipeline_harness.models.model_harness_report import ModelHarnessReport
from pipeline_harness.models.model_launch_arguments import ModelLaunchArguments
from pipeline_harness.models.model_race_result import ModelRaceResult
from pipeline_harness.models.model_runtime_handle import ModelRuntimeHandle
from pipeline_harness.models.model_shutdown_result import ModelShutdownResult
from pipeline_harness.models.model_test_case_spec import ModelTestCaseSpec

__all__: list[str] = [
    "ModelHarnessConfig",
    "ModelHarnessReport",
    "ModelLaunchArguments",
    "ModelRaceResult",
    "ModelRuntimeHandle",
    "ModelShutdownResult",
    "ModelTestCaseSpec",
]
