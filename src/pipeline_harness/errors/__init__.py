# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pipeline Harness Errors Module.

Exports:
    ModelHarnessErrorContext: Configuration model for bundled error context
    HarnessError: Base harness error class
    HarnessDeadlineError: Global deadline expired (always fatal)
    AssertionTimeoutError: Deadline expired before assertions converged
    ShutdownTimeoutError: Engine did not exit within the grace window
    ErrorVerificationError: Exit error did not match the expectation
    EngineError: Base reference engine error class
    EngineConfigurationError: Pipeline configuration could not be loaded
    EngineStartError: Engine could not start

Fatal conditions abort the current test case only. Sibling test cases are
unaffected because each run owns its metrics scope, storage directory and
network endpoint.
"""

from pipeline_harness.errors.engine_errors import (
    EngineConfigurationError,
    EngineError,
    EngineStartError,
)
from pipeline_harness.errors.harness_errors import (
    AssertionTimeoutError,
    ErrorVerificationError,
    HarnessDeadlineError,
    HarnessError,
    ShutdownTimeoutError,
)
from pipeline_harness.errors.model_harness_error_context import (
    ModelHarnessErrorContext,
)

__all__: list[str] = [
    # Configuration model
    "ModelHarnessErrorContext",
    # Harness errors
    "HarnessError",
    "HarnessDeadlineError",
    "AssertionTimeoutError",
    "ShutdownTimeoutError",
    "ErrorVerificationError",
    # Engine errors
    "EngineError",
    "EngineConfigurationError",
    "EngineStartError",
]
