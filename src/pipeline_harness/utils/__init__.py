# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Utility modules for the pipeline harness.

This package provides common utilities used across the harness and engine:
    - correlation: Correlation ID generation for tracing a single test run
    - util_env_parsing: Type-safe environment variable parsing with validation
    - util_cancellation_scope: Monotonic cancellation shared with the engine
"""

from pipeline_harness.utils.correlation import generate_correlation_id
from pipeline_harness.utils.util_cancellation_scope import CancellationScope
from pipeline_harness.utils.util_env_parsing import (
    parse_env_float,
    parse_env_log_level,
)

__all__: list[str] = [
    "CancellationScope",
    "generate_correlation_id",
    "parse_env_float",
    "parse_env_log_level",
]
