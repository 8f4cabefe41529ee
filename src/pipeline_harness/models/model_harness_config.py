# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Harness Timing Configuration Model.

Environment Variables:
    PIPELINE_HARNESS_DEFAULT_TIMEOUT: Global deadline in seconds (default: 60)
    PIPELINE_HARNESS_CHECK_INTERVAL: Predicate polling interval (default: 0.1)
    PIPELINE_HARNESS_SHUTDOWN_TIMEOUT: Shutdown grace window (default: 5)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pipeline_harness.utils.util_env_parsing import parse_env_float

DEFAULT_TIMEOUT_SECONDS = 60.0
ASSERTION_CHECK_INTERVAL_SECONDS = 0.1
SHUTDOWN_TIMEOUT_SECONDS = 5.0
DEFAULT_LISTEN_HOST = "127.0.0.1"


class ModelHarnessConfig(BaseModel):
    """Timing and binding configuration shared by every harness run.

    Attributes:
        default_timeout_seconds: Global deadline for the whole race
        assertion_check_interval_seconds: Fixed predicate polling interval
        shutdown_timeout_seconds: Grace window after cancellation
        listen_host: Host the engine status server and capture sink bind to
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Global deadline for the whole race",
    )
    assertion_check_interval_seconds: float = Field(
        default=ASSERTION_CHECK_INTERVAL_SECONDS,
        gt=0,
        description="Fixed predicate polling interval",
    )
    shutdown_timeout_seconds: float = Field(
        default=SHUTDOWN_TIMEOUT_SECONDS,
        gt=0,
        description="Grace window after cancellation",
    )
    listen_host: str = Field(
        default=DEFAULT_LISTEN_HOST,
        description="Loopback host for the engine and the capture sink",
    )

    @classmethod
    def from_env(cls) -> ModelHarnessConfig:
        """Load config from environment variables, falling back to defaults."""
        return cls(
            default_timeout_seconds=parse_env_float(
                "PIPELINE_HARNESS_DEFAULT_TIMEOUT", DEFAULT_TIMEOUT_SECONDS
            ),
            assertion_check_interval_seconds=parse_env_float(
                "PIPELINE_HARNESS_CHECK_INTERVAL", ASSERTION_CHECK_INTERVAL_SECONDS
            ),
            shutdown_timeout_seconds=parse_env_float(
                "PIPELINE_HARNESS_SHUTDOWN_TIMEOUT", SHUTDOWN_TIMEOUT_SECONDS
            ),
        )


__all__ = [
    "ASSERTION_CHECK_INTERVAL_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
    "ModelHarnessConfig",
    "SHUTDOWN_TIMEOUT_SECONDS",
]
