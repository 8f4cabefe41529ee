# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Harness Report Model."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from pipeline_harness.enums import EnumRaceOutcome


class ModelHarnessReport(BaseModel):
    """Summary of a passing harness run.

    Failing runs raise instead of returning a report.

    Attributes:
        outcome: Which race signal decided the run
        shutdown_clean: True if the engine exited inside the grace window,
            False if it overran it, None if no handshake took place
        exit_error: ``str()`` of the verified exit error, if any
        notes: Non-fatal diagnostic notes recorded during the run
        last_failures: Failures of the last predicate round before convergence
        rounds: Number of predicate evaluation rounds
        duration_seconds: Wall time from launch to verification
        correlation_id: Correlation ID of the run
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    outcome: EnumRaceOutcome
    shutdown_clean: bool | None = None
    exit_error: str | None = None
    notes: tuple[str, ...] = Field(default_factory=tuple)
    last_failures: tuple[str, ...] = Field(default_factory=tuple)
    rounds: int = 0
    duration_seconds: float = 0.0
    correlation_id: UUID


__all__ = ["ModelHarnessReport"]
