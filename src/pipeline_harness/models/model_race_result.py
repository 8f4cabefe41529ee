# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Race Result Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pipeline_harness.enums import EnumRaceOutcome


class ModelRaceResult(BaseModel):
    """The single outcome of one race.

    Attributes:
        outcome: Which signal resolved first
        exit_error: Terminal engine error, only meaningful for PROCESS_EXITED
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    outcome: EnumRaceOutcome
    exit_error: BaseException | None = Field(default=None)


__all__ = ["ModelRaceResult"]
