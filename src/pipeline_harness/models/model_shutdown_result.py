# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shutdown Handshake Result Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelShutdownResult(BaseModel):
    """Outcome of the cancel-then-wait shutdown handshake.

    Attributes:
        clean: True if the engine exited inside the grace window
        exit_error: The engine's terminal error when it exited in time
        note: Diagnostic note recorded when the overrun was tolerated
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    clean: bool
    exit_error: BaseException | None = Field(default=None)
    note: str | None = Field(default=None)


__all__ = ["ModelShutdownResult"]
