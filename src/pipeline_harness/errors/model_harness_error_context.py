# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Harness Error Context Configuration Model.

This module defines the configuration model for harness error context,
encapsulating common structured fields to reduce __init__ parameter count
while maintaining strong typing.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from pipeline_harness.enums import EnumHarnessPhase


class ModelHarnessErrorContext(BaseModel):
    """Configuration model for harness and engine error context.

    Attributes:
        phase: Harness lifecycle phase in which the error was raised
        operation: Operation being performed (load_config, bind, verify, etc.)
        target_name: Target resource (config path, listen address, component id)
        correlation_id: Correlation ID of the harness run or engine bootstrap

    Example:
        >>> context = ModelHarnessErrorContext(
        ...     phase=EnumHarnessPhase.SHUTDOWN,
        ...     operation="await_engine_exit",
        ...     target_name="127.0.0.1:41234",
        ...     correlation_id=uuid4(),
        ... )
        >>> raise ShutdownTimeoutError(5.0, context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    phase: EnumHarnessPhase | None = Field(
        default=None,
        description="Harness lifecycle phase in which the error was raised",
    )
    operation: str | None = Field(
        default=None,
        description="Operation being performed",
    )
    target_name: str | None = Field(
        default=None,
        description="Target resource, endpoint or component id",
    )
    correlation_id: UUID | None = Field(
        default=None,
        description="Correlation ID of the harness run or engine bootstrap",
    )


__all__ = ["ModelHarnessErrorContext"]
