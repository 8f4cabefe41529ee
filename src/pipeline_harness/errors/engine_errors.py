# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Reference Engine Error Classes.

Error Hierarchy:
    EngineError (base engine error)
    ├── EngineConfigurationError
    └── EngineStartError

These are the terminal errors the engine task reports to the harness. The
harness never translates them; test cases match them by message substring.
"""

from __future__ import annotations

from uuid import UUID

from pipeline_harness.errors.model_harness_error_context import (
    ModelHarnessErrorContext,
)


class EngineError(Exception):
    """Base error class for reference engine failures.

    Example:
        >>> raise EngineError(
        ...     "component crashed",
        ...     context=context,
        ...     component_id="scrape.agent_self",
        ... )
    """

    def __init__(
        self,
        message: str,
        context: ModelHarnessErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        """Initialize EngineError.

        Args:
            message: Human-readable error message
            context: Bundled context (operation, target_name, correlation_id)
            **extra_context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.correlation_id: UUID | None = (
            context.correlation_id if context is not None else None
        )
        structured_context: dict[str, object] = {}
        if context is not None:
            if context.operation is not None:
                structured_context["operation"] = context.operation
            if context.target_name is not None:
                structured_context["target_name"] = context.target_name
        structured_context.update(extra_context)
        self.context: dict[str, object] = structured_context


class EngineConfigurationError(EngineError):
    """Raised when the pipeline configuration cannot be loaded.

    Used for missing files, YAML syntax errors, unknown placeholders and
    schema validation failures.

    Example:
        >>> raise EngineConfigurationError(
        ...     "could not perform the initial load successfully: ...",
        ...     context=context,
        ...     config_path="testdata/invalid.yaml",
        ... )
    """


class EngineStartError(EngineError):
    """Raised when the engine cannot start, e.g. the listen port is taken."""


__all__: list[str] = ["EngineConfigurationError", "EngineError", "EngineStartError"]
