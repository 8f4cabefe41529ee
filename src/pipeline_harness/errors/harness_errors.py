# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Harness Error Classes.

Error Hierarchy:
    HarnessError (base harness error)
    ├── HarnessDeadlineError
    │   └── AssertionTimeoutError
    ├── ShutdownTimeoutError
    └── ErrorVerificationError (also an AssertionError)

All errors:
    - Abort the current test case only
    - Support proper error chaining with `raise ... from e`
    - Include structured context for debugging
    - Accept ModelHarnessErrorContext for bundled context parameters
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from pipeline_harness.errors.model_harness_error_context import (
    ModelHarnessErrorContext,
)


class HarnessError(Exception):
    """Base error class for harness failures.

    Structured Fields (via ModelHarnessErrorContext):
        phase: Harness phase in which the error was raised
        operation: Operation being performed
        correlation_id: Correlation ID of the harness run
        target_name: Target resource name

    Example:
        >>> context = ModelHarnessErrorContext(
        ...     phase=EnumHarnessPhase.RACE,
        ...     operation="wait_first_signal",
        ... )
        >>> raise HarnessError("Race failed", context=context, attempt=3)
    """

    def __init__(
        self,
        message: str,
        context: ModelHarnessErrorContext | None = None,
        **extra_context: object,
    ) -> None:
        """Initialize HarnessError with structured fields.

        Args:
            message: Human-readable error message
            context: Bundled harness context (phase, operation, etc.)
            **extra_context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.correlation_id: UUID | None = None

        structured_context: dict[str, object] = {}
        if context is not None:
            if context.phase is not None:
                structured_context["phase"] = context.phase
            if context.operation is not None:
                structured_context["operation"] = context.operation
            if context.target_name is not None:
                structured_context["target_name"] = context.target_name
            self.correlation_id = context.correlation_id
        structured_context.update(extra_context)
        self.context: dict[str, object] = structured_context


class HarnessDeadlineError(HarnessError):
    """Raised when the global deadline fires before any race signal resolves.

    Always fatal. It indicates a defect in the harness or a hung engine and is
    never an expected outcome of a well-behaved test case.
    """

    def __init__(
        self,
        timeout_seconds: float,
        context: ModelHarnessErrorContext | None = None,
        message: str | None = None,
        **extra_context: object,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            message
            or f"test case failed to complete within deadline ({timeout_seconds}s)",
            context=context,
            timeout_seconds=timeout_seconds,
            **extra_context,
        )


class AssertionTimeoutError(HarnessDeadlineError):
    """Raised when the deadline fires before the assertion predicate converges.

    Carries the failures of the most recent evaluation round, not the first
    one, since earlier rounds describe an engine that was still warming up.

    Example:
        >>> raise AssertionTimeoutError(
        ...     60.0,
        ...     last_failures=["expected 1 scrape target, got 0.0"],
        ...     rounds=600,
        ... )
    """

    def __init__(
        self,
        timeout_seconds: float,
        last_failures: Sequence[str],
        rounds: int,
        context: ModelHarnessErrorContext | None = None,
    ) -> None:
        self.last_failures: tuple[str, ...] = tuple(last_failures)
        self.rounds = rounds
        details = "\n".join(f"  - {failure}" for failure in self.last_failures)
        super().__init__(
            timeout_seconds,
            context=context,
            message=(
                f"assertions did not converge within deadline ({timeout_seconds}s) "
                f"after {rounds} round(s); last round failures:\n{details}"
            ),
            rounds=rounds,
        )


class ShutdownTimeoutError(HarnessError):
    """Raised when the engine does not exit within the grace window.

    Only raised when the test case requires a clean shutdown; otherwise the
    overrun is downgraded to a logged note.
    """

    def __init__(
        self,
        grace_seconds: float,
        context: ModelHarnessErrorContext | None = None,
    ) -> None:
        self.grace_seconds = grace_seconds
        super().__init__(
            f"engine failed to shut down within deadline ({grace_seconds}s)",
            context=context,
            grace_seconds=grace_seconds,
        )


class ErrorVerificationError(HarnessError, AssertionError):
    """Raised when the engine's exit error does not match the expectation.

    Subclasses AssertionError so that pytest reports it as an assertion
    failure rather than a test error.
    """

    def __init__(
        self,
        message: str,
        expected_substring: str | None,
        actual_error: BaseException | None,
        context: ModelHarnessErrorContext | None = None,
    ) -> None:
        self.expected_substring = expected_substring
        self.actual_error = actual_error
        super().__init__(
            message,
            context=context,
            expected_substring=expected_substring,
            actual_error_type=(
                type(actual_error).__name__ if actual_error is not None else None
            ),
        )


__all__: list[str] = [
    "AssertionTimeoutError",
    "ErrorVerificationError",
    "HarnessDeadlineError",
    "HarnessError",
    "ShutdownTimeoutError",
]
