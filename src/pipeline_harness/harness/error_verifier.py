# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Exit error verification.

Truth table (expected substring x actual error):
    None, None  -> pass
    None, E     -> fail
    S,    None  -> fail
    S,    E     -> pass iff S is a substring of str(E)

The engine's error is inspected as-is: no unwrapping, no translation.
"""

from __future__ import annotations

from uuid import UUID

from pipeline_harness.enums import EnumHarnessPhase
from pipeline_harness.errors import ErrorVerificationError, ModelHarnessErrorContext


def error_matches(
    expected_substring: str | None,
    error: BaseException | None,
) -> bool:
    """Return True if ``error`` satisfies the expectation."""
    if not expected_substring:
        return error is None
    if error is None:
        return False
    return expected_substring in str(error)


def verify_exit_error(
    expected_substring: str | None,
    error: BaseException | None,
    *,
    correlation_id: UUID | None = None,
) -> None:
    """Verify the engine's terminal error against the test case expectation.

    Args:
        expected_substring: Substring the error message must contain, or
            None/empty if the engine must exit cleanly.
        error: The engine's terminal error, or None.
        correlation_id: Correlation ID of the harness run.

    Raises:
        ErrorVerificationError: If the expectation is not met.
    """
    if error_matches(expected_substring, error):
        return

    context = ModelHarnessErrorContext(
        phase=EnumHarnessPhase.VERIFY,
        operation="verify_exit_error",
        correlation_id=correlation_id,
    )
    if expected_substring:
        if error is None:
            message = (
                "command must return error containing the string specified in "
                f"test case, but returned no error (expected: {expected_substring!r})"
            )
        else:
            message = (
                "command must return error containing the string specified in "
                f"test case: {expected_substring!r} not found in "
                f"{type(error).__name__}: {error}"
            )
    else:
        message = f"command returned unexpected error: {type(error).__name__}: {error}"

    raise ErrorVerificationError(
        message,
        expected_substring=expected_substring or None,
        actual_error=error,
        context=context,
    ) from error


__all__: list[str] = ["error_matches", "verify_exit_error"]
