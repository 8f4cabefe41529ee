# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Collect-style assertions for convergence predicates.

A predicate builds a SoftAssertions, runs every check, and returns the
collected failures. Checks never raise, so one round reports every condition
that is not yet satisfied.

Example:
    >>> def predicate(handle: ModelRuntimeHandle) -> list[str]:
    ...     check = SoftAssertions()
    ...     check.positive(handle.sink.writes_count(), "no remote writes yet")
    ...     check.greater(
    ...         handle.sink.find_last_sample_matching(
    ...             "pipeline_forwarded_samples_total",
    ...             component_id="scrape.agent_self",
    ...         ),
    ...         1000,
    ...     )
    ...     return check.failures
"""

from __future__ import annotations

from typing import Any


class SoftAssertions:
    """Accumulates failure messages instead of raising."""

    def __init__(self) -> None:
        self.failures: list[str] = []

    def _record(self, ok: bool, description: str, message: str) -> bool:
        if not ok:
            self.failures.append(f"{message}: {description}" if message else description)
        return ok

    def fail(self, message: str) -> None:
        self.failures.append(message)

    def equal(self, expected: Any, actual: Any, message: str = "") -> bool:
        return self._record(
            expected == actual, f"expected {expected!r}, got {actual!r}", message
        )

    def greater(self, actual: float, bound: float, message: str = "") -> bool:
        return self._record(actual > bound, f"{actual!r} is not > {bound!r}", message)

    def greater_or_equal(self, actual: float, bound: float, message: str = "") -> bool:
        return self._record(actual >= bound, f"{actual!r} is not >= {bound!r}", message)

    def positive(self, actual: float, message: str = "") -> bool:
        return self._record(actual > 0, f"{actual!r} is not positive", message)

    def __bool__(self) -> bool:
        """True when no check has failed."""
        return not self.failures


__all__: list[str] = ["SoftAssertions"]
