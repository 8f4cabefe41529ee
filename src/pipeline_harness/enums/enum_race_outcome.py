# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Race Outcome Enumeration.

Defines the three terminating signals a harness run can end on. Exactly one
outcome is produced per race.
"""

from enum import Enum


class EnumRaceOutcome(str, Enum):
    """Outcome of the race between deadline, assertions and engine exit.

    Attributes:
        CONVERGED: The assertion predicate reported zero failures
        PROCESS_EXITED: The engine task returned or raised on its own
        DEADLINE_EXCEEDED: The global deadline fired before either of the above
    """

    CONVERGED = "converged"
    PROCESS_EXITED = "process_exited"
    DEADLINE_EXCEEDED = "deadline_exceeded"


__all__ = ["EnumRaceOutcome"]
