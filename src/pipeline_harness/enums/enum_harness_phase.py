# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Harness Phase Enumeration.

Identifies where in a harness run an error was raised. Used for error
context, the same way transport types identify the failing integration.
"""

from enum import Enum


class EnumHarnessPhase(str, Enum):
    """Lifecycle phases of a single harness run.

    Attributes:
        SETUP: Metrics scope and runtime context acquisition
        LAUNCH: Engine task creation
        POLL: Assertion predicate evaluation
        RACE: Waiting on deadline / poller / launcher
        SHUTDOWN: Cancellation and grace window
        VERIFY: Exit error verification
        TEARDOWN: Resource release
    """

    SETUP = "setup"
    LAUNCH = "launch"
    POLL = "poll"
    RACE = "race"
    SHUTDOWN = "shutdown"
    VERIFY = "verify"
    TEARDOWN = "teardown"


__all__ = ["EnumHarnessPhase"]
