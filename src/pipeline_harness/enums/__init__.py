# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pipeline Harness Enumerations Module.

Exports:
    EnumComponentKind: Reference engine component kinds (SCRAPE, REMOTE_WRITE)
    EnumHarnessPhase: Harness lifecycle phase used in error context
    EnumRaceOutcome: Terminal outcome of the launcher/poller/deadline race
"""

from pipeline_harness.enums.enum_component_kind import EnumComponentKind
from pipeline_harness.enums.enum_harness_phase import EnumHarnessPhase
from pipeline_harness.enums.enum_race_outcome import EnumRaceOutcome

__all__: list[str] = [
    "EnumComponentKind",
    "EnumHarnessPhase",
    "EnumRaceOutcome",
]
