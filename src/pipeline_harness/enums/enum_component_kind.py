# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Engine Component Kind Enumeration."""

from enum import Enum


class EnumComponentKind(str, Enum):
    """Kinds of components the reference engine can run.

    The value doubles as the prefix of the component id, e.g. a scrape
    component named ``agent_self`` has the id ``scrape.agent_self``.
    """

    SCRAPE = "scrape"
    REMOTE_WRITE = "remote_write"

    def component_id(self, name: str) -> str:
        """Return the fully qualified component id for ``name``."""
        return f"{self.value}.{name}"


__all__ = ["EnumComponentKind"]
