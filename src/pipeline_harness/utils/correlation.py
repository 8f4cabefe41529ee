# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Correlation ID generation.

Every harness run and every engine bootstrap gets its own UUID4 correlation
ID, which is threaded through log records and error context so that the
interleaved output of the harness and the engine under test can be told apart.
"""

from __future__ import annotations

from uuid import UUID, uuid4


def generate_correlation_id() -> UUID:
    """Generate a new correlation ID.

    Returns:
        A fresh UUID4.
    """
    return uuid4()


__all__: list[str] = ["generate_correlation_id"]
