# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Environment variable parsing with validation.

Invalid values never raise: they are reported and the default is used, so a
typo in a CI variable degrades to default behaviour instead of aborting the
whole test session.
"""

from __future__ import annotations

import logging
import math
import os
import sys

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS: frozenset[str] = frozenset(
    {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
)


def parse_env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    """Read a float from the environment.

    Args:
        name: Environment variable name.
        default: Value used when the variable is unset or invalid.
        minimum: Exclusive lower bound; values ``<= minimum`` are rejected,
            as are NaN and infinities.

    Returns:
        The parsed value, or ``default``.

    Example:
        >>> os.environ["PIPELINE_HARNESS_SHUTDOWN_TIMEOUT"] = "2.5"
        >>> parse_env_float("PIPELINE_HARNESS_SHUTDOWN_TIMEOUT", 5.0)
        2.5
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default

    try:
        value = float(raw)
    except ValueError:
        logger.warning(
            "Invalid %s value '%s', using default %s",
            name,
            raw,
            default,
        )
        return default

    if not math.isfinite(value):
        logger.warning(
            "%s value %s is not finite, using default %s",
            name,
            raw,
            default,
        )
        return default
    if value <= minimum:
        logger.warning(
            "%s value %s must be greater than %s, using default %s",
            name,
            value,
            minimum,
            default,
        )
        return default

    return value


def parse_env_log_level(name: str, default: str = "INFO") -> str:
    """Read a logging level name from the environment.

    Logging is usually not configured yet when this runs, so an invalid value
    is reported on stderr rather than through ``logging``.
    """
    level = os.getenv(name, default).upper()
    if level not in VALID_LOG_LEVELS:
        print(
            f"Warning: Invalid {name} '{level}', using {default}. "
            f"Valid levels: {', '.join(sorted(VALID_LOG_LEVELS))}",
            file=sys.stderr,
        )
        return default
    return level


__all__: list[str] = ["VALID_LOG_LEVELS", "parse_env_float", "parse_env_log_level"]
