# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pipeline Harness - End-to-end integration tests for pipeline engines.

This package launches a long-running pipeline engine against a declarative
configuration, observes the telemetry it emits until a set of assertions
converges, and drives a graceful shutdown with bounded grace.

Key Components:
    - harness: Orchestration core (launcher, poller, race, shutdown, verifier)
    - engine: Reference pipeline engine (self-scrape, remote write, WAL)
    - sinks: Remote-write capture sink used as the telemetry query surface
    - errors: Harness and engine error hierarchy with structured context
"""

__all__: list[str] = []
