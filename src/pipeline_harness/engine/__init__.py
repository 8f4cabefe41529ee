# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Reference pipeline engine.

A small self-scraping pipeline used as the system under test:

    scrape (self) --> remote_write (WAL + batched JSON POST) --> capture sink

Exports:
    run_engine: Engine invocation contract launched by the harness
    EngineMetrics, MetricsTargets: Metrics and their registration targets
    load_pipeline_config: YAML configuration loader
"""

from pipeline_harness.engine.config_loader import (
    INITIAL_LOAD_FAILURE,
    load_pipeline_config,
)
from pipeline_harness.engine.kernel import configure_logging, run_engine
from pipeline_harness.engine.telemetry import (
    EngineMetrics,
    MetricsTargets,
    get_default_targets,
    set_default_targets,
)

__all__: list[str] = [
    "INITIAL_LOAD_FAILURE",
    "EngineMetrics",
    "MetricsTargets",
    "configure_logging",
    "get_default_targets",
    "load_pipeline_config",
    "run_engine",
    "set_default_targets",
]
