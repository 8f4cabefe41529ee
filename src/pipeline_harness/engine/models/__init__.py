# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Reference Engine Models.

Exports:
    ModelPipelineConfig: Validated top-level configuration
    ModelScrapeConfig: One scrape component
    ModelRemoteWriteConfig: One remote_write component
    ModelSample: One sample flowing between components
"""

from pipeline_harness.engine.models.model_pipeline_config import ModelPipelineConfig
from pipeline_harness.engine.models.model_remote_write_config import (
    ModelRemoteWriteConfig,
)
from pipeline_harness.engine.models.model_sample import (
    METRIC_NAME_LABEL,
    ModelSample,
    SeriesKey,
)
from pipeline_harness.engine.models.model_scrape_config import (
    SELF_TARGET,
    ModelScrapeConfig,
)

__all__: list[str] = [
    "METRIC_NAME_LABEL",
    "SELF_TARGET",
    "ModelPipelineConfig",
    "ModelRemoteWriteConfig",
    "ModelSample",
    "ModelScrapeConfig",
    "SeriesKey",
]
