# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pipeline Configuration Model.

Top-level schema of the YAML configuration artifact. An empty document is a
valid, no-op pipeline.

Example:
    scrape:
      - name: agent_self
        targets: ["self"]
        scrape_interval_seconds: 0.1
        forward_to: [default]
    remote_write:
      - name: default
        url: "${remote_write_url}"
"""

from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pipeline_harness.engine.models.model_remote_write_config import (
    ModelRemoteWriteConfig,
)
from pipeline_harness.engine.models.model_scrape_config import ModelScrapeConfig


class ModelPipelineConfig(BaseModel):
    """Validated pipeline configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    scrape: tuple[ModelScrapeConfig, ...] = Field(default_factory=tuple)
    remote_write: tuple[ModelRemoteWriteConfig, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_references(self) -> ModelPipelineConfig:
        for kind, names in (
            ("scrape", [c.name for c in self.scrape]),
            ("remote_write", [c.name for c in self.remote_write]),
        ):
            duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
            if duplicates:
                raise ValueError(
                    f"duplicate {kind} component name(s): {', '.join(duplicates)}"
                )

        declared = {c.name for c in self.remote_write}
        for scrape in self.scrape:
            unknown = [name for name in scrape.forward_to if name not in declared]
            if unknown:
                raise ValueError(
                    f"{scrape.component_id} forwards to undeclared remote_write "
                    f"component(s): {', '.join(unknown)}"
                )
        return self

    @property
    def is_empty(self) -> bool:
        return not self.scrape and not self.remote_write


__all__ = ["ModelPipelineConfig"]
