# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Scrape Component Configuration Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pipeline_harness.enums import EnumComponentKind

SELF_TARGET = "self"
COMPONENT_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


class ModelScrapeConfig(BaseModel):
    """One ``scrape`` block of the pipeline configuration.

    Attributes:
        name: Component name, unique among scrape components
        targets: ``host:port`` targets, or ``self`` for the engine's own
            status server
        scrape_interval_seconds: Time between two scrapes of every target
        scrape_timeout_seconds: Per-target request timeout
        forward_to: Names of the remote_write components receiving the samples
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(pattern=COMPONENT_NAME_PATTERN)
    targets: tuple[str, ...] = Field(min_length=1)
    scrape_interval_seconds: float = Field(default=15.0, gt=0)
    scrape_timeout_seconds: float = Field(default=10.0, gt=0)
    forward_to: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def component_id(self) -> str:
        return EnumComponentKind.SCRAPE.component_id(self.name)


__all__ = ["COMPONENT_NAME_PATTERN", "ModelScrapeConfig", "SELF_TARGET"]
