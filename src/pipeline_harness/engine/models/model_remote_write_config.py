# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Remote Write Component Configuration Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pipeline_harness.engine.models.model_scrape_config import COMPONENT_NAME_PATTERN
from pipeline_harness.enums import EnumComponentKind


class ModelRemoteWriteConfig(BaseModel):
    """One ``remote_write`` block of the pipeline configuration.

    Attributes:
        name: Component name, unique among remote_write components
        url: Endpoint receiving the JSON write requests
        batch_send_interval_seconds: Time between two flushes of pending samples
        max_batch_size: Upper bound on samples per write request
        max_pending_samples: Samples kept in memory while the endpoint is
            unreachable; the oldest are dropped beyond that
        request_timeout_seconds: Timeout of a single write request
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(pattern=COMPONENT_NAME_PATTERN)
    url: str = Field(pattern=r"^https?://")
    batch_send_interval_seconds: float = Field(default=1.0, gt=0)
    max_batch_size: int = Field(default=2000, gt=0)
    max_pending_samples: int = Field(default=100_000, gt=0)
    request_timeout_seconds: float = Field(default=5.0, gt=0)

    @property
    def component_id(self) -> str:
        return EnumComponentKind.REMOTE_WRITE.component_id(self.name)


__all__ = ["ModelRemoteWriteConfig"]
