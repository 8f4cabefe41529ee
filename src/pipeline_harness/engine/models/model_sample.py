# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Sample passed between engine components."""

from __future__ import annotations

from dataclasses import dataclass, field

METRIC_NAME_LABEL = "__name__"

SeriesKey = tuple[str, tuple[tuple[str, str], ...]]


@dataclass(frozen=True)
class ModelSample:
    """One timestamped value of one series.

    Attributes:
        name: Metric name
        value: Sample value
        timestamp_ms: Milliseconds since the epoch
        labels: Labels other than the metric name
    """

    name: str
    value: float
    timestamp_ms: int
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def series_key(self) -> SeriesKey:
        """Identity of the series this sample belongs to."""
        return (self.name, tuple(sorted(self.labels.items())))

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "labels": self.labels,
            "value": self.value,
            "timestamp_ms": self.timestamp_ms,
        }


__all__ = ["METRIC_NAME_LABEL", "ModelSample", "SeriesKey"]
