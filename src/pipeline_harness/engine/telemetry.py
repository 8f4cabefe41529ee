# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Prometheus Metrics for the Reference Pipeline Engine.

The engine registers its metrics on the process-wide default targets at
start-up, the same way library code registers on ``prometheus_client``'s
global REGISTRY. Because names may only be registered once per registry, two
engines started in one process collide unless the defaults are swapped for a
fresh registry in between (see ``pipeline_harness.harness.metrics_scope``).

Exported series (component series carry a ``component_id`` label):
    scrape:        pipeline_scrape_targets_gauge, pipeline_scrape_duration_seconds,
                   pipeline_scrape_samples_scraped, pipeline_scrape_failures_total,
                   pipeline_fanout_latency, pipeline_forwarded_samples_total
    remote_write:  pipeline_wal_samples_appended_total, pipeline_wal_storage_active_series,
                   pipeline_wal_append_duration_seconds, pipeline_remote_write_*
    status server: pipeline_status_requests_total, pipeline_status_request_duration_seconds
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    Histogram,
    Info,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

logger = logging.getLogger(__name__)

BATCH_SIZE_BUCKETS: tuple[float, ...] = (1, 10, 100, 500, 1000, 2000, 5000)


@dataclass(frozen=True)
class MetricsTargets:
    """Where metrics are registered (registerer) and read from (gatherer)."""

    registerer: CollectorRegistry
    gatherer: CollectorRegistry


_default_targets: MetricsTargets = MetricsTargets(registerer=REGISTRY, gatherer=REGISTRY)


def get_default_targets() -> MetricsTargets:
    """Return the process-wide default metrics targets."""
    return _default_targets


def set_default_targets(targets: MetricsTargets) -> MetricsTargets:
    """Replace the process-wide default metrics targets.

    Returns:
        The targets that were active before the call.
    """
    global _default_targets
    previous = _default_targets
    _default_targets = targets
    return previous


class EngineMetrics:
    """All metrics exported by one engine instance.

    Registering on a registry that already holds engine metrics raises
    ``ValueError`` (duplicated timeseries).
    """

    def __init__(self, targets: MetricsTargets, version: str = "unknown") -> None:
        registry = targets.registerer
        self._gatherer = targets.gatherer

        self.build_info = Info(
            "pipeline_build",
            "Reference pipeline engine build information",
            registry=registry,
        )
        self.build_info.info({"version": version})

        # Scrape components
        self.scrape_targets = Gauge(
            "pipeline_scrape_targets_gauge",
            "Number of targets a scrape component is scraping",
            ["component_id"],
            registry=registry,
        )
        self.scrape_duration = Histogram(
            "pipeline_scrape_duration_seconds",
            "Time spent scraping one target",
            ["component_id"],
            registry=registry,
        )
        self.scrape_samples_scraped = Gauge(
            "pipeline_scrape_samples_scraped",
            "Samples returned by the most recent scrape",
            ["component_id"],
            registry=registry,
        )
        self.scrape_failures = Counter(
            "pipeline_scrape_failures",
            "Failed scrapes",
            ["component_id"],
            registry=registry,
        )
        self.fanout_latency = Histogram(
            "pipeline_fanout_latency",
            "Time spent handing one scrape to all receivers",
            ["component_id"],
            registry=registry,
        )
        self.forwarded_samples = Counter(
            "pipeline_forwarded_samples",
            "Samples forwarded to receivers",
            ["component_id"],
            registry=registry,
        )

        # Remote write components
        self.wal_samples_appended = Counter(
            "pipeline_wal_samples_appended",
            "Samples appended to the write-ahead log",
            ["component_id"],
            registry=registry,
        )
        self.wal_active_series = Gauge(
            "pipeline_wal_storage_active_series",
            "Distinct series held in the write-ahead log",
            ["component_id"],
            registry=registry,
        )
        self.wal_append_duration = Histogram(
            "pipeline_wal_append_duration_seconds",
            "Time spent appending one batch to the write-ahead log",
            ["component_id"],
            registry=registry,
        )
        self.remote_write_samples_sent = Counter(
            "pipeline_remote_write_samples_sent",
            "Samples successfully sent to the remote endpoint",
            ["component_id"],
            registry=registry,
        )
        self.remote_write_failed_requests = Counter(
            "pipeline_remote_write_failed_requests",
            "Remote write requests that failed",
            ["component_id"],
            registry=registry,
        )
        self.remote_write_pending_samples = Gauge(
            "pipeline_remote_write_pending_samples",
            "Samples queued for the next remote write",
            ["component_id"],
            registry=registry,
        )
        self.remote_write_send_duration = Histogram(
            "pipeline_remote_write_send_duration_seconds",
            "Duration of one remote write request",
            ["component_id"],
            registry=registry,
        )
        self.remote_write_batch_size = Histogram(
            "pipeline_remote_write_batch_size",
            "Samples per remote write request",
            ["component_id"],
            buckets=BATCH_SIZE_BUCKETS,
            registry=registry,
        )

        # Status server
        self.status_requests = Counter(
            "pipeline_status_requests",
            "HTTP requests served by the status server",
            ["handler", "code"],
            registry=registry,
        )
        self.status_request_duration = Histogram(
            "pipeline_status_request_duration_seconds",
            "Time spent serving one status server request",
            ["handler"],
            registry=registry,
        )

        # The global REGISTRY already carries the default collectors.
        if registry is not REGISTRY:
            ProcessCollector(registry=registry)
            PlatformCollector(registry=registry)
            GCCollector(registry=registry)

        logger.debug("Engine metrics registered", extra={"version": version})

    def init_scrape_component(self, component_id: str, target_count: int) -> None:
        """Create the labelled series of a scrape component so they export from the start."""
        self.scrape_targets.labels(component_id=component_id).set(target_count)
        self.scrape_duration.labels(component_id=component_id)
        self.scrape_samples_scraped.labels(component_id=component_id)
        self.scrape_failures.labels(component_id=component_id)
        self.fanout_latency.labels(component_id=component_id)
        self.forwarded_samples.labels(component_id=component_id)

    def init_remote_write_component(self, component_id: str) -> None:
        """Create the labelled series of a remote write component."""
        self.wal_samples_appended.labels(component_id=component_id)
        self.wal_active_series.labels(component_id=component_id)
        self.wal_append_duration.labels(component_id=component_id)
        self.remote_write_samples_sent.labels(component_id=component_id)
        self.remote_write_failed_requests.labels(component_id=component_id)
        self.remote_write_pending_samples.labels(component_id=component_id)
        self.remote_write_send_duration.labels(component_id=component_id)
        self.remote_write_batch_size.labels(component_id=component_id)

    def exposition(self) -> bytes:
        """Render the gatherer in Prometheus text format."""
        return generate_latest(self._gatherer)


__all__: list[str] = [
    "EngineMetrics",
    "MetricsTargets",
    "get_default_targets",
    "set_default_targets",
]
