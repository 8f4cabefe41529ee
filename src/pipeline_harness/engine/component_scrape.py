# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Scrape component.

Periodically fetches Prometheus text exposition from its targets, labels the
samples with ``job`` (component name) and ``instance`` (target address), adds
the synthetic ``up``, ``scrape_duration_seconds`` and
``scrape_samples_scraped`` series, and fans the result out to every receiver
listed in ``forward_to``.

The target ``self`` resolves to the engine's own status server.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Protocol

import httpx
from prometheus_client.parser import text_string_to_metric_families

from pipeline_harness.engine.models import SELF_TARGET, ModelSample, ModelScrapeConfig
from pipeline_harness.engine.telemetry import EngineMetrics

logger = logging.getLogger(__name__)


class SampleReceiver(Protocol):
    """Anything a scrape component can forward samples to."""

    @property
    def component_id(self) -> str: ...

    async def append(self, samples: Sequence[ModelSample]) -> None: ...


def parse_exposition(
    text: str, labels: dict[str, str], timestamp_ms: int
) -> list[ModelSample]:
    """Parse Prometheus text exposition into samples carrying ``labels``.

    Target labels win over exposed labels of the same name.
    """
    samples: list[ModelSample] = []
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            samples.append(
                ModelSample(
                    name=sample.name,
                    value=float(sample.value),
                    timestamp_ms=timestamp_ms,
                    labels={**sample.labels, **labels},
                )
            )
    return samples


class ScrapeComponent:
    """Scrape loop for one ``scrape`` block."""

    def __init__(
        self,
        config: ModelScrapeConfig,
        self_address: str,
        receivers: Sequence[SampleReceiver],
        metrics: EngineMetrics,
        client: httpx.AsyncClient,
    ) -> None:
        self._config = config
        self._self_address = self_address
        self._receivers = tuple(receivers)
        self._metrics = metrics
        self._client = client
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._scrapes = 0

    @property
    def component_id(self) -> str:
        return self._config.component_id

    @property
    def scrapes(self) -> int:
        """Number of completed scrape rounds."""
        return self._scrapes

    def target_address(self, target: str) -> str:
        return self._self_address if target == SELF_TARGET else target

    def target_url(self, target: str) -> str:
        address = self.target_address(target)
        if address.startswith(("http://", "https://")):
            return address
        return f"http://{address}/metrics"

    async def start(self) -> None:
        if self._task is not None:
            return
        self._metrics.init_scrape_component(self.component_id, len(self._config.targets))
        self._task = asyncio.create_task(
            self._scrape_loop(), name=f"{self.component_id}-scraper"
        )
        logger.info(
            "Scrape component started",
            extra={
                "component_id": self.component_id,
                "targets": list(self._config.targets),
                "forward_to": [r.component_id for r in self._receivers],
            },
        )

    async def _scrape_loop(self) -> None:
        while not self._stop.is_set():
            for target in self._config.targets:
                try:
                    samples = await self.scrape_target(target)
                    await self.fanout(samples)
                except Exception:
                    self._metrics.scrape_failures.labels(
                        component_id=self.component_id
                    ).inc()
                    logger.exception(
                        "Scrape round for %s failed",
                        self.target_url(target),
                        extra={"component_id": self.component_id},
                    )
            self._scrapes += 1
            try:
                await asyncio.wait_for(
                    self._stop.wait(), timeout=self._config.scrape_interval_seconds
                )
            except TimeoutError:
                continue

    async def scrape_target(self, target: str) -> list[ModelSample]:
        """Scrape one target, including the synthetic series.

        A failed scrape yields only the synthetic series, with ``up`` at 0.
        """
        labels = {"job": self._config.name, "instance": self.target_address(target)}
        timestamp_ms = int(time.time() * 1000)
        metric_labels = {"component_id": self.component_id}

        started = time.perf_counter()
        try:
            response = await self._client.get(
                self.target_url(target), timeout=self._config.scrape_timeout_seconds
            )
            response.raise_for_status()
            samples = parse_exposition(response.text, labels, timestamp_ms)
            up = 1.0
        except (httpx.HTTPError, ValueError) as e:
            self._metrics.scrape_failures.labels(**metric_labels).inc()
            logger.warning(
                "Scrape of %s failed: %s",
                self.target_url(target),
                e,
                extra={"component_id": self.component_id, "error_type": type(e).__name__},
            )
            samples = []
            up = 0.0
        duration = time.perf_counter() - started

        self._metrics.scrape_duration.labels(**metric_labels).observe(duration)
        self._metrics.scrape_samples_scraped.labels(**metric_labels).set(len(samples))

        samples.extend(
            ModelSample(name=name, value=value, timestamp_ms=timestamp_ms, labels=labels)
            for name, value in (
                ("up", up),
                ("scrape_duration_seconds", duration),
                ("scrape_samples_scraped", float(len(samples))),
            )
        )
        return samples

    async def fanout(self, samples: Sequence[ModelSample]) -> None:
        """Hand ``samples`` to every receiver."""
        metric_labels = {"component_id": self.component_id}
        started = time.perf_counter()
        for receiver in self._receivers:
            await receiver.append(samples)
        self._metrics.fanout_latency.labels(**metric_labels).observe(
            time.perf_counter() - started
        )
        if self._receivers:
            self._metrics.forwarded_samples.labels(**metric_labels).inc(len(samples))

    async def stop(self) -> None:
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
        logger.info(
            "Scrape component stopped",
            extra={"component_id": self.component_id, "scrapes": self._scrapes},
        )


__all__: list[str] = ["SampleReceiver", "ScrapeComponent", "parse_exposition"]
