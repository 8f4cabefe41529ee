# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the scrape component."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import httpx
import pytest
from prometheus_client import CollectorRegistry

from pipeline_harness.engine.component_scrape import ScrapeComponent, parse_exposition
from pipeline_harness.engine.models import ModelSample, ModelScrapeConfig
from pipeline_harness.engine.telemetry import EngineMetrics, MetricsTargets
from pipeline_harness.errors import EngineError

EXPOSITION = """\
# HELP demo_requests_total Requests.
# TYPE demo_requests_total counter
demo_requests_total{path="/",job="exposed"} 7.0
# HELP demo_temperature Temperature.
# TYPE demo_temperature gauge
demo_temperature 21.5
"""


class RecordingReceiver:
    """Receiver that keeps every batch it was handed."""

    def __init__(self, component_id: str = "remote_write.default") -> None:
        self._component_id = component_id
        self.batches: list[list[ModelSample]] = []

    @property
    def component_id(self) -> str:
        return self._component_id

    async def append(self, samples: Sequence[ModelSample]) -> None:
        self.batches.append(list(samples))


class FailingReceiver(RecordingReceiver):
    """Receiver whose write-ahead log has gone away."""

    async def append(self, samples: Sequence[ModelSample]) -> None:
        raise EngineError("Cannot append to closed write-ahead log")


@pytest.fixture
def engine_metrics() -> tuple[EngineMetrics, CollectorRegistry]:
    registry = CollectorRegistry()
    return EngineMetrics(MetricsTargets(registry, registry)), registry


def _client(status: int = 200, text: str = EXPOSITION) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text=text)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _component(
    metrics: EngineMetrics,
    client: httpx.AsyncClient,
    receivers: Sequence[RecordingReceiver] = (),
    targets: tuple[str, ...] = ("self",),
    interval: float = 0.01,
) -> ScrapeComponent:
    config = ModelScrapeConfig(
        name="agent_self",
        targets=targets,
        scrape_interval_seconds=interval,
        forward_to=tuple(r.component_id.split(".", 1)[1] for r in receivers),
    )
    return ScrapeComponent(
        config,
        self_address="127.0.0.1:41234",
        receivers=receivers,
        metrics=metrics,
        client=client,
    )


class TestParseExposition:
    """Tests for exposition parsing."""

    def test_target_labels_override_exposed_labels(self) -> None:
        """Test that job/instance come from the scrape, not the target."""
        samples = parse_exposition(
            EXPOSITION, {"job": "agent_self", "instance": "h:1"}, 1000
        )

        counter = next(s for s in samples if s.name == "demo_requests_total")
        assert counter.labels == {"path": "/", "job": "agent_self", "instance": "h:1"}
        assert counter.value == 7.0
        assert counter.timestamp_ms == 1000

        gauge = next(s for s in samples if s.name == "demo_temperature")
        assert gauge.labels == {"job": "agent_self", "instance": "h:1"}


class TestScrapeTarget:
    """Tests for scraping one target."""

    def test_target_resolution(
        self, engine_metrics: tuple[EngineMetrics, CollectorRegistry]
    ) -> None:
        """Test that self, host:port and full URLs resolve correctly."""
        component = _component(engine_metrics[0], _client())

        assert component.target_url("self") == "http://127.0.0.1:41234/metrics"
        assert component.target_url("node:9100") == "http://node:9100/metrics"
        assert component.target_url("http://node:9100/stats") == "http://node:9100/stats"
        assert component.target_address("self") == "127.0.0.1:41234"

    async def test_successful_scrape_adds_synthetic_series(
        self, engine_metrics: tuple[EngineMetrics, CollectorRegistry]
    ) -> None:
        """Test that up, duration and sample count accompany the samples."""
        metrics, registry = engine_metrics
        async with _client() as client:
            samples = await _component(metrics, client).scrape_target("self")

        by_name = {s.name: s for s in samples}
        assert by_name["up"].value == 1.0
        assert by_name["scrape_samples_scraped"].value == 2.0
        assert by_name["scrape_duration_seconds"].value >= 0.0
        assert by_name["up"].labels == {"job": "agent_self", "instance": "127.0.0.1:41234"}
        assert (
            registry.get_sample_value(
                "pipeline_scrape_samples_scraped", {"component_id": "scrape.agent_self"}
            )
            == 2.0
        )

    async def test_failed_scrape(
        self, engine_metrics: tuple[EngineMetrics, CollectorRegistry]
    ) -> None:
        """Test that a failed scrape yields up=0 and counts the failure."""
        metrics, registry = engine_metrics
        async with _client(status=500, text="oops") as client:
            samples = await _component(metrics, client).scrape_target("self")

        assert {s.name: s.value for s in samples}["up"] == 0.0
        assert len(samples) == 3
        assert (
            registry.get_sample_value(
                "pipeline_scrape_failures_total", {"component_id": "scrape.agent_self"}
            )
            == 1.0
        )


class TestFanout:
    """Tests for forwarding samples."""

    async def test_fanout_reaches_every_receiver(
        self, engine_metrics: tuple[EngineMetrics, CollectorRegistry]
    ) -> None:
        """Test forwarding bookkeeping."""
        metrics, registry = engine_metrics
        first = RecordingReceiver("remote_write.a")
        second = RecordingReceiver("remote_write.b")
        component = _component(metrics, _client(), receivers=[first, second])
        samples = [ModelSample(name="up", value=1.0, timestamp_ms=1)] * 4

        await component.fanout(samples)

        labels = {"component_id": "scrape.agent_self"}
        assert first.batches == [samples]
        assert second.batches == [samples]
        assert registry.get_sample_value("pipeline_forwarded_samples_total", labels) == 4.0
        assert registry.get_sample_value("pipeline_fanout_latency_count", labels) == 1.0


class TestScrapeLoop:
    """Tests for the periodic loop."""

    async def test_loop_scrapes_until_stopped(
        self, engine_metrics: tuple[EngineMetrics, CollectorRegistry]
    ) -> None:
        """Test start/stop and that every round is forwarded."""
        metrics, registry = engine_metrics
        receiver = RecordingReceiver()
        async with _client() as client:
            component = _component(metrics, client, receivers=[receiver])
            await component.start()
            await asyncio.sleep(0.05)
            await component.stop()

        assert component.scrapes >= 2
        assert len(receiver.batches) == component.scrapes
        assert (
            registry.get_sample_value(
                "pipeline_scrape_targets_gauge", {"component_id": "scrape.agent_self"}
            )
            == 1.0
        )

    async def test_loop_survives_failing_receiver(
        self,
        engine_metrics: tuple[EngineMetrics, CollectorRegistry],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that a receiver error is counted and logged, not fatal."""
        metrics, registry = engine_metrics
        async with _client() as client:
            component = _component(metrics, client, receivers=[FailingReceiver()])
            await component.start()
            await asyncio.sleep(0.05)
            await component.stop()

        assert component.scrapes >= 2
        assert (
            registry.get_sample_value(
                "pipeline_scrape_failures_total", {"component_id": "scrape.agent_self"}
            )
            >= 2.0
        )
        assert "Scrape round for http://127.0.0.1:41234/metrics failed" in caplog.text
