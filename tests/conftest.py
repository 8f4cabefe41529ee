# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pytest configuration and shared fixtures for pipeline_harness tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

from pipeline_harness.engine.telemetry import get_default_targets
from pipeline_harness.harness.metrics_scope import MetricsScope
from pipeline_harness.harness.runtime_context import reserve_free_port
from pipeline_harness.models import ModelHarnessConfig, ModelRuntimeHandle
from pipeline_harness.sinks import RemoteWriteCaptureSink

# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def fast_config() -> ModelHarnessConfig:
    """Harness timings scaled down for tests with fake engines."""
    return ModelHarnessConfig(
        default_timeout_seconds=2.0,
        assertion_check_interval_seconds=0.01,
        shutdown_timeout_seconds=0.5,
    )


@pytest.fixture
def write_pipeline_config(tmp_path: Path) -> Callable[[str], Path]:
    """Factory writing YAML text to a pipeline config file under tmp_path."""
    counter = iter(range(1_000_000))

    def _write(text: str) -> Path:
        path = tmp_path / f"pipeline_{next(counter)}.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# =============================================================================
# Metrics
# =============================================================================


@pytest.fixture
def metrics_registry() -> Iterator[CollectorRegistry]:
    """Test-local default metrics registry, restored afterwards."""
    previous = get_default_targets()
    with MetricsScope() as registry:
        yield registry
    assert get_default_targets() is previous


# =============================================================================
# Runtime
# =============================================================================


@pytest.fixture
async def capture_sink() -> AsyncIterator[RemoteWriteCaptureSink]:
    """Started capture sink on an ephemeral loopback port."""
    sink = RemoteWriteCaptureSink(host="127.0.0.1")
    await sink.start()
    yield sink
    await sink.stop()


@pytest.fixture
async def runtime_handle(
    capture_sink: RemoteWriteCaptureSink, tmp_path: Path
) -> ModelRuntimeHandle:
    """Runtime handle over a live capture sink and a tmp storage directory."""
    storage_path = tmp_path / "storage"
    storage_path.mkdir()
    return ModelRuntimeHandle(
        listen_host="127.0.0.1",
        listen_port=reserve_free_port("127.0.0.1"),
        storage_path=storage_path,
        sink=capture_sink,
    )
