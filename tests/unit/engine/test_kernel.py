# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the engine entry point ``run_engine``."""

from __future__ import annotations

import asyncio
import socket
from collections.abc import Callable
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

from pipeline_harness.engine import INITIAL_LOAD_FAILURE, run_engine
from pipeline_harness.engine.telemetry import EngineMetrics, MetricsTargets
from pipeline_harness.errors import EngineConfigurationError, EngineStartError
from pipeline_harness.harness.runtime_context import reserve_free_port
from pipeline_harness.models import ModelLaunchArguments
from pipeline_harness.sinks import RemoteWriteCaptureSink
from pipeline_harness.utils.util_cancellation_scope import CancellationScope

SELF_SCRAPE_CONFIG = """\
scrape:
  - name: agent_self
    targets: ["self"]
    scrape_interval_seconds: 0.05
    forward_to: [default]
remote_write:
  - name: default
    url: ${remote_write_url}
    batch_send_interval_seconds: 0.05
"""


@pytest.fixture
def targets() -> MetricsTargets:
    registry = CollectorRegistry()
    return MetricsTargets(registry, registry)


def _arguments(
    config_path: Path, storage_path: Path, **variables: str
) -> ModelLaunchArguments:
    return ModelLaunchArguments(
        config_path=config_path,
        listen_address=f"127.0.0.1:{reserve_free_port('127.0.0.1')}",
        storage_path=storage_path,
        variables=variables,
    )


class TestRunEngineFailures:
    """Tests for errors surfaced by run_engine."""

    async def test_missing_config(self, tmp_path: Path, targets: MetricsTargets) -> None:
        """Test that a missing file is reported before anything starts."""
        arguments = _arguments(tmp_path / "absent.yaml", tmp_path)

        with pytest.raises(EngineConfigurationError, match="no such file or directory"):
            await run_engine(arguments, CancellationScope(), targets=targets)

    async def test_invalid_config(
        self,
        tmp_path: Path,
        targets: MetricsTargets,
        write_pipeline_config: Callable[[str], Path],
    ) -> None:
        """Test that an invalid file fails the initial load."""
        arguments = _arguments(write_pipeline_config("unknown_block: {}\n"), tmp_path)

        with pytest.raises(EngineConfigurationError) as exc_info:
            await run_engine(arguments, CancellationScope(), targets=targets)

        assert INITIAL_LOAD_FAILURE in str(exc_info.value)

    async def test_metrics_already_registered(
        self,
        tmp_path: Path,
        targets: MetricsTargets,
        write_pipeline_config: Callable[[str], Path],
    ) -> None:
        """Test that a second engine on the same registry cannot start."""
        EngineMetrics(targets)
        arguments = _arguments(write_pipeline_config(""), tmp_path)

        with pytest.raises(EngineStartError, match="failed to register engine metrics"):
            await run_engine(arguments, CancellationScope(), targets=targets)

    async def test_listen_address_in_use(
        self,
        tmp_path: Path,
        targets: MetricsTargets,
        write_pipeline_config: Callable[[str], Path],
    ) -> None:
        """Test that a taken listen port fails with EngineStartError."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen()
            port = blocker.getsockname()[1]
            arguments = ModelLaunchArguments(
                config_path=write_pipeline_config(""),
                listen_address=f"127.0.0.1:{port}",
                storage_path=tmp_path,
            )

            with pytest.raises(EngineStartError):
                await run_engine(arguments, CancellationScope(), targets=targets)


class TestRunEngineLifecycle:
    """Tests for a running engine."""

    async def test_empty_config_runs_until_cancelled(
        self,
        tmp_path: Path,
        targets: MetricsTargets,
        write_pipeline_config: Callable[[str], Path],
    ) -> None:
        """Test that cancellation makes run_engine return None."""
        scope = CancellationScope()
        arguments = _arguments(write_pipeline_config(""), tmp_path)
        task = asyncio.create_task(run_engine(arguments, scope, targets=targets))

        await asyncio.sleep(0.1)
        assert not task.done()

        scope.cancel("test finished")
        assert await asyncio.wait_for(task, timeout=5.0) is None

    async def test_self_scrape_reaches_remote_write(
        self,
        tmp_path: Path,
        targets: MetricsTargets,
        capture_sink: RemoteWriteCaptureSink,
        write_pipeline_config: Callable[[str], Path],
    ) -> None:
        """Test that the engine scrapes itself and ships the samples."""
        scope = CancellationScope()
        arguments = _arguments(
            write_pipeline_config(SELF_SCRAPE_CONFIG),
            tmp_path,
            remote_write_url=capture_sink.write_url,
        )
        task = asyncio.create_task(run_engine(arguments, scope, targets=targets))
        try:
            for _ in range(100):
                if capture_sink.find_last_sample_matching("up", job="agent_self") == 1.0:
                    break
                await asyncio.sleep(0.05)
        finally:
            scope.cancel("test finished")
            await asyncio.wait_for(task, timeout=5.0)

        assert capture_sink.find_last_sample_matching("up", job="agent_self") == 1.0
        assert (
            capture_sink.find_last_sample_matching(
                "pipeline_scrape_targets_gauge", component_id="scrape.agent_self"
            )
            == 1.0
        )
        assert (tmp_path / "wal" / "remote_write.default").is_dir()
