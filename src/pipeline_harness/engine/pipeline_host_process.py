# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pipeline Host Process.

Owns every running part of one engine instance: the status server, the
remote_write components and the scrape components, plus the shared HTTP
client they use.

Start Order:
    1. remote_write components (receivers must exist before anything forwards)
    2. status server (``self`` targets must be reachable)
    3. scrape components

Stop Order:
    scrape components, then remote_write components (final flush), then the
    HTTP client and the status server. No component forwards into a stopped
    receiver.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

import httpx

from pipeline_harness.engine.component_remote_write import RemoteWriteComponent
from pipeline_harness.engine.component_scrape import ScrapeComponent
from pipeline_harness.engine.models import ModelPipelineConfig
from pipeline_harness.engine.status_server import StatusServer
from pipeline_harness.engine.telemetry import EngineMetrics
from pipeline_harness.models import ModelLaunchArguments

logger = logging.getLogger(__name__)


class PipelineHostProcess:
    """Runs the components declared in one pipeline configuration."""

    def __init__(
        self,
        config: ModelPipelineConfig,
        arguments: ModelLaunchArguments,
        metrics: EngineMetrics,
        version: str = "unknown",
        correlation_id: UUID | None = None,
    ) -> None:
        self._config = config
        self._arguments = arguments
        self._metrics = metrics
        self._correlation_id = correlation_id
        self._client: httpx.AsyncClient | None = None
        self._is_running = False

        self._status_server = StatusServer(
            host=arguments.listen_host,
            port=arguments.listen_port,
            metrics=metrics,
            health_check=self.health_check,
            version=version,
            correlation_id=correlation_id,
        )
        self._remote_writes: dict[str, RemoteWriteComponent] = {}
        self._scrapes: list[ScrapeComponent] = []

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def remote_write_components(self) -> tuple[RemoteWriteComponent, ...]:
        return tuple(self._remote_writes.values())

    @property
    def scrape_components(self) -> tuple[ScrapeComponent, ...]:
        return tuple(self._scrapes)

    async def start(self) -> None:
        """Start every component.

        Raises:
            EngineStartError: If the status server cannot bind.
        """
        if self._is_running:
            return

        self._client = httpx.AsyncClient()
        for rw_config in self._config.remote_write:
            component = RemoteWriteComponent(
                rw_config,
                storage_path=self._arguments.storage_path,
                metrics=self._metrics,
                client=self._client,
            )
            self._remote_writes[rw_config.name] = component
            await component.start()

        await self._status_server.start()

        for scrape_config in self._config.scrape:
            component = ScrapeComponent(
                scrape_config,
                self_address=self._status_server.address,
                receivers=[self._remote_writes[name] for name in scrape_config.forward_to],
                metrics=self._metrics,
                client=self._client,
            )
            self._scrapes.append(component)
            await component.start()

        self._is_running = True
        logger.info(
            "Pipeline started with %d component(s) (correlation_id=%s)",
            len(self._scrapes) + len(self._remote_writes),
            self._correlation_id,
            extra={
                "scrape": [c.component_id for c in self._scrapes],
                "remote_write": list(self._remote_writes),
            },
        )

    async def stop(self) -> None:
        """Stop everything that was started. Idempotent.

        Failures of individual parts are logged so that the remaining parts
        are still stopped.
        """
        for scrape in self._scrapes:
            await self._stop_part(scrape.component_id, scrape.stop)
        self._scrapes.clear()

        for remote_write in self._remote_writes.values():
            await self._stop_part(remote_write.component_id, remote_write.stop)
        self._remote_writes.clear()

        if self._client is not None:
            await self._stop_part("http_client", self._client.aclose)
            self._client = None

        await self._stop_part("status_server", self._status_server.stop)
        self._is_running = False

    async def _stop_part(self, name: str, stop: Callable[[], Awaitable[None]]) -> None:
        try:
            await stop()
        except Exception as e:
            logger.warning(
                "Failed to stop %s: %s (correlation_id=%s)",
                name,
                e,
                self._correlation_id,
                extra={"error_type": type(e).__name__},
            )

    async def health_check(self) -> dict[str, object]:
        """Return health status.

        Returns:
            Dictionary with:
                - healthy: True while the pipeline is running
                - is_running: Whether start() completed
                - components: component id -> kind-specific details
        """
        components: dict[str, object] = {}
        for scrape in self._scrapes:
            components[scrape.component_id] = {"scrapes": scrape.scrapes}
        for remote_write in self._remote_writes.values():
            components[remote_write.component_id] = {
                "pending_samples": remote_write.pending_count,
                "wal_active_series": remote_write.wal.active_series,
            }
        return {
            "healthy": self._is_running,
            "is_running": self._is_running,
            "components": components,
        }


__all__: list[str] = ["PipelineHostProcess"]
