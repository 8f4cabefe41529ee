# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HTTP Status Server for the Reference Pipeline Engine.

The server exposes:
    - GET /health: Engine health status as JSON
    - GET /ready: Readiness status as JSON (alias for /health)
    - GET /metrics: The engine's own metrics in Prometheus text format

The ``/metrics`` endpoint is also the target a scrape component resolves
``self`` to, which is how the engine observes itself.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from uuid import UUID

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST

from pipeline_harness.engine.telemetry import EngineMetrics
from pipeline_harness.errors import EngineStartError, ModelHarnessErrorContext
from pipeline_harness.utils.correlation import generate_correlation_id

logger = logging.getLogger(__name__)

HealthCheck = Callable[[], Awaitable[dict[str, object]]]

SHUTDOWN_TIMEOUT_SECONDS = 1.0


class StatusServer:
    """Health and metrics endpoints of one engine instance.

    Example:
        >>> server = StatusServer("127.0.0.1", 41234, metrics, host.health_check)
        >>> await server.start()
        >>> # curl http://127.0.0.1:41234/metrics
        >>> await server.stop()
    """

    def __init__(
        self,
        host: str,
        port: int,
        metrics: EngineMetrics,
        health_check: HealthCheck,
        version: str = "unknown",
        correlation_id: UUID | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._metrics = metrics
        self._health_check = health_check
        self._version = version
        self._correlation_id = correlation_id

        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._is_running = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    async def start(self) -> None:
        """Bind and start serving. Idempotent.

        Raises:
            EngineStartError: If the address cannot be bound.
        """
        if self._is_running:
            logger.debug("StatusServer already started, skipping")
            return

        app = web.Application(middlewares=[self._instrument])
        app.router.add_get("/health", self._handle_health)
        app.router.add_get("/ready", self._handle_health)
        app.router.add_get("/metrics", self._handle_metrics)

        self._runner = web.AppRunner(app, shutdown_timeout=SHUTDOWN_TIMEOUT_SECONDS)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        try:
            await self._site.start()
        except OSError as e:
            error_msg = f"Failed to start status server on {self.address}: {e}"
            logger.exception(
                "%s (correlation_id=%s)",
                error_msg,
                self._correlation_id,
                extra={"error_type": type(e).__name__, "errno": e.errno},
            )
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            raise EngineStartError(
                error_msg,
                context=ModelHarnessErrorContext(
                    operation="start_status_server",
                    target_name=self.address,
                    correlation_id=self._correlation_id,
                ),
            ) from e

        self._is_running = True
        logger.info(
            "StatusServer started (correlation_id=%s)",
            self._correlation_id,
            extra={
                "address": self.address,
                "endpoints": ["/health", "/ready", "/metrics"],
                "version": self._version,
            },
        )

    async def stop(self) -> None:
        """Stop serving. Idempotent; cleanup errors are logged, not raised."""
        if not self._is_running:
            return

        if self._site is not None:
            try:
                await self._site.stop()
            except Exception as e:
                logger.warning(
                    "Error stopping TCPSite during shutdown (correlation_id=%s)",
                    self._correlation_id,
                    extra={"error_type": type(e).__name__, "error": str(e)},
                )
            self._site = None

        if self._runner is not None:
            try:
                await self._runner.cleanup()
            except Exception as e:
                logger.warning(
                    "Error cleaning up AppRunner during shutdown (correlation_id=%s)",
                    self._correlation_id,
                    extra={"error_type": type(e).__name__, "error": str(e)},
                )
            self._runner = None

        self._is_running = False
        logger.info("StatusServer stopped (correlation_id=%s)", self._correlation_id)

    @web.middleware
    async def _instrument(
        self,
        request: web.Request,
        handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
    ) -> web.StreamResponse:
        started = time.perf_counter()
        response = await handler(request)
        self._metrics.status_request_duration.labels(handler=request.path).observe(
            time.perf_counter() - started
        )
        self._metrics.status_requests.labels(
            handler=request.path, code=str(response.status)
        ).inc()
        return response

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        _ = request
        return web.Response(
            body=self._metrics.exposition(),
            headers={"Content-Type": CONTENT_TYPE_LATEST},
        )

    async def _handle_health(self, request: web.Request) -> web.Response:
        _ = request
        try:
            health_details = await self._health_check()
        except Exception as e:
            correlation_id = generate_correlation_id()
            logger.exception(
                "Health check failed with exception (correlation_id=%s)",
                correlation_id,
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            return web.Response(
                text=json.dumps(
                    {
                        "status": "unhealthy",
                        "version": self._version,
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "correlation_id": str(correlation_id),
                    }
                ),
                status=503,
                content_type="application/json",
            )

        healthy = bool(health_details.get("healthy", False))
        return web.Response(
            text=json.dumps(
                {
                    "status": "healthy" if healthy else "unhealthy",
                    "version": self._version,
                    "details": health_details,
                }
            ),
            status=200 if healthy else 503,
            content_type="application/json",
        )


__all__: list[str] = ["HealthCheck", "StatusServer"]
