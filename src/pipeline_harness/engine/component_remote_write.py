# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Remote write component.

Receives samples from scrape components, records them in its write-ahead log
and sends them to a remote endpoint in batches.

Wire Format (``POST <url>``, JSON):
    {"timeseries": [{"labels": {"__name__": "up", ...}, "samples": [[ts_ms, value]]}]}

Non-finite values are written to the WAL but never sent, since they have no
JSON representation.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections import deque
from collections.abc import Sequence
from pathlib import Path

import httpx

from pipeline_harness.engine.models import (
    METRIC_NAME_LABEL,
    ModelRemoteWriteConfig,
    ModelSample,
    SeriesKey,
)
from pipeline_harness.engine.telemetry import EngineMetrics
from pipeline_harness.engine.wal import WriteAheadLog

logger = logging.getLogger(__name__)


def encode_write_request(samples: Sequence[ModelSample]) -> dict[str, object]:
    """Group samples by series into a write request body."""
    grouped: dict[SeriesKey, list[list[float]]] = {}
    for sample in samples:
        if not math.isfinite(sample.value):
            continue
        grouped.setdefault(sample.series_key, []).append(
            [sample.timestamp_ms, sample.value]
        )

    timeseries = []
    for (name, labels), points in grouped.items():
        timeseries.append(
            {
                "labels": {METRIC_NAME_LABEL: name, **dict(labels)},
                "samples": points,
            }
        )
    return {"timeseries": timeseries}


class RemoteWriteComponent:
    """WAL-backed batching sender for one ``remote_write`` block."""

    def __init__(
        self,
        config: ModelRemoteWriteConfig,
        storage_path: Path,
        metrics: EngineMetrics,
        client: httpx.AsyncClient,
    ) -> None:
        self._config = config
        self._metrics = metrics
        self._client = client
        self._wal = WriteAheadLog(storage_path / "wal" / config.component_id)
        self._pending: deque[ModelSample] = deque(maxlen=config.max_pending_samples)
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def component_id(self) -> str:
        return self._config.component_id

    @property
    def wal(self) -> WriteAheadLog:
        return self._wal

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def start(self) -> None:
        if self._task is not None:
            return
        self._metrics.init_remote_write_component(self.component_id)
        self._task = asyncio.create_task(
            self._send_loop(), name=f"{self.component_id}-sender"
        )
        logger.info(
            "Remote write component started",
            extra={"component_id": self.component_id, "url": self._config.url},
        )

    async def append(self, samples: Sequence[ModelSample]) -> None:
        """Accept samples from an upstream component."""
        started = time.perf_counter()
        written = await self._wal.append(samples)
        labels = {"component_id": self.component_id}
        self._metrics.wal_append_duration.labels(**labels).observe(
            time.perf_counter() - started
        )
        self._metrics.wal_samples_appended.labels(**labels).inc(written)
        self._metrics.wal_active_series.labels(**labels).set(self._wal.active_series)

        self._pending.extend(samples)
        self._metrics.remote_write_pending_samples.labels(**labels).set(
            len(self._pending)
        )

    async def flush(self) -> int:
        """Send everything pending. Returns the number of samples sent.

        A failed request is logged and counted; its batch is dropped.
        """
        sent = 0
        labels = {"component_id": self.component_id}
        while self._pending:
            batch = [
                self._pending.popleft()
                for _ in range(min(self._config.max_batch_size, len(self._pending)))
            ]
            started = time.perf_counter()
            try:
                response = await self._client.post(
                    self._config.url,
                    json=encode_write_request(batch),
                    timeout=self._config.request_timeout_seconds,
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                self._metrics.remote_write_failed_requests.labels(**labels).inc()
                logger.warning(
                    "Remote write to %s failed: %s",
                    self._config.url,
                    e,
                    extra={
                        "component_id": self.component_id,
                        "error_type": type(e).__name__,
                        "dropped_samples": len(batch),
                    },
                )
                continue
            finally:
                self._metrics.remote_write_send_duration.labels(**labels).observe(
                    time.perf_counter() - started
                )

            self._metrics.remote_write_batch_size.labels(**labels).observe(len(batch))
            self._metrics.remote_write_samples_sent.labels(**labels).inc(len(batch))
            sent += len(batch)

        self._metrics.remote_write_pending_samples.labels(**labels).set(0)
        return sent

    async def _send_loop(self) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(
                    self._stop.wait(), timeout=self._config.batch_send_interval_seconds
                )
            except TimeoutError:
                pass
            count = await self.flush()
            if count > 0:
                logger.debug(
                    "Sent %d sample(s)", count, extra={"component_id": self.component_id}
                )

    async def stop(self) -> None:
        """Stop the sender, then close the WAL. Pending samples are sent once more."""
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
        await self._wal.close()
        logger.info(
            "Remote write component stopped",
            extra={
                "component_id": self.component_id,
                "samples_appended": self._wal.samples_appended,
            },
        )


__all__: list[str] = ["RemoteWriteComponent", "encode_write_request"]
