# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Remote-write capture sink.

An in-process HTTP endpoint that stands in for a metrics backend. The engine
under test remote-writes to it; test predicates query what arrived.

Wire Format (``POST /api/v1/write``, JSON):
    {
        "timeseries": [
            {"labels": {"__name__": "up", "job": "agent_self"},
             "samples": [[1718000000000, 1.0]]}
        ]
    }

Query Surface:
    - writes_count(): number of accepted write requests
    - find_last_sample_matching(name, **labels): value of the most recently
      received sample with that name whose labels include every filter pair,
      0.0 if none matches

WARNING: Samples are held in memory for the lifetime of the sink. Intended
for tests only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from aiohttp import web

from pipeline_harness.engine.models import METRIC_NAME_LABEL
from pipeline_harness.enums import EnumHarnessPhase
from pipeline_harness.errors import HarnessError, ModelHarnessErrorContext

logger = logging.getLogger(__name__)

DEFAULT_WRITE_PATH = "/api/v1/write"


@dataclass(frozen=True)
class CapturedSample:
    """One sample as received by the sink."""

    name: str
    labels: dict[str, str]
    value: float
    timestamp_ms: int


class RemoteWriteCaptureSink:
    """Captures remote-write requests in memory and answers queries about them.

    Example:
        >>> sink = RemoteWriteCaptureSink(host="127.0.0.1")
        >>> await sink.start()
        >>> sink.write_url
        'http://127.0.0.1:40123/api/v1/write'
        >>> sink.find_last_sample_matching("up", job="agent_self")
        0.0
        >>> await sink.stop()
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 0,
        path: str = DEFAULT_WRITE_PATH,
    ) -> None:
        self._host = host
        self._port = port
        self._path = path
        self._runner: web.AppRunner | None = None
        self._bound_port: int | None = None
        self._writes = 0
        self._rejected = 0
        self._samples: list[CapturedSample] = []

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    @property
    def port(self) -> int:
        """Return the bound port.

        Raises:
            HarnessError: If the sink has not been started.
        """
        if self._bound_port is None:
            raise HarnessError(
                "RemoteWriteCaptureSink is not started",
                context=ModelHarnessErrorContext(
                    phase=EnumHarnessPhase.SETUP, operation="sink_port"
                ),
            )
        return self._bound_port

    @property
    def write_url(self) -> str:
        return f"http://{self._host}:{self.port}{self._path}"

    async def start(self) -> None:
        """Bind the sink. Idempotent.

        Raises:
            HarnessError: If the port cannot be bound.
        """
        if self._runner is not None:
            return

        app = web.Application()
        app.router.add_post(self._path, self._handle_write)
        runner = web.AppRunner(app, shutdown_timeout=1.0)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            raise HarnessError(
                f"Failed to start capture sink on {self._host}:{self._port}: {e}",
                context=ModelHarnessErrorContext(
                    phase=EnumHarnessPhase.SETUP,
                    operation="start_capture_sink",
                    target_name=f"{self._host}:{self._port}",
                ),
            ) from e

        self._runner = runner
        self._bound_port = runner.addresses[0][1]
        logger.debug("Capture sink listening on %s", self.write_url)

    async def stop(self) -> None:
        """Release the port. Captured samples stay queryable. Idempotent."""
        if self._runner is None:
            return
        runner, self._runner = self._runner, None
        await runner.cleanup()
        logger.debug(
            "Capture sink stopped",
            extra={"writes": self._writes, "samples": len(self._samples)},
        )

    def writes_count(self) -> int:
        """Return the number of accepted write requests."""
        return self._writes

    def rejected_count(self) -> int:
        """Return the number of malformed write requests."""
        return self._rejected

    def series_count(self) -> int:
        """Return the number of distinct series received so far."""
        return len(
            {
                (sample.name, tuple(sorted(sample.labels.items())))
                for sample in self._samples
            }
        )

    def find_last_sample_matching(self, metric_name: str, **label_filters: str) -> float:
        """Return the most recent value of ``metric_name`` matching the label filters.

        Args:
            metric_name: Value of the ``__name__`` label.
            **label_filters: Labels the series must carry with exactly these
                values. Other labels are ignored.

        Returns:
            The value, or 0.0 if no received sample matches.
        """
        for sample in reversed(self._samples):
            if sample.name != metric_name:
                continue
            if all(sample.labels.get(key) == value for key, value in label_filters.items()):
                return sample.value
        return 0.0

    def reset(self) -> None:
        """Forget everything received so far."""
        self._writes = 0
        self._rejected = 0
        self._samples.clear()

    async def _handle_write(self, request: web.Request) -> web.Response:
        try:
            payload = await request.json()
            received = _decode_timeseries(payload)
        except (ValueError, TypeError, KeyError) as e:
            self._rejected += 1
            logger.warning(
                "Rejected malformed remote write: %s",
                e,
                extra={"error_type": type(e).__name__},
            )
            return web.json_response({"error": str(e)}, status=400)

        self._samples.extend(received)
        self._writes += 1
        return web.Response(status=204)


def _decode_timeseries(payload: object) -> list[CapturedSample]:
    if not isinstance(payload, dict):
        raise TypeError("payload must be a JSON object")

    samples: list[CapturedSample] = []
    for series in payload["timeseries"]:
        labels = {str(key): str(value) for key, value in series["labels"].items()}
        name = labels.pop(METRIC_NAME_LABEL)
        for timestamp_ms, value in series["samples"]:
            samples.append(
                CapturedSample(
                    name=name,
                    labels=labels,
                    value=float(value),
                    timestamp_ms=int(timestamp_ms),
                )
            )
    return samples


__all__: list[str] = ["CapturedSample", "DEFAULT_WRITE_PATH", "RemoteWriteCaptureSink"]
