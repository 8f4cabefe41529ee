# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Per-run ephemeral resources.

Each test run gets its own loopback port for the engine, its own storage
directory and its own capture sink, so runs never observe each other's
telemetry or state.
"""

from __future__ import annotations

import logging
import shutil
import socket
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from pipeline_harness.models import ModelHarnessConfig, ModelRuntimeHandle
from pipeline_harness.sinks import RemoteWriteCaptureSink

logger = logging.getLogger(__name__)

STORAGE_DIR_PREFIX = "pipeline-harness-"


def reserve_free_port(host: str) -> int:
    """Return a port on ``host`` that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind((host, 0))
        return s.getsockname()[1]


@asynccontextmanager
async def runtime_context(
    config: ModelHarnessConfig,
) -> AsyncIterator[ModelRuntimeHandle]:
    """Allocate port, storage directory and capture sink for one run.

    The sink is stopped and the storage directory removed on exit, also when
    the body raises.
    """
    storage_path = Path(tempfile.mkdtemp(prefix=STORAGE_DIR_PREFIX))
    sink = RemoteWriteCaptureSink(host=config.listen_host)
    try:
        await sink.start()
        handle = ModelRuntimeHandle(
            listen_host=config.listen_host,
            listen_port=reserve_free_port(config.listen_host),
            storage_path=storage_path,
            sink=sink,
        )
        logger.debug(
            "Runtime context ready",
            extra={
                "listen_address": handle.listen_address,
                "storage_path": str(storage_path),
                "sink_url": sink.write_url,
            },
        )
        yield handle
    finally:
        await sink.stop()
        shutil.rmtree(storage_path, ignore_errors=True)


__all__: list[str] = ["STORAGE_DIR_PREFIX", "reserve_free_port", "runtime_context"]
