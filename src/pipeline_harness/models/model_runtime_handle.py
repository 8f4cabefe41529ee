# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Runtime Handle Model.

The runtime handle is the read-only view a predicate has of a running
engine: the network endpoint the engine is bound to and the capture sink
receiving its telemetry. The engine writes to the sink concurrently, so
observations made through the handle are eventually consistent.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pipeline_harness.sinks.sink_remote_write_capture import (
        RemoteWriteCaptureSink,
    )


@dataclass(frozen=True)
class ModelRuntimeHandle:
    """Externally reachable surface of the engine under test.

    Attributes:
        listen_host: Host the engine's status server binds to
        listen_port: Ephemeral port reserved for the engine
        storage_path: Ephemeral directory the engine writes its WAL into
        sink: Capture sink the engine remote-writes to
    """

    listen_host: str
    listen_port: int
    storage_path: Path
    sink: RemoteWriteCaptureSink

    @property
    def listen_address(self) -> str:
        """Return ``host:port`` for the engine's status server."""
        return f"{self.listen_host}:{self.listen_port}"

    @property
    def status_url(self) -> str:
        """Return the base URL of the engine's status server."""
        return f"http://{self.listen_address}"

    def config_variables(self) -> dict[str, str]:
        """Return the placeholders made available to the engine config."""
        return {
            "remote_write_url": self.sink.write_url,
            "listen_address": self.listen_address,
        }


__all__ = ["ModelRuntimeHandle"]
