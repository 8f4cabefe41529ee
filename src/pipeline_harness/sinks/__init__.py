# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Telemetry sinks used as the harness' query surface.

Sinks:
    - RemoteWriteCaptureSink: In-memory remote-write endpoint (test-only)
"""

from pipeline_harness.sinks.sink_remote_write_capture import (
    CapturedSample,
    RemoteWriteCaptureSink,
)

__all__ = [
    "CapturedSample",
    "RemoteWriteCaptureSink",
]
