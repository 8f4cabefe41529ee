# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Write-ahead log for remote_write components.

Samples are appended to JSONL segment files below the engine's storage path
before they are queued for sending, so the WAL holds everything a component
has accepted.

File Format:
    {"labels":{"job":"agent_self"},"name":"up","timestamp_ms":1718000000000,"value":1.0}

File Naming:
    <storage_path>/wal/<component_id>/segment_{sequence}.jsonl
    Example: wal/remote_write.default/segment_0001.jsonl
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import IO

from pipeline_harness.engine.models import ModelSample, SeriesKey
from pipeline_harness.errors import EngineError, ModelHarnessErrorContext

logger = logging.getLogger(__name__)

DEFAULT_MAX_SEGMENT_BYTES = 8 * 1024 * 1024


class WriteAheadLog:
    """Append-only, segmented sample log with active series tracking.

    Example:
        >>> wal = WriteAheadLog(storage_path / "wal" / "remote_write.default")
        >>> await wal.append(samples)
        3
        >>> wal.active_series
        3
        >>> await wal.close()
    """

    def __init__(
        self,
        directory: Path,
        max_segment_bytes: int = DEFAULT_MAX_SEGMENT_BYTES,
    ) -> None:
        self._directory = Path(directory)
        self._max_segment_bytes = max_segment_bytes
        self._lock = asyncio.Lock()
        self._closed = False

        self._file_handle: IO[bytes] | None = None
        self._current_segment: Path | None = None
        self._current_segment_size = 0
        self._segment_sequence = 0

        self._series: set[SeriesKey] = set()
        self._samples_appended = 0

        self._directory.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def active_series(self) -> int:
        """Number of distinct series appended so far."""
        return len(self._series)

    @property
    def samples_appended(self) -> int:
        return self._samples_appended

    @property
    def current_segment(self) -> Path | None:
        return self._current_segment

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def append(self, samples: Sequence[ModelSample]) -> int:
        """Append samples and return how many were written.

        Raises:
            EngineError: If the WAL is closed or the write fails.
        """
        if self._closed:
            raise EngineError(
                "Cannot append to closed write-ahead log",
                context=ModelHarnessErrorContext(
                    operation="wal_append", target_name=str(self._directory)
                ),
            )
        if not samples:
            return 0

        async with self._lock:
            try:
                if self._file_handle is None:
                    self._open_new_segment()

                for sample in samples:
                    line_bytes = (self._serialize(sample) + "\n").encode("utf-8")
                    if (
                        self._current_segment_size > 0
                        and self._current_segment_size + len(line_bytes)
                        > self._max_segment_bytes
                    ):
                        self._rotate_segment()

                    file_handle = self._require_handle()
                    file_handle.write(line_bytes)
                    self._current_segment_size += len(line_bytes)
                    self._series.add(sample.series_key)

                self._require_handle().flush()
            except OSError as e:
                logger.exception("Failed to append to write-ahead log")
                raise EngineError(
                    f"write-ahead log append failed: {e}",
                    context=ModelHarnessErrorContext(
                        operation="wal_append", target_name=str(self._directory)
                    ),
                ) from e

            self._samples_appended += len(samples)
        return len(samples)

    def _require_handle(self) -> IO[bytes]:
        if self._file_handle is None:
            raise EngineError("write-ahead log segment is not open")
        return self._file_handle

    def _open_new_segment(self) -> None:
        self._segment_sequence += 1
        self._current_segment = (
            self._directory / f"segment_{self._segment_sequence:04d}.jsonl"
        )
        # Handle is kept open across appends and swapped on rotation.
        self._file_handle = open(self._current_segment, "ab", buffering=8192)  # noqa: SIM115
        self._current_segment_size = 0
        logger.debug("Opened write-ahead log segment %s", self._current_segment)

    def _rotate_segment(self) -> None:
        self._close_handle()
        self._open_new_segment()

    def _close_handle(self) -> None:
        if self._file_handle is not None:
            self._file_handle.flush()
            os.fsync(self._file_handle.fileno())
            self._file_handle.close()
            self._file_handle = None

    def _serialize(self, sample: ModelSample) -> str:
        return json.dumps(sample.to_dict(), separators=(",", ":"), sort_keys=True)

    async def close(self) -> None:
        """Flush and close the current segment. Idempotent."""
        if self._closed:
            return
        self._closed = True
        async with self._lock:
            self._close_handle()
        logger.debug(
            "Write-ahead log closed",
            extra={
                "directory": str(self._directory),
                "samples_appended": self._samples_appended,
                "active_series": len(self._series),
            },
        )


__all__: list[str] = ["DEFAULT_MAX_SEGMENT_BYTES", "WriteAheadLog"]
