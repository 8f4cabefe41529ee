# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Engine Launch Arguments Model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ModelLaunchArguments(BaseModel):
    """Resolved arguments for one engine invocation.

    Attributes:
        config_path: Path of the configuration artifact
        listen_address: ``host:port`` for the status server
        storage_path: Writable ephemeral storage directory
        variables: Placeholder values substituted into the configuration
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    config_path: Path = Field(description="Path of the configuration artifact")
    listen_address: str = Field(description="host:port for the status server")
    storage_path: Path = Field(description="Writable ephemeral storage directory")
    variables: dict[str, str] = Field(
        default_factory=dict,
        description="Placeholder values substituted into the configuration",
    )

    @property
    def listen_host(self) -> str:
        host, _, _ = self.listen_address.rpartition(":")
        return host

    @property
    def listen_port(self) -> int:
        _, _, port = self.listen_address.rpartition(":")
        return int(port)

    def to_argv(self) -> list[str]:
        """Render the equivalent ``pipeline-engine`` command line.

        Example:
            >>> args.to_argv()
            ['run', 'testdata/empty.yaml', '--server.http.listen-addr',
             '127.0.0.1:41234', '--storage.path', '/tmp/pipeline-xyz']
        """
        argv = [
            "run",
            str(self.config_path),
            "--server.http.listen-addr",
            self.listen_address,
            "--storage.path",
            str(self.storage_path),
        ]
        for name, value in sorted(self.variables.items()):
            argv.extend(["--var", f"{name}={value}"])
        return argv


__all__ = ["ModelLaunchArguments"]
