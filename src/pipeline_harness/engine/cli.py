# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Reference pipeline engine CLI.

Usage:
    pipeline-engine run config.yaml \\
        --server.http.listen-addr 127.0.0.1:12345 \\
        --storage.path ./data-pipeline \\
        --var remote_write_url=http://127.0.0.1:9009/api/v1/write

Exit Codes:
    0: Clean shutdown after SIGINT/SIGTERM
    1: Configuration error, start error or unexpected failure
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path

import click
from rich.console import Console

from pipeline_harness.engine.kernel import ENGINE_VERSION, configure_logging, run_engine
from pipeline_harness.errors import EngineError
from pipeline_harness.models import ModelLaunchArguments
from pipeline_harness.utils.util_cancellation_scope import CancellationScope

logger = logging.getLogger(__name__)

console = Console(stderr=True)

DEFAULT_LISTEN_ADDRESS = "127.0.0.1:12345"
DEFAULT_STORAGE_PATH = "data-pipeline"


def parse_variables(values: tuple[str, ...]) -> dict[str, str]:
    """Turn ``NAME=VALUE`` pairs into a dict.

    Raises:
        click.BadParameter: If a value has no ``=`` or an empty name.
    """
    variables: dict[str, str] = {}
    for value in values:
        name, sep, rest = value.partition("=")
        if not sep or not name:
            raise click.BadParameter(
                f"expected NAME=VALUE, got {value!r}", param_hint="--var"
            )
        variables[name] = rest
    return variables


async def _run_until_signalled(arguments: ModelLaunchArguments) -> int:
    scope = CancellationScope()
    loop = asyncio.get_running_loop()

    def handle_shutdown(sig: signal.Signals) -> None:
        logger.info("Received %s, initiating graceful shutdown...", sig.name)
        scope.cancel(sig.name)

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, handle_shutdown, sig)
    else:
        # Windows handlers run outside the event loop thread.
        def windows_handler(signum: int, frame: object) -> None:
            loop.call_soon_threadsafe(handle_shutdown, signal.Signals(signum))

        signal.signal(signal.SIGINT, windows_handler)

    try:
        await run_engine(arguments, scope)
    except EngineError as e:
        logger.debug("Engine failed", exc_info=True)
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    except Exception as e:
        logger.exception("Engine failed with unexpected error: %s", e)
        console.print(f"[bold red]Unexpected error:[/bold red] {e}")
        return 1
    return 0


@click.group()
@click.version_option(ENGINE_VERSION, prog_name="pipeline-engine")
def cli() -> None:
    """Reference pipeline engine."""


@cli.command("run")
@click.argument("config_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--server.http.listen-addr",
    "listen_address",
    default=DEFAULT_LISTEN_ADDRESS,
    show_default=True,
    help="host:port for the status server",
)
@click.option(
    "--storage.path",
    "storage_path",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_STORAGE_PATH,
    show_default=True,
    help="Directory for the write-ahead log",
)
@click.option(
    "--var",
    "variables",
    multiple=True,
    metavar="NAME=VALUE",
    help="Value for a ${NAME} placeholder in the configuration (repeatable)",
)
def run_cmd(
    config_path: Path,
    listen_address: str,
    storage_path: Path,
    variables: tuple[str, ...],
) -> None:
    """Run the pipeline described by CONFIG_PATH until interrupted."""
    configure_logging()
    arguments = ModelLaunchArguments(
        config_path=config_path,
        listen_address=listen_address,
        storage_path=storage_path,
        variables=parse_variables(variables),
    )
    exit_code = asyncio.run(_run_until_signalled(arguments))
    raise SystemExit(exit_code)


__all__: list[str] = ["cli", "parse_variables"]
