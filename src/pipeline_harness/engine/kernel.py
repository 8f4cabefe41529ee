# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Reference Pipeline Engine Kernel.

Bootstrap for one engine instance. ``run_engine`` is the engine invocation
contract the harness launches; the ``pipeline-engine`` CLI wraps the same
coroutine with signal handling.

Bootstrap Sequence:
    1. Load and validate the pipeline configuration
    2. Register engine metrics on the current default metrics targets
    3. Start the pipeline host process (remote_write, status server, scrape)
    4. Run until the cancellation scope is cancelled
    5. Stop the host process; the function returns None

Failures propagate as exceptions:
    - EngineConfigurationError: missing, unreadable or invalid configuration
    - EngineStartError: metrics cannot be registered, or the listen address
      cannot be bound

Environment Variables:
    PIPELINE_LOG_LEVEL: Logging level for ``configure_logging()`` (default: INFO)
"""

from __future__ import annotations

import logging
import time
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version

from pipeline_harness.engine.config_loader import load_pipeline_config
from pipeline_harness.engine.pipeline_host_process import PipelineHostProcess
from pipeline_harness.engine.telemetry import (
    EngineMetrics,
    MetricsTargets,
    get_default_targets,
)
from pipeline_harness.errors import EngineStartError, ModelHarnessErrorContext
from pipeline_harness.models import ModelLaunchArguments
from pipeline_harness.utils.correlation import generate_correlation_id
from pipeline_harness.utils.util_cancellation_scope import CancellationScope
from pipeline_harness.utils.util_env_parsing import parse_env_log_level

logger = logging.getLogger(__name__)

# Read from installed package metadata to avoid drift with pyproject.toml.
try:
    ENGINE_VERSION = get_package_version("pipeline-harness")
except PackageNotFoundError:
    ENGINE_VERSION = "unknown"


async def run_engine(
    arguments: ModelLaunchArguments,
    cancellation_scope: CancellationScope,
    *,
    targets: MetricsTargets | None = None,
) -> None:
    """Run one engine instance until ``cancellation_scope`` is cancelled.

    Args:
        arguments: Config path, listen address, storage path and variables.
        cancellation_scope: Cancelling it starts a graceful shutdown.
        targets: Metrics targets to register on. Defaults to the process-wide
            default targets, read once here.

    Raises:
        EngineConfigurationError: If the configuration cannot be loaded.
        EngineStartError: If the engine cannot start.
    """
    correlation_id = generate_correlation_id()
    bootstrap_start_time = time.time()

    config = load_pipeline_config(
        arguments.config_path,
        arguments.variables,
        correlation_id=correlation_id,
    )

    try:
        metrics = EngineMetrics(targets or get_default_targets(), version=ENGINE_VERSION)
    except ValueError as e:
        raise EngineStartError(
            f"failed to register engine metrics: {e}",
            context=ModelHarnessErrorContext(
                operation="register_metrics",
                target_name=arguments.listen_address,
                correlation_id=correlation_id,
            ),
        ) from e

    host = PipelineHostProcess(
        config,
        arguments,
        metrics,
        version=ENGINE_VERSION,
        correlation_id=correlation_id,
    )
    try:
        await host.start()

        bootstrap_duration = time.time() - bootstrap_start_time
        banner_lines = [
            "=" * 60,
            f"Pipeline Engine v{ENGINE_VERSION}",
            f"Config: {arguments.config_path}",
            f"Components: {len(config.scrape)} scrape, "
            f"{len(config.remote_write)} remote_write",
            f"Status endpoint: http://{arguments.listen_address}/metrics",
            f"Storage: {arguments.storage_path}",
            f"Bootstrap time: {bootstrap_duration:.3f}s",
            f"Correlation ID: {correlation_id}",
            "=" * 60,
        ]
        logger.info("\n%s", "\n".join(banner_lines))

        await cancellation_scope.wait()

        shutdown_start_time = time.time()
        logger.info(
            "Shutdown requested (%s), stopping pipeline (correlation_id=%s)",
            cancellation_scope.reason,
            correlation_id,
        )
    finally:
        await host.stop()

    logger.info(
        "Pipeline engine stopped in %.3fs (correlation_id=%s)",
        time.time() - shutdown_start_time,
        correlation_id,
    )


def configure_logging() -> None:
    """Configure logging from ``PIPELINE_LOG_LEVEL`` (default: INFO).

    Called before the configuration is loaded, so logging is available for
    load errors.

    Log Format Example:
        2025-01-15 10:30:45 [INFO] pipeline_harness.engine.kernel: Pipeline Engine v0.1.0
    """
    log_level = parse_env_log_level("PIPELINE_LOG_LEVEL")
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


__all__: list[str] = ["ENGINE_VERSION", "configure_logging", "run_engine"]
