# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pipeline configuration loading.

Loading Process:
    1. Read the file (missing file is reported as ``<path>: no such file or
       directory``)
    2. Substitute ``${name}`` placeholders from the launch variables
       (``string.Template`` semantics, unknown names are an error)
    3. Parse YAML; an empty document is an empty pipeline
    4. Validate against ModelPipelineConfig (unknown keys are rejected)

Every failure after the file has been read is reported with the
``could not perform the initial load successfully`` prefix, so a test can
tell a broken configuration from a missing one.
"""

from __future__ import annotations

import errno
import logging
from collections.abc import Mapping
from pathlib import Path
from string import Template
from uuid import UUID

import yaml
from pydantic import ValidationError

from pipeline_harness.engine.models import ModelPipelineConfig
from pipeline_harness.errors import EngineConfigurationError, ModelHarnessErrorContext

logger = logging.getLogger(__name__)

INITIAL_LOAD_FAILURE = "could not perform the initial load successfully"
NO_SUCH_FILE = "no such file or directory"


def load_pipeline_config(
    path: Path,
    variables: Mapping[str, str] | None = None,
    *,
    correlation_id: UUID | None = None,
) -> ModelPipelineConfig:
    """Load and validate a pipeline configuration file.

    Args:
        path: Configuration artifact.
        variables: Values for ``${name}`` placeholders.
        correlation_id: Correlation ID for logs and error context.

    Returns:
        The validated configuration.

    Raises:
        EngineConfigurationError: If the file cannot be read, substituted,
            parsed or validated.
    """
    context = ModelHarnessErrorContext(
        operation="load_config",
        target_name=str(path),
        correlation_id=correlation_id,
    )

    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as e:
        reason = NO_SUCH_FILE if e.errno == errno.ENOENT else (e.strerror or str(e))
        raise EngineConfigurationError(
            f"failed to read configuration file: {path}: {reason}",
            context=context,
            config_path=str(path),
            error_details=str(e),
        ) from e
    except UnicodeDecodeError as e:
        raise EngineConfigurationError(
            f"{INITIAL_LOAD_FAILURE}: {path} contains binary or non-UTF-8 content",
            context=context,
            config_path=str(path),
            error_details=f"Encoding error at position {e.start}-{e.end}: {e.reason}",
        ) from e

    try:
        rendered = Template(raw_text).substitute(variables or {})
    except KeyError as e:
        raise EngineConfigurationError(
            f"{INITIAL_LOAD_FAILURE}: {path}: undefined variable {e}",
            context=context,
            config_path=str(path),
        ) from e
    except ValueError as e:
        raise EngineConfigurationError(
            f"{INITIAL_LOAD_FAILURE}: {path}: {e}",
            context=context,
            config_path=str(path),
        ) from e

    try:
        raw_config = yaml.safe_load(rendered) or {}
    except yaml.YAMLError as e:
        raise EngineConfigurationError(
            f"{INITIAL_LOAD_FAILURE}: failed to parse {path}: {e}",
            context=context,
            config_path=str(path),
            error_details=str(e),
        ) from e

    if not isinstance(raw_config, dict):
        raise EngineConfigurationError(
            f"{INITIAL_LOAD_FAILURE}: {path}: top level must be a mapping, "
            f"got {type(raw_config).__name__}",
            context=context,
            config_path=str(path),
        )

    try:
        config = ModelPipelineConfig.model_validate(raw_config)
    except ValidationError as e:
        error_count = e.error_count()
        validation_errors = [
            f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        error_summary = "; ".join(validation_errors[:3])
        if error_count > 3:
            error_summary += f" (and {error_count - 3} more...)"
        raise EngineConfigurationError(
            f"{INITIAL_LOAD_FAILURE}: {path}: {error_count} error(s): {error_summary}",
            context=context,
            config_path=str(path),
            validation_errors=validation_errors,
            error_count=error_count,
        ) from e

    logger.debug(
        "Pipeline config loaded (correlation_id=%s)",
        correlation_id,
        extra={
            "config_path": str(path),
            "scrape_components": [c.component_id for c in config.scrape],
            "remote_write_components": [c.component_id for c in config.remote_write],
        },
    )
    return config


__all__: list[str] = ["INITIAL_LOAD_FAILURE", "NO_SUCH_FILE", "load_pipeline_config"]
