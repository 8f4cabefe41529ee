# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the ``pipeline-engine`` CLI."""

from __future__ import annotations

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from pipeline_harness.engine.cli import cli, parse_variables
from pipeline_harness.engine.kernel import ENGINE_VERSION


class TestParseVariables:
    """Tests for --var parsing."""

    def test_pairs(self) -> None:
        """Test that values may contain '=' and be empty."""
        assert parse_variables(("url=http://h/w?a=b", "empty=")) == {
            "url": "http://h/w?a=b",
            "empty": "",
        }

    @pytest.mark.parametrize("value", ["novalue", "=value"])
    def test_malformed(self, value: str) -> None:
        """Test that a missing '=' or name is rejected."""
        with pytest.raises(click.BadParameter):
            parse_variables((value,))


class TestCli:
    """Tests for command invocation."""

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert ENGINE_VERSION in result.output

    def test_run_missing_config_exits_1(self, tmp_path: Path) -> None:
        """Test that a load failure becomes exit code 1."""
        result = CliRunner().invoke(
            cli,
            [
                "run",
                str(tmp_path / "absent.yaml"),
                "--server.http.listen-addr",
                "127.0.0.1:0",
                "--storage.path",
                str(tmp_path / "data"),
            ],
        )

        assert result.exit_code == 1

    def test_run_rejects_malformed_var(self, tmp_path: Path) -> None:
        """Test that usage errors exit with click's usage code."""
        result = CliRunner().invoke(
            cli, ["run", str(tmp_path / "absent.yaml"), "--var", "broken"]
        )

        assert result.exit_code == 2
        assert "--var" in result.output
