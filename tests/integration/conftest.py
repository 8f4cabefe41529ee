# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared pytest configuration for integration tests.

Applies the `integration` marker to every test under tests/integration/.
These tests start the reference engine and bind loopback ports.

Usage:
    pytest -m integration
    pytest -m "not integration"
"""

import pytest


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Dynamically add integration marker to all tests in the integration directory."""
    integration_marker = pytest.mark.integration

    for item in items:
        if "tests/integration" in str(item.fspath):
            if not any(marker.name == "integration" for marker in item.iter_markers()):
                item.add_marker(integration_marker)
