# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the harness components.

The harness is exercised against the fake engines in tests.helpers, so these
tests never start a real pipeline.
"""
