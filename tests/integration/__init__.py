# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""End-to-end tests that run the reference engine under the harness."""
