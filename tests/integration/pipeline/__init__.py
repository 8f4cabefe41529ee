# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pipeline scenarios: startup failures, clean shutdown and self-scrape."""
