# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Packaged data files (rule catalog and opt-in manifest schema)."""
