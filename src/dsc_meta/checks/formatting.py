# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File encoding and formatting check."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..scanner import relative_label, scan_file
from .base import CheckContext, CheckResult

FORMATTING_CATEGORY: Final[str] = "formatting"


@dataclass(slots=True)
class FormattingCheck:
    """Flag Unicode-encoded, tab-indented, empty and unterminated text files."""

    name: str = FORMATTING_CATEGORY

    def run(self, ctx: CheckContext, result: CheckResult) -> None:
        """Scan every text file and record each violation independently.

        Args:
            ctx: Check context listing the repository's text files.
            result: Collector receiving one error per violation.
        """

        for path in ctx.text_files:
            try:
                scanned = scan_file(path)
            except OSError as exc:
                result.add_warning(f"Unable to read file: {exc}", path, check=self.name)
                continue
            label = relative_label(path, ctx.root)
            if scanned.is_unicode:
                result.add_error(f"{label} is Unicode encoded; save it as ASCII or UTF-8", path, check=self.name)
            if scanned.has_tabs:
                result.add_error(f"{label} contains tab characters", path, check=self.name)
            if scanned.is_empty:
                result.add_error(f"{label} is empty", path, check=self.name)
            if scanned.missing_trailing_newline:
                result.add_error(f"{label} does not end with a newline", path, check=self.name)


__all__ = ["FORMATTING_CATEGORY", "FormattingCheck"]
