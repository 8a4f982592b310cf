# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate analyzer rule suppressions declared in PowerShell sources."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Final

from .models import SuppressionRecord

# Matches SuppressMessage(...), SuppressMessageAttribute(...) and the short
# Suppress('Rule') annotation; the first quoted argument is the rule name.
_SUPPRESSION_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"Suppress(?:Message(?:Attribute)?)?\s*\(\s*['\"](?P<rule>[A-Za-z0-9_.\\/-]+)['\"]",
    re.IGNORECASE,
)


def _normalise_rule(raw: str) -> str:
    """Strip a module prefix such as ``PSScriptAnalyzer\\`` from ``raw``."""

    for separator in ("\\", "/"):
        if separator in raw:
            raw = raw.rsplit(separator, 1)[1]
    return raw


def find_suppressions(path: Path, text: str) -> list[SuppressionRecord]:
    """Return every rule named by a suppression annotation in ``text``.

    Args:
        path: Source file the text was read from.
        text: Decoded file content.

    Returns:
        list[SuppressionRecord]: Records in file order.
    """

    records: list[SuppressionRecord] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        for match in _SUPPRESSION_PATTERN.finditer(line):
            records.append(
                SuppressionRecord(rule=_normalise_rule(match.group("rule")), path=path, line=line_number),
            )
    return records


def scan_suppressions(paths: Iterable[Path]) -> list[SuppressionRecord]:
    """Collect suppression records across ``paths``."""

    records: list[SuppressionRecord] = []
    for path in paths:
        records.extend(find_suppressions(path, path.read_text(encoding="utf-8", errors="replace")))
    return records


__all__ = ["find_suppressions", "scan_suppressions"]
