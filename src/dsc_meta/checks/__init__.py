# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Meta checks applied to a DSC resource module repository."""

from __future__ import annotations

from .analyzer import AnalyzerCheck, SuppressionCheck
from .base import CheckContext, CheckIssue, CheckProtocolError, CheckResult, IssueLevel, MetaCheck
from .formatting import FormattingCheck
from .manifest import ManifestCheck
from .optional import ExampleCheck, MarkdownCheck
from .schema import SchemaCheck

__all__ = [
    "AnalyzerCheck",
    "CheckContext",
    "CheckIssue",
    "CheckProtocolError",
    "CheckResult",
    "ExampleCheck",
    "FormattingCheck",
    "IssueLevel",
    "ManifestCheck",
    "MarkdownCheck",
    "MetaCheck",
    "SchemaCheck",
    "SuppressionCheck",
]
