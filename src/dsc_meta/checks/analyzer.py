# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Static-analysis rule compliance and suppression checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from ..analyzer import ScriptAnalyzer
from ..catalog import Decision, RuleTier
from ..errors import ToolInvocationError, ToolUnavailableError
from ..models import LintFinding
from ..optin import FLAGGED_RULES_SUITE, NEW_RULES_SUITE
from ..scanner import relative_label
from ..severity import Severity
from ..suppressions import find_suppressions
from .base import CheckContext, CheckResult

LOGGER = logging.getLogger(__name__)

ANALYZER_CATEGORY: Final[str] = "analyzer"
SUPPRESSIONS_CATEGORY: Final[str] = "suppressions"
_TIER_LABELS: Final[dict[RuleTier, str]] = {
    RuleTier.REQUIRED: "required rule",
    RuleTier.FLAGGED: "flagged rule",
    RuleTier.IGNORED: "ignored rule",
    RuleTier.UNKNOWN: "recently added rule",
}


def _describe(finding: LintFinding, tier: RuleTier, label: str) -> str:
    line = f":{finding.line}" if finding.line is not None else ""
    return f"{label}{line} {finding.rule} ({_TIER_LABELS[tier]}, {finding.severity.value}): {finding.message}"


@dataclass(slots=True)
class AnalyzerCheck:
    """Run PSScriptAnalyzer on every script and classify findings by rule tier."""

    name: str = ANALYZER_CATEGORY

    def run(self, ctx: CheckContext, result: CheckResult) -> None:
        """Analyse PowerShell sources and record each finding.

        Parse errors always fail. Other findings follow the rule catalog, with
        the flagged and recently added tiers made strict by their opt-in suites.
        A missing analyzer skips the check with a warning.

        Args:
            ctx: Check context with the catalog, opt-ins and tool runner.
            result: Collector receiving classified findings.
        """

        analyzer = ScriptAnalyzer(ctx.runner, command=ctx.config.analyzer.command)
        strict_flagged = ctx.opt_ins.enforces(FLAGGED_RULES_SUITE)
        strict_unknown = ctx.opt_ins.enforces(NEW_RULES_SUITE)
        for path in ctx.source_files(ctx.config.analyzer.extensions):
            label = relative_label(path, ctx.root)
            try:
                findings = analyzer.analyze(path)
            except ToolUnavailableError as exc:
                result.add_warning(f"Skipping script analysis: {exc}", check=self.name)
                return
            except ToolInvocationError as exc:
                result.add_warning(f"Script analysis failed for {label}: {exc}", path, check=self.name)
                continue
            LOGGER.debug("%s: %d analyzer finding(s)", label, len(findings))
            for finding in findings:
                tier = ctx.catalog.tier(finding.rule)
                if finding.severity is Severity.PARSE_ERROR:
                    decision = Decision.HARD_FAIL
                else:
                    decision = ctx.catalog.decide(
                        finding,
                        strict_flagged=strict_flagged,
                        strict_unknown=strict_unknown,
                    )
                message = _describe(finding, tier, label)
                if decision is Decision.HARD_FAIL:
                    result.add_error(message, path, check=self.name)
                elif decision is Decision.WARN:
                    result.add_warning(message, path, check=self.name)


@dataclass(slots=True)
class SuppressionCheck:
    """Fail when a source file suppresses a required analyzer rule."""

    name: str = SUPPRESSIONS_CATEGORY

    def run(self, ctx: CheckContext, result: CheckResult) -> None:
        """Scan sources for suppression annotations naming required rules.

        This does not depend on analyzer output: suppressing a required rule
        fails even when the rule would not have fired.

        Args:
            ctx: Check context with the rule catalog.
            result: Collector receiving one error per suppressed required rule.
        """

        for path in ctx.source_files(ctx.config.analyzer.extensions):
            try:
                text = path.read_text(encoding="utf-8-sig", errors="replace")
            except OSError as exc:
                result.add_warning(f"Unable to read file: {exc}", path, check=self.name)
                continue
            label = relative_label(path, ctx.root)
            for record in ctx.catalog.suppressed_required(find_suppressions(path, text)):
                result.add_error(
                    f"{label}:{record.line} suppresses required rule {record.rule}",
                    path,
                    check=self.name,
                )


__all__ = ["ANALYZER_CATEGORY", "AnalyzerCheck", "SUPPRESSIONS_CATEGORY", "SuppressionCheck"]
