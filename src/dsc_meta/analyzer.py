# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""PSScriptAnalyzer invocation through PowerShell."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final

from .config import POWERSHELL_COMMAND
from .errors import ToolInvocationError, ToolOutputError
from .models import LintFinding
from .parsers import parse_script_analyzer
from .severity import Severity, severity_to_analyzer_argument
from .tooling import ToolRunner, ensure_completed, powershell_array, powershell_quote

ANALYZER_CMDLET: Final[str] = "Invoke-ScriptAnalyzer"
_QUIET_PREAMBLE: Final[str] = "$WarningPreference = 'SilentlyContinue'; "
_JSON_PIPELINE: Final[str] = " | ConvertTo-Json -Depth 3 -Compress"


class ScriptAnalyzer:
    """Run ``Invoke-ScriptAnalyzer`` against individual files and parse the results."""

    def __init__(self, runner: ToolRunner, *, command: Sequence[str] = POWERSHELL_COMMAND) -> None:
        """Bind the analyzer to a tool runner.

        Args:
            runner: Runner used to execute PowerShell.
            command: PowerShell executable and flags preceding the script text.
        """

        self._runner = runner
        self._command = tuple(command)

    def build_script(
        self,
        path: Path,
        *,
        severity: Sequence[Severity] | None = None,
        include_rules: Sequence[str] | None = None,
        exclude_rules: Sequence[str] | None = None,
    ) -> str:
        """Return the PowerShell script that analyses ``path``.

        Warnings are silenced and the results are written as one compact JSON
        document so nothing else lands on stdout.
        """

        parts = [ANALYZER_CMDLET, "-Path", powershell_quote(str(path))]
        if severity:
            parts += ["-Severity", powershell_array([severity_to_analyzer_argument(level) for level in severity])]
        if include_rules:
            parts += ["-IncludeRule", powershell_array(sorted(include_rules))]
        if exclude_rules:
            parts += ["-ExcludeRule", powershell_array(sorted(exclude_rules))]
        return _QUIET_PREAMBLE + " ".join(parts) + _JSON_PIPELINE

    def analyze(
        self,
        path: Path,
        *,
        severity: Sequence[Severity] | None = None,
        include_rules: Sequence[str] | None = None,
        exclude_rules: Sequence[str] | None = None,
    ) -> list[LintFinding]:
        """Analyse ``path`` and return its findings.

        Args:
            path: Script or module file to analyse.
            severity: Optional severity filter.
            include_rules: Optional rule allow-list.
            exclude_rules: Optional rule deny-list.

        Returns:
            list[LintFinding]: Findings reported for the file. Findings without a
            path are attributed to ``path``.

        Raises:
            ToolUnavailableError: If PowerShell or the analyzer module is missing.
            ToolInvocationError: If PowerShell failed for another reason or wrote
                output that is not analyzer JSON.
        """

        script = self.build_script(
            path,
            severity=severity,
            include_rules=include_rules,
            exclude_rules=exclude_rules,
        )
        outcome = ensure_completed(self._runner.run([*self._command, script]), tool=ANALYZER_CMDLET)
        try:
            parsed = parse_script_analyzer(outcome.stdout_text)
        except ToolOutputError as exc:
            raise ToolInvocationError(ANALYZER_CMDLET, outcome.returncode, str(exc)) from exc
        return [
            finding if finding.path is not None else finding.model_copy(update={"path": path})
            for finding in parsed
        ]


__all__ = ["ANALYZER_CMDLET", "ScriptAnalyzer"]
