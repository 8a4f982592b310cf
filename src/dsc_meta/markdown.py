# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Markdown linting through the external markdownlint toolchain."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .models import LintFinding
from .parsers import parse_markdownlint
from .tooling import ToolRunner, ensure_completed


class MarkdownLinter:
    """Lint markdown files with ``markdownlint --json``."""

    def __init__(self, runner: ToolRunner, *, command: Sequence[str] = ("markdownlint", "--json")) -> None:
        self._runner = runner
        self._command = tuple(command)

    @property
    def tool(self) -> str:
        """Return the executable used for linting."""

        return self._command[0]

    def lint(self, paths: Sequence[Path], *, cwd: Path | None = None) -> list[LintFinding]:
        """Lint ``paths`` and return every reported issue.

        markdownlint exits non-zero when it reports issues, so a non-zero exit
        only counts as a tool failure when no issues could be parsed.

        Args:
            paths: Markdown files to lint.
            cwd: Working directory for the linter (repository root).

        Returns:
            list[LintFinding]: Reported issues; relative paths resolve against ``cwd``.

        Raises:
            ToolUnavailableError: If the linter cannot be located.
            ToolInvocationError: If the linter failed without reporting issues.
        """

        if not paths:
            return []
        outcome = self._runner.run([*self._command, *(str(path) for path in paths)], cwd=cwd)
        findings = parse_markdownlint(outcome.stderr_text) or parse_markdownlint(outcome.stdout_text)
        if not findings:
            ensure_completed(outcome, tool=self.tool)
            return []
        if cwd is not None:
            findings = [
                finding.model_copy(update={"path": cwd / finding.path})
                if finding.path is not None and not finding.path.is_absolute()
                else finding
                for finding in findings
            ]
        return findings


__all__ = ["MarkdownLinter"]
