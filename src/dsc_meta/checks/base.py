# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared meta-check data structures and protocols."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..catalog import RuleCatalog
from ..config import MetaConfig
from ..optin import OptInManifest
from ..tooling import ToolRunner


class IssueLevel(str, Enum):
    """Define severity classifications for discovered issues."""

    ERROR = "error"
    WARNING = "warning"


class CheckIssue(BaseModel):
    """Capture a single issue discovered by a check."""

    model_config = ConfigDict(frozen=True)

    level: IssueLevel
    message: str
    path: Path | None = None
    check: str | None = None


class CheckResult(BaseModel):
    """Collect the violations reported by every check in a run.

    Checks append to the same collector instead of setting shared flags, and
    the collector is rendered once when the run finishes.
    """

    model_config = ConfigDict(validate_assignment=True)

    issues: list[CheckIssue] = Field(default_factory=list)
    executed: list[str] = Field(default_factory=list)

    def _append(self, level: IssueLevel, message: str, path: Path | None, check: str | None) -> None:
        issues = list(self.issues)
        issues.append(CheckIssue(level=level, message=message, path=path, check=check))
        self.issues = issues

    def add_error(self, message: str, path: Path | None = None, *, check: str | None = None) -> None:
        """Record an error-level issue that fails the run.

        Args:
            message: Description of the issue.
            path: Optional file location associated with the issue.
            check: Optional identifier describing the originating check.
        """

        self._append(IssueLevel.ERROR, message, path, check)

    def add_warning(self, message: str, path: Path | None = None, *, check: str | None = None) -> None:
        """Record a warning-level issue that is reported but does not fail the run.

        Args:
            message: Description of the warning.
            path: Optional file location associated with the warning.
            check: Optional identifier describing the originating check.
        """

        self._append(IssueLevel.WARNING, message, path, check)

    def add_gated(
        self,
        message: str,
        path: Path | None = None,
        *,
        enforced: bool,
        check: str | None = None,
    ) -> None:
        """Record an issue from an opt-in gated check.

        The check has already run either way; ``enforced`` only decides whether
        its failure is an error or a warning.

        Args:
            message: Description of the issue.
            path: Optional file location associated with the issue.
            enforced: ``True`` when the repository opted in to the suite.
            check: Optional identifier describing the originating check.
        """

        self._append(IssueLevel.ERROR if enforced else IssueLevel.WARNING, message, path, check)

    def mark_executed(self, check: str) -> None:
        """Record that ``check`` ran."""

        self.executed = [*self.executed, check]

    @property
    def errors(self) -> list[CheckIssue]:
        """Return recorded issues that are classified as errors."""

        return [issue for issue in self.issues if issue.level is IssueLevel.ERROR]

    @property
    def warnings(self) -> list[CheckIssue]:
        """Return recorded issues that are classified as warnings."""

        return [issue for issue in self.issues if issue.level is IssueLevel.WARNING]

    def for_check(self, check: str) -> list[CheckIssue]:
        """Return the issues recorded by ``check``."""

        return [issue for issue in self.issues if issue.check == check]

    def exit_code(self) -> int:
        """Calculate the process exit code implied by the collected issues.

        Returns:
            int: ``1`` when errors are present; otherwise ``0``.
        """

        return 1 if self.errors else 0


@dataclass(slots=True)
class CheckContext:
    """Shared, read-only context passed to individual checks."""

    root: Path
    config: MetaConfig
    catalog: RuleCatalog
    opt_ins: OptInManifest
    runner: ToolRunner
    text_files: Sequence[Path]

    def source_files(self, suffixes: Sequence[str]) -> list[Path]:
        """Return scanned text files whose suffix is in ``suffixes``."""

        wanted = {suffix.lower() for suffix in suffixes}
        return [path for path in self.text_files if path.suffix.lower() in wanted]


class CheckProtocolError(RuntimeError):
    """Raised when a MetaCheck protocol method is invoked without an implementation."""


class MetaCheck(Protocol):
    """Define the contract for individual meta checks."""

    name: str

    @abstractmethod
    def run(self, ctx: CheckContext, result: CheckResult) -> None:
        """Execute the check and append findings to ``result``.

        Args:
            ctx: Shared context describing the repository and configuration.
            result: Accumulator capturing findings emitted by the check.

        Raises:
            CheckProtocolError: Raised when an implementation does not override ``run``.
        """

        msg = "MetaCheck implementations must override run() to perform evaluations."
        raise CheckProtocolError(msg)


__all__ = [
    "CheckContext",
    "CheckIssue",
    "CheckProtocolError",
    "CheckResult",
    "IssueLevel",
    "MetaCheck",
]
