# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Opt-in gated checks: example compilation and markdown linting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..errors import ToolInvocationError, ToolUnavailableError
from ..examples import ExampleCompiler, find_examples
from ..markdown import MarkdownLinter
from ..models import ToolExitCategory, ToolOutcome
from ..optin import EXAMPLES_SUITE, MARKDOWN_SUITE
from ..scanner import relative_label
from .base import CheckContext, CheckResult

EXAMPLES_CATEGORY: Final[str] = "examples"
MARKDOWN_CATEGORY: Final[str] = "markdown"
MARKDOWN_SUFFIXES: Final[tuple[str, ...]] = (".md",)


def _failure_reason(outcome: ToolOutcome) -> str:
    detail = outcome.stderr_text.strip().splitlines()
    return detail[-1] if detail else f"exit status {outcome.returncode}"


@dataclass(slots=True)
class ExampleCheck:
    """Compile every example configuration, failing only when opted in."""

    name: str = EXAMPLES_CATEGORY

    def run(self, ctx: CheckContext, result: CheckResult) -> None:
        """Compile examples and record failures at the gated level.

        A compilation that did not finish, such as a timeout, is a tool failure
        and only warns.

        Args:
            ctx: Check context with the opt-in manifest and tool runner.
            result: Collector receiving one issue per failed example.
        """

        enforced = ctx.opt_ins.enforces(EXAMPLES_SUITE)
        compiler = ExampleCompiler(ctx.runner, command=ctx.config.examples.command)
        for example in find_examples(ctx.root, ctx.config.examples.directory):
            label = relative_label(example, ctx.root)
            try:
                outcome = compiler.compile(example)
            except ToolUnavailableError as exc:
                result.add_warning(f"Skipping example compilation: {exc}", check=self.name)
                return
            if outcome.ok:
                continue
            if outcome.exit_category is ToolExitCategory.TOOL_FAILURE:
                result.add_warning(
                    f"{label} could not be compiled: {_failure_reason(outcome)}",
                    example,
                    check=self.name,
                )
                continue
            result.add_gated(
                f"{label} failed to compile: {_failure_reason(outcome)}",
                example,
                enforced=enforced,
                check=self.name,
            )


@dataclass(slots=True)
class MarkdownCheck:
    """Lint markdown files, failing only when opted in."""

    name: str = MARKDOWN_CATEGORY

    def run(self, ctx: CheckContext, result: CheckResult) -> None:
        """Lint markdown and record every reported issue at the gated level.

        Args:
            ctx: Check context with the opt-in manifest and tool runner.
            result: Collector receiving one issue per markdown finding.
        """

        files = ctx.source_files(MARKDOWN_SUFFIXES)
        if not files:
            return
        enforced = ctx.opt_ins.enforces(MARKDOWN_SUITE)
        linter = MarkdownLinter(ctx.runner, command=ctx.config.markdown.command)
        try:
            findings = linter.lint(files, cwd=ctx.root)
        except (ToolUnavailableError, ToolInvocationError) as exc:
            result.add_warning(f"Skipping markdown validation: {exc}", check=self.name)
            return
        for finding in findings:
            label = relative_label(finding.path, ctx.root) if finding.path is not None else "<markdown>"
            line = f":{finding.line}" if finding.line is not None else ""
            result.add_gated(
                f"{label}{line} {finding.rule}: {finding.message}",
                finding.path,
                enforced=enforced,
                check=self.name,
            )


__all__ = ["EXAMPLES_CATEGORY", "ExampleCheck", "MARKDOWN_CATEGORY", "MarkdownCheck"]
