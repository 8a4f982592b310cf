# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rendering helpers for the meta-test CLI commands."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich.text import Text

from ..checks import CheckResult, IssueLevel
from ..console import get_console_manager
from ..logging import fail, ok, section, warn
from ..scanner import relative_label


def render_result(result: CheckResult, *, root: Path, use_emoji: bool, use_color: bool) -> None:
    """Render meta check results grouped by check.

    Args:
        result: Aggregated check outcome.
        root: Repository root used to shorten issue paths.
        use_emoji: Toggle emoji prefixes.
        use_color: Toggle ANSI colour output.
    """

    for check in result.executed:
        issues = result.for_check(check)
        section(check, use_color=use_color)
        if not issues:
            ok(f"{check} passed", use_emoji=use_emoji, use_color=use_color)
            continue
        for issue in issues:
            location = _format_issue_location(issue.path, root, issue.message)
            message = f"{issue.message}{location}"
            if issue.level is IssueLevel.ERROR:
                fail(message, use_emoji=use_emoji, use_color=use_color)
            else:
                warn(message, use_emoji=use_emoji, use_color=use_color)

    section("summary", use_color=use_color)
    if result.errors:
        fail(
            f"Meta tests failed with {len(result.errors)} error(s) and {len(result.warnings)} warning(s)",
            use_emoji=use_emoji,
            use_color=use_color,
        )
    elif result.warnings:
        warn(
            f"Meta tests passed with {len(result.warnings)} warning(s)",
            use_emoji=use_emoji,
            use_color=use_color,
        )
    else:
        ok("Meta tests passed", use_emoji=use_emoji, use_color=use_color)


def render_listing(title: str, entries: Sequence[str], *, use_color: bool) -> None:
    """Render a titled plain listing, one entry per line."""

    section(title, use_color=use_color)
    console = get_console_manager().get(color=use_color, emoji=False)
    for entry in entries:
        console.print(Text(f"  {entry}"))


def _format_issue_location(path: Path | None, root: Path, message: str) -> str:
    """Return a `` [path]`` suffix unless the message already names the file."""

    if path is None:
        return ""
    label = relative_label(path, root)
    return "" if label in message else f" [{label}]"


__all__ = ["render_listing", "render_result"]
