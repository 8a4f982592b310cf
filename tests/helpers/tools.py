# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fake tool runner and canned tool output for check tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TypeAlias

from dsc_meta.models import ToolOutcome

Responder: TypeAlias = Callable[[tuple[str, ...], Path | None], ToolOutcome]


def outcome(returncode: int = 0, *, stdout: str = "", stderr: str = "") -> ToolOutcome:
    """Return a canned tool outcome."""

    return ToolOutcome(returncode=returncode, stdout=stdout, stderr=stderr)


def manifest_json(
    version: str | None = "4.0",
    *,
    exported: Sequence[str] = (),
    nested: Sequence[str] = (),
) -> str:
    data: dict[str, object] = {"ModuleVersion": "1.0.0.0"}
    if version is not None:
        data["PowerShellVersion"] = version
    if exported:
        data["ExportedDscResources"] = list(exported)
    if nested:
        data["NestedModules"] = list(nested)
    return json.dumps(data)


def analyzer_json(*entries: tuple[str, int, str]) -> str:
    """Build ``Invoke-ScriptAnalyzer | ConvertTo-Json`` output from (rule, severity, message)."""

    return json.dumps(
        [
            {"RuleName": rule, "Severity": severity, "Line": 1, "Message": message}
            for rule, severity, message in entries
        ],
    )


class FakeToolRunner:
    """Record tool invocations and answer them from a responder callable."""

    def __init__(self, responder: Responder | None = None) -> None:
        self.calls: list[tuple[tuple[str, ...], Path | None]] = []
        self._responder = responder

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> ToolOutcome:
        command = tuple(args)
        self.calls.append((command, cwd))
        if self._responder is None:
            return default_responder(command, cwd)
        return self._responder(command, cwd)

    def scripts_containing(self, needle: str) -> list[str]:
        return [call[0][-1] for call in self.calls if needle in call[0][-1]]


def default_responder(args: tuple[str, ...], cwd: Path | None) -> ToolOutcome:
    """Answer like a healthy toolchain reporting nothing."""

    script = args[-1]
    if "Import-PowerShellDataFile" in script:
        return outcome(stdout=manifest_json())
    return outcome()


__all__ = ["FakeToolRunner", "Responder", "analyzer_json", "default_responder", "manifest_json", "outcome"]
