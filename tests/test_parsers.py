# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for analyzer and markdownlint output parsing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from tests.helpers.tools import FakeToolRunner, analyzer_json, outcome

from dsc_meta.analyzer import ScriptAnalyzer
from dsc_meta.errors import ToolInvocationError, ToolOutputError
from dsc_meta.markdown import MarkdownLinter
from dsc_meta.parsers import parse_markdownlint, parse_script_analyzer
from dsc_meta.severity import Severity, severity_from_analyzer, severity_to_analyzer_argument


def test_severity_mapping() -> None:
    assert severity_from_analyzer(0) is Severity.INFORMATION
    assert severity_from_analyzer(2) is Severity.ERROR
    assert severity_from_analyzer("3") is Severity.PARSE_ERROR
    assert severity_from_analyzer("ParseError") is Severity.PARSE_ERROR
    assert severity_from_analyzer(None) is Severity.WARNING
    assert severity_from_analyzer("bogus", Severity.ERROR) is Severity.ERROR
    assert Severity.PARSE_ERROR.is_error
    assert not Severity.WARNING.is_error
    assert severity_to_analyzer_argument(Severity.PARSE_ERROR) == "ParseError"


def test_parse_script_analyzer_single_object() -> None:
    payload = json.dumps(
        {
            "RuleName": "PSAvoidUsingWMICmdlet",
            "Severity": 1,
            "Line": 12,
            "ScriptPath": "C:\\src\\a.ps1",
            "Message": "Avoid WMI",
        },
    )
    [finding] = parse_script_analyzer(payload)
    assert finding.rule == "PSAvoidUsingWMICmdlet"
    assert finding.severity is Severity.WARNING
    assert finding.line == 12
    assert finding.message == "Avoid WMI"


def test_parse_script_analyzer_empty_output() -> None:
    assert parse_script_analyzer("") == []
    assert parse_script_analyzer("   \n") == []


def test_parse_script_analyzer_skips_preamble_before_pretty_json() -> None:
    report = [{"RuleName": "PSAvoidUsingWMICmdlet", "Severity": 2, "Line": 4, "Message": "Avoid WMI"}]
    payload = "WARNING: module auto-loaded\n" + json.dumps(report, indent=2)

    [finding] = parse_script_analyzer(payload)

    assert finding.rule == "PSAvoidUsingWMICmdlet"
    assert finding.severity is Severity.ERROR
    assert finding.line == 4


def test_parse_script_analyzer_rejects_output_without_json() -> None:
    with pytest.raises(ToolOutputError, match="WARNING: module auto-loaded"):
        parse_script_analyzer("WARNING: module auto-loaded\nsomething else\n")


def test_script_analyzer_reports_undecodable_output(tmp_path: Path) -> None:
    runner = FakeToolRunner(lambda args, cwd: outcome(stdout="Loading personal profile took 900ms"))
    with pytest.raises(ToolInvocationError, match="Unrecognised tool output"):
        ScriptAnalyzer(runner).analyze(tmp_path / "a.ps1")


def test_parse_markdownlint() -> None:
    payload = json.dumps(
        [
            {
                "fileName": "README.md",
                "lineNumber": 3,
                "ruleNames": ["MD013", "line-length"],
                "ruleDescription": "Line length",
                "errorDetail": "Expected: 80; Actual: 120",
            },
            {"fileName": "docs/a.md", "lineNumber": 1, "ruleNames": ["MD041"], "ruleDescription": "First line"},
        ],
    )
    findings = parse_markdownlint(payload)
    assert [(finding.rule, finding.line) for finding in findings] == [("MD013", 3), ("MD041", 1)]
    assert findings[0].message == "Line length [Expected: 80; Actual: 120]"
    assert findings[0].path == Path("README.md")


def test_script_analyzer_builds_command_and_attributes_paths(tmp_path: Path) -> None:
    runner = FakeToolRunner(lambda args, cwd: outcome(stdout=analyzer_json(("PSUseSingularNouns", 1, "plural"))))
    analyzer = ScriptAnalyzer(runner, command=["pwsh", "-Command"])
    target = tmp_path / "a.ps1"

    findings = analyzer.analyze(target, severity=[Severity.ERROR], exclude_rules=["PSUseSingularNouns"])

    args = runner.calls[0][0]
    assert args[:2] == ("pwsh", "-Command")
    assert args[2].startswith(f"$WarningPreference = 'SilentlyContinue'; Invoke-ScriptAnalyzer -Path '{target}'")
    assert "-Severity @('Error')" in args[2]
    assert "-ExcludeRule @('PSUseSingularNouns')" in args[2]
    assert args[2].endswith("| ConvertTo-Json -Depth 3 -Compress")
    assert findings[0].path == target


def test_markdown_linter_reads_stderr_and_resolves_paths(tmp_path: Path) -> None:
    report = json.dumps([{"fileName": "README.md", "lineNumber": 1, "ruleNames": ["MD041"], "ruleDescription": "x"}])
    runner = FakeToolRunner(lambda args, cwd: outcome(1, stderr=report))
    linter = MarkdownLinter(runner)

    findings = linter.lint([tmp_path / "README.md"], cwd=tmp_path)

    assert findings[0].path == tmp_path / "README.md"
    assert runner.calls[0][0][:2] == ("markdownlint", "--json")
    assert runner.calls[0][1] == tmp_path
