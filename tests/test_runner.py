# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for meta-test orchestration."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from tests.helpers.repository import write_opt_ins
from tests.helpers.tools import FakeToolRunner, analyzer_json, default_responder, outcome

from dsc_meta.config import DEFAULT_CHECKS
from dsc_meta.errors import ConfigError, OptInError
from dsc_meta.models import ToolOutcome
from dsc_meta.optin import MARKDOWN_SUITE
from dsc_meta.runner import MetaTestOptions, MetaTestRunner, run_meta_tests


def _runner(root: Path, fake: FakeToolRunner | None = None) -> MetaTestRunner:
    return MetaTestRunner(root, options=MetaTestOptions(runner=fake or FakeToolRunner()))


def test_clean_module_passes_every_check(module_repo: Path) -> None:
    result = _runner(module_repo).run()
    assert result.issues == []
    assert result.executed == list(DEFAULT_CHECKS)
    assert result.exit_code() == 0


def test_checks_run_in_fixed_order(module_repo: Path) -> None:
    result = _runner(module_repo).run(["markdown", "formatting", "analyzer"])
    assert result.executed == ["formatting", "analyzer", "markdown"]


def test_unknown_check_is_rejected(module_repo: Path) -> None:
    with pytest.raises(ConfigError, match="bogus"):
        _runner(module_repo).run(["bogus"])


def test_configured_unknown_check_is_rejected(module_repo: Path) -> None:
    (module_repo / ".dsc-meta.toml").write_text('checks = ["formatting", "bogus"]\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        _runner(module_repo)


def test_malformed_opt_in_manifest_is_rejected(module_repo: Path) -> None:
    (module_repo / ".MetaTestOptIn.json").write_text('{"not": "a list"}\n', encoding="utf-8")
    with pytest.raises(OptInError):
        _runner(module_repo)


def test_failures_in_one_check_do_not_stop_later_checks(module_repo: Path) -> None:
    (module_repo / "tabs.ps1").write_text("\tGet-Item .\n", encoding="utf-8")
    result = _runner(module_repo).run()
    assert [issue.check for issue in result.errors] == ["formatting"]
    assert result.executed == list(DEFAULT_CHECKS)


def test_opt_in_manifest_gates_markdown(module_repo: Path) -> None:
    (module_repo / "README.md").write_text("# xDemo\n", encoding="utf-8")
    report = json.dumps([{"fileName": "README.md", "lineNumber": 1, "ruleNames": ["MD041"], "ruleDescription": "x"}])

    def responder(args: tuple[str, ...], cwd: Path | None) -> ToolOutcome:
        if args[0] == "markdownlint":
            return outcome(1, stderr=report)
        return default_responder(args, cwd)

    assert _runner(module_repo, FakeToolRunner(responder)).run().exit_code() == 0
    write_opt_ins(module_repo, [MARKDOWN_SUITE])
    assert _runner(module_repo, FakeToolRunner(responder)).run().exit_code() == 1


def test_catalog_exclusions_come_from_configuration(module_repo: Path) -> None:
    def responder(args: tuple[str, ...], cwd: Path | None) -> ToolOutcome:
        if "Invoke-ScriptAnalyzer" in args[-1]:
            return outcome(stdout=analyzer_json(("PSAvoidUsingWMICmdlet", 2, "Avoid WMI")))
        return default_responder(args, cwd)

    assert _runner(module_repo, FakeToolRunner(responder)).run(["analyzer"]).exit_code() == 1
    (module_repo / ".dsc-meta.toml").write_text('[catalog]\nexcluded = ["PSAvoidUsingWMICmdlet"]\n', encoding="utf-8")
    result = _runner(module_repo, FakeToolRunner(responder)).run(["analyzer"])
    assert result.exit_code() == 0
    assert len(result.warnings) == 1


def test_run_meta_tests_wrapper(module_repo: Path) -> None:
    result = run_meta_tests(module_repo, options=MetaTestOptions(runner=FakeToolRunner()))
    assert result.exit_code() == 0
