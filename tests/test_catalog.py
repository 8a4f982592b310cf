# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the rule catalog and finding classifier."""

from __future__ import annotations

from pathlib import Path

import pytest

from dsc_meta.catalog import Decision, RuleCatalog, RuleTier, load_rule_catalog, worst
from dsc_meta.errors import CatalogError
from dsc_meta.models import LintFinding, SuppressionRecord
from dsc_meta.severity import Severity


def _finding(rule: str, severity: Severity = Severity.ERROR) -> LintFinding:
    return LintFinding(severity=severity, path=Path("x.ps1"), line=1, rule=rule, message="m")


@pytest.fixture
def catalog() -> RuleCatalog:
    return RuleCatalog(
        required=frozenset({"PSAvoidUsingWMICmdlet"}),
        flagged=frozenset({"PSAvoidGlobalVars"}),
        ignored=frozenset({"PSUseSingularNouns"}),
    )


def test_shipped_catalog_tiers_are_disjoint() -> None:
    catalog = load_rule_catalog()
    assert catalog.required
    assert catalog.flagged
    assert catalog.ignored
    assert not catalog.required & catalog.flagged
    assert not catalog.required & catalog.ignored
    assert not catalog.flagged & catalog.ignored
    assert "PSAvoidUsingWMICmdlet" in catalog.required
    assert catalog.known == catalog.required | catalog.flagged | catalog.ignored


def test_overlapping_tiers_are_rejected() -> None:
    with pytest.raises(CatalogError, match="PSAvoidGlobalVars"):
        load_rule_catalog({"required": ["PSAvoidGlobalVars"]})


def test_unknown_catalog_keys_are_rejected() -> None:
    with pytest.raises(CatalogError, match="mandatory"):
        load_rule_catalog({"mandatory": ["PSAvoidGlobalVars"]})


def test_overrides_replace_a_single_tier() -> None:
    catalog = load_rule_catalog({"ignored": ["PSCustomRule"]})
    assert catalog.ignored == frozenset({"PSCustomRule"})
    assert "PSAvoidUsingWMICmdlet" in catalog.required


def test_tier_lookup(catalog: RuleCatalog) -> None:
    assert catalog.tier("PSAvoidUsingWMICmdlet") is RuleTier.REQUIRED
    assert catalog.tier("PSAvoidGlobalVars") is RuleTier.FLAGGED
    assert catalog.tier("PSUseSingularNouns") is RuleTier.IGNORED
    assert catalog.tier("PSBrandNewRule") is RuleTier.UNKNOWN
    assert catalog.rules_in(RuleTier.UNKNOWN) == frozenset()


def test_required_error_finding_hard_fails(catalog: RuleCatalog) -> None:
    assert catalog.decide(_finding("PSAvoidUsingWMICmdlet")) is Decision.HARD_FAIL


def test_required_warning_finding_only_warns(catalog: RuleCatalog) -> None:
    assert catalog.decide(_finding("PSAvoidUsingWMICmdlet", Severity.WARNING)) is Decision.WARN


def test_flagged_finding_warns_unless_strict(catalog: RuleCatalog) -> None:
    finding = _finding("PSAvoidGlobalVars", Severity.WARNING)
    assert catalog.decide(finding) is Decision.WARN
    assert catalog.decide(finding, strict_flagged=True) is Decision.HARD_FAIL


def test_ignored_finding_warns(catalog: RuleCatalog) -> None:
    assert catalog.decide(_finding("PSUseSingularNouns")) is Decision.WARN


def test_unknown_error_rule_is_temporarily_lenient(catalog: RuleCatalog) -> None:
    # Untriaged rules only warn today; strict mode is the eventual default.
    finding = _finding("PSBrandNewRule")
    assert catalog.decide(finding) is Decision.WARN
    assert catalog.decide(finding, strict_unknown=True) is Decision.HARD_FAIL
    assert catalog.decide(_finding("PSBrandNewRule", Severity.WARNING), strict_unknown=True) is Decision.WARN


def test_excluded_required_rule_only_warns() -> None:
    catalog = RuleCatalog(
        required=frozenset({"PSAvoidUsingWMICmdlet"}),
        excluded=frozenset({"PSAvoidUsingWMICmdlet"}),
    )
    assert catalog.decide(_finding("PSAvoidUsingWMICmdlet")) is Decision.WARN


def test_classify_aggregates_worst_decision(catalog: RuleCatalog) -> None:
    findings = [_finding("PSUseSingularNouns"), _finding("PSAvoidUsingWMICmdlet")]
    assert catalog.classify(findings) is Decision.HARD_FAIL
    assert catalog.classify([]) is Decision.PASS


def test_suppressing_required_rule_hard_fails_without_findings(catalog: RuleCatalog) -> None:
    record = SuppressionRecord(rule="PSAvoidUsingWMICmdlet", path=Path("x.ps1"), line=3)
    assert catalog.suppressed_required([record]) == [record]
    assert catalog.classify([], [record]) is Decision.HARD_FAIL


def test_suppressing_flagged_rule_is_allowed(catalog: RuleCatalog) -> None:
    record = SuppressionRecord(rule="PSAvoidGlobalVars", path=Path("x.ps1"), line=3)
    assert catalog.classify([], [record]) is Decision.PASS


def test_worst_orders_decisions() -> None:
    assert worst([Decision.WARN, Decision.PASS]) is Decision.WARN
    assert worst([]) is Decision.PASS
