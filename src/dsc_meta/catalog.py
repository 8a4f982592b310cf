# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Declarative rule catalog and the tier-based finding classifier."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from functools import lru_cache
from importlib import resources
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import CatalogError
from .models import LintFinding, SuppressionRecord

LOGGER = logging.getLogger(__name__)

CATALOG_RESOURCE: Final[str] = "rule_catalog.toml"
_TIER_KEYS: Final[tuple[str, ...]] = ("required", "flagged", "ignored")


class RuleTier(str, Enum):
    """Enumerate the tiers a rule identifier can belong to."""

    REQUIRED = "required"
    FLAGGED = "flagged"
    IGNORED = "ignored"
    UNKNOWN = "unknown"


class Decision(str, Enum):
    """Outcome of classifying a finding or a file's findings."""

    PASS = "pass"
    WARN = "warn"
    HARD_FAIL = "hard_fail"


_DECISION_RANK: Final[dict[Decision, int]] = {
    Decision.PASS: 0,
    Decision.WARN: 1,
    Decision.HARD_FAIL: 2,
}


def worst(decisions: Iterable[Decision]) -> Decision:
    """Return the most severe decision in ``decisions`` (``PASS`` when empty)."""

    return max(decisions, key=_DECISION_RANK.__getitem__, default=Decision.PASS)


class RuleCatalog(BaseModel):
    """Three disjoint tiers of rule identifiers plus a temporary exclusion list.

    Rules that appear in no tier are treated as recently added analyzer rules.
    They only warn until someone triages them into a tier, unless the caller
    asks for strict handling.
    """

    model_config = ConfigDict(frozen=True)

    required: frozenset[str] = Field(default_factory=frozenset)
    flagged: frozenset[str] = Field(default_factory=frozenset)
    ignored: frozenset[str] = Field(default_factory=frozenset)
    excluded: frozenset[str] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def _check_disjoint(self) -> RuleCatalog:
        """Reject catalogs whose tiers share rule identifiers.

        Returns:
            RuleCatalog: The validated catalog.

        Raises:
            ValueError: If any rule appears in more than one tier.
        """

        tiers = {"required": self.required, "flagged": self.flagged, "ignored": self.ignored}
        names = list(tiers)
        for index, left in enumerate(names):
            for right in names[index + 1 :]:
                overlap = tiers[left] & tiers[right]
                if overlap:
                    joined = ", ".join(sorted(overlap))
                    raise ValueError(f"rules listed in both '{left}' and '{right}': {joined}")
        return self

    @property
    def known(self) -> frozenset[str]:
        """Return the union of all tiered rule identifiers."""

        return self.required | self.flagged | self.ignored

    def tier(self, rule: str) -> RuleTier:
        """Return the tier ``rule`` belongs to.

        Args:
            rule: Analyzer rule identifier.

        Returns:
            RuleTier: Matching tier, or ``UNKNOWN`` for untriaged rules.
        """

        if rule in self.required:
            return RuleTier.REQUIRED
        if rule in self.flagged:
            return RuleTier.FLAGGED
        if rule in self.ignored:
            return RuleTier.IGNORED
        return RuleTier.UNKNOWN

    def rules_in(self, tier: RuleTier) -> frozenset[str]:
        """Return the identifiers of a single tier (empty for ``UNKNOWN``)."""

        return {
            RuleTier.REQUIRED: self.required,
            RuleTier.FLAGGED: self.flagged,
            RuleTier.IGNORED: self.ignored,
        }.get(tier, frozenset())

    def decide(
        self,
        finding: LintFinding,
        *,
        strict_flagged: bool = False,
        strict_unknown: bool = False,
    ) -> Decision:
        """Decide whether a single finding is fatal, advisory or harmless.

        Args:
            finding: Finding reported by the analyzer.
            strict_flagged: Treat flagged-tier findings as hard failures.
            strict_unknown: Treat error-level findings from untriaged rules as
                hard failures instead of warnings.

        Returns:
            Decision: Outcome for the finding.
        """

        if finding.rule in self.excluded:
            return Decision.WARN
        tier = self.tier(finding.rule)
        if tier is RuleTier.REQUIRED:
            return Decision.HARD_FAIL if finding.severity.is_error else Decision.WARN
        if tier is RuleTier.FLAGGED:
            return Decision.HARD_FAIL if strict_flagged else Decision.WARN
        if tier is RuleTier.IGNORED:
            return Decision.WARN
        # TODO: drop this leniency once recently added analyzer rules are triaged into tiers.
        if strict_unknown and finding.severity.is_error:
            return Decision.HARD_FAIL
        return Decision.WARN

    def suppressed_required(self, suppressions: Iterable[SuppressionRecord]) -> list[SuppressionRecord]:
        """Return suppressions that name a required rule."""

        return [record for record in suppressions if record.rule in self.required]

    def classify(
        self,
        findings: Sequence[LintFinding],
        suppressions: Sequence[SuppressionRecord] = (),
        *,
        strict_flagged: bool = False,
        strict_unknown: bool = False,
    ) -> Decision:
        """Aggregate the decision for one file.

        A suppression naming a required rule is a hard failure whether or not
        that rule fired.

        Args:
            findings: Findings reported for the file.
            suppressions: Suppression annotations found in the file.
            strict_flagged: Forwarded to :meth:`decide`.
            strict_unknown: Forwarded to :meth:`decide`.

        Returns:
            Decision: Most severe decision across findings and suppressions.
        """

        if self.suppressed_required(suppressions):
            return Decision.HARD_FAIL
        return worst(
            self.decide(finding, strict_flagged=strict_flagged, strict_unknown=strict_unknown)
            for finding in findings
        )


def _build_catalog(data: Mapping[str, Any], *, source: str) -> RuleCatalog:
    unexpected = set(data) - {*_TIER_KEYS, "excluded"}
    if unexpected:
        raise CatalogError(f"Unknown rule catalog keys in {source}: {', '.join(sorted(unexpected))}")
    try:
        return RuleCatalog.model_validate({key: frozenset(value) for key, value in data.items()})
    except (TypeError, ValidationError) as exc:
        raise CatalogError(f"Invalid rule catalog in {source}: {exc}") from exc


@lru_cache(maxsize=1)
def _shipped_catalog_data() -> dict[str, Any]:
    payload = resources.files("dsc_meta.data").joinpath(CATALOG_RESOURCE).read_text(encoding="utf-8")
    return tomllib.loads(payload)


def load_rule_catalog(overrides: Mapping[str, Sequence[str]] | None = None) -> RuleCatalog:
    """Load the shipped rule catalog, replacing any tiers given in ``overrides``.

    Args:
        overrides: Optional mapping of tier name to replacement rule list.

    Returns:
        RuleCatalog: Validated catalog.

    Raises:
        CatalogError: If the resulting tiers overlap or contain unknown keys.
    """

    data = dict(_shipped_catalog_data())
    source = CATALOG_RESOURCE
    if overrides:
        data.update({key: list(value) for key, value in overrides.items()})
        source = f"{CATALOG_RESOURCE} (with repository overrides)"
        LOGGER.debug("Applying rule catalog overrides for tiers: %s", ", ".join(sorted(overrides)))
    return _build_catalog(data, source=source)


__all__ = [
    "Decision",
    "RuleCatalog",
    "RuleTier",
    "load_rule_catalog",
    "worst",
]
