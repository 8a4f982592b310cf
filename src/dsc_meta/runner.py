# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Orchestrate the meta checks for a single repository."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .catalog import RuleCatalog, load_rule_catalog
from .checks import (
    AnalyzerCheck,
    CheckContext,
    CheckResult,
    ExampleCheck,
    FormattingCheck,
    ManifestCheck,
    MarkdownCheck,
    MetaCheck,
    SchemaCheck,
    SuppressionCheck,
)
from .config import MetaConfig, load_config
from .errors import ConfigError
from .optin import OptInManifest, load_opt_in_manifest
from .scanner import iter_text_files
from .tooling import SubprocessToolRunner, ToolRunner

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class MetaTestOptions:
    """Optional parameters used to configure :class:`MetaTestRunner`."""

    config: MetaConfig | None = None
    overrides: Mapping[str, Any] | None = None
    runner: ToolRunner | None = None


class MetaTestRunner:
    """Run the meta checks across a DSC resource module repository."""

    def __init__(self, root: Path, *, options: MetaTestOptions | None = None) -> None:
        """Load configuration, the rule catalog and the opt-in manifest once.

        Args:
            root: Repository root being validated.
            options: Optional pre-built configuration, overrides or tool runner.

        Raises:
            ConfigError: If configuration is invalid or names unknown checks.
            CatalogError: If the rule catalog tiers overlap.
            OptInError: If the opt-in manifest is malformed.
        """

        self.root = root.resolve()
        opts = options or MetaTestOptions()
        self.config = opts.config or load_config(self.root, opts.overrides)
        self.catalog: RuleCatalog = load_rule_catalog(self.config.catalog.as_mapping())
        self.opt_ins: OptInManifest = load_opt_in_manifest(self.root, self.config.opt_in_file)
        self.runner: ToolRunner = opts.runner or SubprocessToolRunner(timeout=self.config.timeout)
        self._available_checks: dict[str, MetaCheck] = {
            "formatting": FormattingCheck(),
            "manifest": ManifestCheck(),
            "schema": SchemaCheck(),
            "analyzer": AnalyzerCheck(),
            "suppressions": SuppressionCheck(),
            "examples": ExampleCheck(),
            "markdown": MarkdownCheck(),
        }
        self._validate_names(self.config.checks)

    def available_checks(self) -> Mapping[str, MetaCheck]:
        """Return the registered checks keyed by name in execution order."""

        return dict(self._available_checks)

    def run(self, selected: Iterable[str] | None = None) -> CheckResult:
        """Execute the selected checks and return their aggregated result.

        Checks always run in registration order regardless of the order in
        ``selected``.

        Args:
            selected: Optional subset of check names; defaults to the configured checks.

        Returns:
            CheckResult: Aggregated outcome of all executed checks.

        Raises:
            ConfigError: If ``selected`` names an unknown check.
        """

        wanted = set(self.config.checks if selected is None else selected)
        self._validate_names(wanted)
        result = CheckResult()
        context = CheckContext(
            root=self.root,
            config=self.config,
            catalog=self.catalog,
            opt_ins=self.opt_ins,
            runner=self.runner,
            text_files=list(iter_text_files(self.root, self.config.scan)),
        )
        for name, check in self._available_checks.items():
            if name not in wanted:
                continue
            LOGGER.debug("Running %s check", name)
            check.run(context, result)
            result.mark_executed(name)
        return result

    def _validate_names(self, names: Iterable[str]) -> None:
        unknown = sorted(set(names) - set(self._available_checks))
        if unknown:
            available = ", ".join(self._available_checks)
            raise ConfigError(f"Unknown check(s): {', '.join(unknown)} (available: {available})")


def run_meta_tests(root: Path, *, options: MetaTestOptions | None = None) -> CheckResult:
    """Convenience wrapper running every configured check under ``root``."""

    return MetaTestRunner(root, options=options).run()


__all__ = ["MetaTestOptions", "MetaTestRunner", "run_meta_tests"]
