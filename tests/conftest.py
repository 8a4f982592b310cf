# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from dsc_meta.catalog import load_rule_catalog
from dsc_meta.checks import CheckContext
from dsc_meta.config import MetaConfig
from dsc_meta.optin import OptInManifest
from dsc_meta.scanner import iter_text_files
from tests.helpers.repository import build_module_repo
from tests.helpers.tools import FakeToolRunner


@pytest.fixture
def fake_runner() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture
def module_repo(tmp_path: Path) -> Path:
    """Create a minimal, well-formed DSC resource module repository."""

    return build_module_repo(tmp_path)


@pytest.fixture
def make_context(fake_runner: FakeToolRunner) -> Callable[..., CheckContext]:
    """Return a factory building a check context for a repository root."""

    def factory(
        root: Path,
        *,
        opt_ins: Sequence[str] = (),
        runner: FakeToolRunner | None = None,
        config: MetaConfig | None = None,
    ) -> CheckContext:
        settings = config or MetaConfig()
        return CheckContext(
            root=root,
            config=settings,
            catalog=load_rule_catalog(),
            opt_ins=OptInManifest(suites=tuple(opt_ins)),
            runner=runner or fake_runner,
            text_files=list(iter_text_files(root, settings.scan)),
        )

    return factory
