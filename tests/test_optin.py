# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the opt-in manifest."""

from __future__ import annotations

from pathlib import Path

import pytest

from dsc_meta.errors import OptInError
from dsc_meta.optin import (
    EXAMPLES_SUITE,
    MARKDOWN_SUITE,
    OptInManifest,
    is_opted_in,
    load_opt_in_manifest,
)


def test_empty_manifest_opts_in_to_nothing() -> None:
    assert is_opted_in(MARKDOWN_SUITE, []) is False
    assert is_opted_in(MARKDOWN_SUITE, OptInManifest()) is False


def test_membership_is_exact_and_case_sensitive() -> None:
    manifest = OptInManifest(suites=(MARKDOWN_SUITE,))
    assert is_opted_in(MARKDOWN_SUITE, manifest)
    assert not is_opted_in(MARKDOWN_SUITE.lower(), manifest)
    assert not is_opted_in("Common Tests - Validate Markdown", manifest)
    assert manifest.enforces(MARKDOWN_SUITE)
    assert not manifest.enforces(EXAMPLES_SUITE)


def test_missing_file_is_empty_manifest(tmp_path: Path) -> None:
    manifest = load_opt_in_manifest(tmp_path)
    assert manifest.suites == ()
    assert manifest.source is None


def test_loads_array_of_suites(tmp_path: Path) -> None:
    path = tmp_path / ".MetaTestOptIn.json"
    path.write_text(f'["{EXAMPLES_SUITE}", "{MARKDOWN_SUITE}"]\n', encoding="utf-8-sig")
    manifest = load_opt_in_manifest(tmp_path)
    assert manifest.suites == (EXAMPLES_SUITE, MARKDOWN_SUITE)
    assert manifest.source == path


@pytest.mark.parametrize("content", ['{"suites": []}', "[1, 2]", '"text"', "[not json"])
def test_malformed_manifest_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / ".MetaTestOptIn.json").write_text(content, encoding="utf-8")
    with pytest.raises(OptInError):
        load_opt_in_manifest(tmp_path)


def test_custom_file_name(tmp_path: Path) -> None:
    (tmp_path / "optin.json").write_text("[]", encoding="utf-8")
    assert load_opt_in_manifest(tmp_path, "optin.json").source == tmp_path / "optin.json"
