# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for text file discovery and formatting classification."""

from __future__ import annotations

import codecs
from pathlib import Path

import pytest

from dsc_meta.config import ScanConfig
from dsc_meta.models import Encoding
from dsc_meta.scanner import classify_encoding, iter_text_files, relative_label, scan, scan_bytes


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"plain ascii\n", Encoding.ASCII),
        ("café\n".encode(), Encoding.UTF8),
        (codecs.BOM_UTF8 + b"bom but utf-8\n", Encoding.UTF8),
        ("wide\n".encode("utf-16"), Encoding.UNICODE),
        (codecs.BOM_UTF32_LE + "x".encode("utf-32-le"), Encoding.UNICODE),
        (b"a\x00b\n", Encoding.UNICODE),
        (b"caf\xe9 latin-1\n", Encoding.UNICODE),
        (b"", Encoding.ASCII),
    ],
)
def test_classify_encoding(data: bytes, expected: Encoding) -> None:
    assert classify_encoding(data) is expected


def test_tab_and_missing_newline_are_reported_independently() -> None:
    result = scan_bytes(Path("a.ps1"), b"\tWrite-Output 1")
    assert result.has_tabs
    assert result.missing_trailing_newline
    assert not result.is_empty
    assert not result.is_unicode


def test_empty_file_has_no_missing_newline() -> None:
    result = scan_bytes(Path("empty.md"), b"")
    assert result.is_empty
    assert not result.missing_trailing_newline


def test_iter_text_files_filters_extensions_and_excluded_dirs(tmp_path: Path) -> None:
    (tmp_path / "a.ps1").write_text("x\n", encoding="utf-8")
    (tmp_path / "image.png").write_bytes(b"\x89PNG")
    (tmp_path / ".gitignore").write_text("*.zip\n", encoding="utf-8")
    tests_dir = tmp_path / "DscResource.Tests"
    tests_dir.mkdir()
    (tests_dir / "skip.ps1").write_text("x\n", encoding="utf-8")
    nested = tmp_path / "Examples"
    nested.mkdir()
    (nested / "Sample.ps1").write_text("x\n", encoding="utf-8")

    names = [relative_label(path, tmp_path) for path in iter_text_files(tmp_path)]

    assert names == [".gitignore", "a.ps1", "Examples/Sample.ps1"]


def test_scan_honours_custom_extensions(tmp_path: Path) -> None:
    (tmp_path / "a.ps1").write_text("x\n", encoding="utf-8")
    (tmp_path / "b.txt").write_text("y", encoding="utf-8")
    results = scan(tmp_path, ScanConfig(text_extensions=[".txt"]))
    assert [result.path.name for result in results] == ["b.txt"]
    assert results[0].missing_trailing_newline
