# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Text file discovery and formatting classification."""

from __future__ import annotations

import codecs
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .config import ScanConfig
from .models import Encoding, ScanResult

_WIDE_BOMS: Final[tuple[bytes, ...]] = (
    codecs.BOM_UTF32_LE,
    codecs.BOM_UTF32_BE,
    codecs.BOM_UTF16_LE,
    codecs.BOM_UTF16_BE,
)
_TAB: Final[bytes] = b"\t"
_NEWLINE: Final[int] = ord("\n")


@dataclass(frozen=True, slots=True)
class WalkContext:
    """Parameters required to walk the module tree."""

    root: Path
    extensions: frozenset[str]
    exclude_dirs: frozenset[str]


def is_text_file(path: Path, extensions: frozenset[str]) -> bool:
    """Return ``True`` when ``path`` has a configured text extension.

    Dotfiles such as ``.gitignore`` match on their full name.
    """

    name = path.name.lower()
    return name in extensions or path.suffix.lower() in extensions


def iter_text_files(root: Path, config: ScanConfig | None = None) -> Iterator[Path]:
    """Yield text files under ``root`` in a stable order.

    Args:
        root: Module repository root.
        config: Scan settings; defaults are used when omitted.

    Yields:
        Path: Text files outside excluded directories.
    """

    settings = config or ScanConfig()
    context = WalkContext(
        root=root,
        extensions=frozenset(ext.lower() for ext in settings.text_extensions),
        exclude_dirs=frozenset(settings.exclude_dirs),
    )
    for dirpath, dirnames, filenames in os.walk(context.root):
        dirnames[:] = sorted(name for name in dirnames if name not in context.exclude_dirs)
        current = Path(dirpath)
        for filename in sorted(filenames):
            candidate = current / filename
            if is_text_file(candidate, context.extensions):
                yield candidate


def classify_encoding(data: bytes) -> Encoding:
    """Classify ``data`` as ASCII, UTF-8 or Unicode (wide or undecodable).

    Args:
        data: Raw file content.

    Returns:
        Encoding: ``UNICODE`` for UTF-16/UTF-32 byte-order marks, embedded NUL
        bytes or invalid UTF-8; ``ASCII`` for 7-bit clean content; ``UTF8``
        otherwise.
    """

    if data.startswith(_WIDE_BOMS) or b"\x00" in data:
        return Encoding.UNICODE
    if data.isascii():
        return Encoding.ASCII
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return Encoding.UNICODE
    return Encoding.UTF8


def scan_bytes(path: Path, data: bytes) -> ScanResult:
    """Build the :class:`ScanResult` for already-read file content."""

    return ScanResult(
        path=path,
        encoding=classify_encoding(data),
        has_tabs=_TAB in data,
        is_empty=not data,
        missing_trailing_newline=bool(data) and data[-1] != _NEWLINE,
    )


def scan_file(path: Path) -> ScanResult:
    """Read ``path`` and classify its formatting."""

    return scan_bytes(path, path.read_bytes())


def scan(root: Path, config: ScanConfig | None = None) -> list[ScanResult]:
    """Scan every text file under ``root``.

    Every file is classified independently so a single run reports all offenders.
    """

    return [scan_file(path) for path in iter_text_files(root, config)]


def relative_label(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` when possible, for messages."""

    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return str(path)


__all__ = [
    "classify_encoding",
    "is_text_file",
    "iter_text_files",
    "relative_label",
    "scan",
    "scan_bytes",
    "scan_file",
]
