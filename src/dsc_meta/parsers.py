# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers turning external tool JSON output into :class:`LintFinding` objects."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import cast

from .errors import ToolOutputError
from .models import JsonValue, LintFinding
from .severity import Severity, severity_from_analyzer

_DOCUMENT_OPENERS = ("[", "{")


def _load_json_stream(text: str, *, strict: bool = False) -> JsonValue:
    """Decode ``text`` as one JSON document, or as JSON lines when that fails.

    Lines that precede the document (shell banners, ``WARNING:`` records) are
    skipped so pretty-printed output behind a preamble still decodes.

    Args:
        text: Raw tool output.
        strict: Raise instead of returning an empty payload when ``text`` holds
            output but none of it is JSON.

    Raises:
        ToolOutputError: If ``strict`` is true and no JSON could be decoded.
    """

    text = text.strip()
    if not text:
        return []
    try:
        return cast(JsonValue, json.loads(text))
    except json.JSONDecodeError:
        pass
    lines = text.splitlines()
    for index, raw_line in enumerate(lines):
        if index == 0 or not raw_line.lstrip().startswith(_DOCUMENT_OPENERS):
            continue
        try:
            return cast(JsonValue, json.loads("\n".join(lines[index:])))
        except json.JSONDecodeError:
            continue
    payload: list[JsonValue] = []
    for raw_line in lines:
        trimmed = raw_line.strip()
        if not trimmed:
            continue
        try:
            payload.append(cast(JsonValue, json.loads(trimmed)))
        except json.JSONDecodeError:
            continue
    if strict and not payload:
        raise ToolOutputError(lines[0].strip())
    return payload


def iter_dicts(value: JsonValue) -> Iterator[Mapping[str, JsonValue]]:
    """Yield mapping items from ``value``.

    ``ConvertTo-Json`` emits a bare object rather than a one-element array when
    the pipeline carries a single item, so a mapping is yielded as-is.
    """

    if isinstance(value, Mapping):
        yield value
        return
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        for item in value:
            if isinstance(item, Mapping):
                yield item


def _optional_int(value: JsonValue | None) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def _optional_path(value: JsonValue | None) -> Path | None:
    if isinstance(value, str) and value.strip():
        return Path(value)
    return None


def parse_script_analyzer(payload: str | JsonValue) -> list[LintFinding]:
    """Parse ``Invoke-ScriptAnalyzer | ConvertTo-Json`` output.

    Args:
        payload: Raw stdout text or an already decoded JSON value.

    Returns:
        list[LintFinding]: Findings in tool order.

    Raises:
        ToolOutputError: If the text is not empty but holds no JSON document.
    """

    data = _load_json_stream(payload, strict=True) if isinstance(payload, str) else payload
    findings: list[LintFinding] = []
    for entry in iter_dicts(data):
        rule = entry.get("RuleName")
        if not isinstance(rule, str) or not rule:
            continue
        findings.append(
            LintFinding(
                severity=severity_from_analyzer(cast(int | str | None, entry.get("Severity"))),
                path=_optional_path(entry.get("ScriptPath")) or _optional_path(entry.get("ScriptName")),
                line=_optional_int(entry.get("Line")),
                rule=rule,
                message=str(entry.get("Message") or ""),
            ),
        )
    return findings


def parse_markdownlint(payload: str | JsonValue) -> list[LintFinding]:
    """Parse ``markdownlint --json`` output.

    Args:
        payload: Raw JSON text (markdownlint writes it to stderr) or decoded value.

    Returns:
        list[LintFinding]: One finding per reported issue.
    """

    data = _load_json_stream(payload) if isinstance(payload, str) else payload
    findings: list[LintFinding] = []
    for entry in iter_dicts(data):
        names = entry.get("ruleNames")
        rule = names[0] if isinstance(names, list) and names and isinstance(names[0], str) else "markdown"
        description = str(entry.get("ruleDescription") or "")
        detail = entry.get("errorDetail")
        message = f"{description} [{detail}]" if isinstance(detail, str) and detail else description
        findings.append(
            LintFinding(
                severity=Severity.ERROR,
                path=_optional_path(entry.get("fileName")),
                line=_optional_int(entry.get("lineNumber")),
                rule=rule,
                message=message,
            ),
        )
    return findings


__all__ = ["iter_dicts", "parse_markdownlint", "parse_script_analyzer"]
