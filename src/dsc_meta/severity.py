# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels normalising PSScriptAnalyzer and markdown linter vocabularies."""

    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"
    PARSE_ERROR = "parse_error"

    @property
    def is_error(self) -> bool:
        """Return ``True`` for error-level severities.

        Returns:
            bool: ``True`` when the severity is ``ERROR`` or ``PARSE_ERROR``.
        """

        return self in ERROR_SEVERITIES


ERROR_SEVERITIES: Final[frozenset[Severity]] = frozenset({Severity.ERROR, Severity.PARSE_ERROR})

# Invoke-ScriptAnalyzer serialises DiagnosticSeverity as its integer value.
_ANALYZER_SEVERITY_CODES: Final[dict[int, Severity]] = {
    0: Severity.INFORMATION,
    1: Severity.WARNING,
    2: Severity.ERROR,
    3: Severity.PARSE_ERROR,
}

_ANALYZER_SEVERITY_NAMES: Final[dict[str, Severity]] = {
    "information": Severity.INFORMATION,
    "info": Severity.INFORMATION,
    "warning": Severity.WARNING,
    "error": Severity.ERROR,
    "parseerror": Severity.PARSE_ERROR,
    "parse_error": Severity.PARSE_ERROR,
}

# Names accepted by Invoke-ScriptAnalyzer -Severity.
_ANALYZER_ARGUMENT_NAMES: Final[dict[Severity, str]] = {
    Severity.INFORMATION: "Information",
    Severity.WARNING: "Warning",
    Severity.ERROR: "Error",
    Severity.PARSE_ERROR: "ParseError",
}


def severity_from_analyzer(value: int | str | None, default: Severity = Severity.WARNING) -> Severity:
    """Return the :class:`Severity` matching an analyzer severity payload.

    Args:
        value: Integer enum value or name emitted by ``Invoke-ScriptAnalyzer``.
        default: Severity used when ``value`` is missing or unrecognised.

    Returns:
        Severity: Normalised severity.
    """

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return _ANALYZER_SEVERITY_CODES.get(value, default)
    text = str(value).strip()
    if text.isdigit():
        return _ANALYZER_SEVERITY_CODES.get(int(text), default)
    return _ANALYZER_SEVERITY_NAMES.get(text.lower(), default)


def severity_to_analyzer_argument(severity: Severity) -> str:
    """Map :class:`Severity` to the name accepted by ``-Severity``."""

    return _ANALYZER_ARGUMENT_NAMES[severity]


__all__ = [
    "ERROR_SEVERITIES",
    "Severity",
    "severity_from_analyzer",
    "severity_to_analyzer_argument",
]
