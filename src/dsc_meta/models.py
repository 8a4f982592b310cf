# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the dsc_meta package."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .process import TIMEOUT_RETURNCODE
from .severity import Severity

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]


class LintFinding(BaseModel):
    """Standardise findings reported by external linters into a common schema."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    path: Path | None = None
    line: int | None = None
    rule: str
    message: str


class SuppressionRecord(BaseModel):
    """Capture a rule named inside a suppression annotation."""

    model_config = ConfigDict(frozen=True)

    rule: str
    path: Path
    line: int


class Encoding(str, Enum):
    """Enumerate encoding classifications for scanned text files."""

    ASCII = "ascii"
    UTF8 = "utf8"
    UNICODE = "unicode"


class ScanResult(BaseModel):
    """Describe the formatting state of a single text file."""

    model_config = ConfigDict(frozen=True)

    path: Path
    encoding: Encoding
    has_tabs: bool
    is_empty: bool
    missing_trailing_newline: bool

    @property
    def is_unicode(self) -> bool:
        """Return ``True`` when the file is not ASCII or UTF-8 encoded."""

        return self.encoding is Encoding.UNICODE


def coerce_output_sequence(value: JsonValue | Sequence[str] | None) -> list[str]:
    """Normalise stdout/stderr payloads into a list of strings.

    Args:
        value: Output payload supplied by a tool.

    Returns:
        list[str]: Sequence of output lines represented as strings.
    """

    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    if isinstance(value, str):
        return value.splitlines()
    return [str(value)]


class ToolExitCategory(str, Enum):
    """Enumerate high level categories for tool exit behaviour."""

    SUCCESS = "success"
    DIAGNOSTIC = "diagnostic"
    TOOL_FAILURE = "tool_failure"

    @classmethod
    def from_returncode(cls, returncode: int) -> ToolExitCategory:
        """Return the category implied by a process exit status.

        A timed out process is a tool failure. Any other non-zero status is
        treated as the tool reporting its findings.
        """

        if returncode == 0:
            return cls.SUCCESS
        if returncode == TIMEOUT_RETURNCODE:
            return cls.TOOL_FAILURE
        return cls.DIAGNOSTIC


class ToolOutcome(BaseModel):
    """Capture the result bundle produced by one external tool invocation.

    The :attr:`exit_category` field records how the exit status is interpreted
    and is derived from :attr:`returncode` unless given explicitly. Checks use
    it to tell a tool that ran and reported a failure from a tool that never
    finished.
    """

    command: tuple[str, ...] = ()
    returncode: int
    stdout: list[str] = Field(default_factory=list)
    stderr: list[str] = Field(default_factory=list)
    exit_category: ToolExitCategory = ToolExitCategory.SUCCESS

    @model_validator(mode="before")
    @classmethod
    def _derive_exit_category(cls, data: object) -> object:
        if isinstance(data, Mapping) and data.get("exit_category") is None and "returncode" in data:
            return {**data, "exit_category": ToolExitCategory.from_returncode(int(data["returncode"]))}
        return data

    @field_validator("stdout", "stderr", mode="before")
    @classmethod
    def _coerce_output(cls, value: JsonValue | Sequence[str] | None) -> list[str]:
        """Normalise stdout/stderr payloads prior to model validation.

        Args:
            value: Raw output payload provided by the runner.

        Returns:
            list[str]: Sequence of output lines represented as strings.
        """

        return coerce_output_sequence(value)

    @property
    def ok(self) -> bool:
        """Return ``True`` when the tool exited successfully."""

        return self.returncode == 0

    @property
    def stdout_text(self) -> str:
        """Return captured stdout joined into a single string."""

        return "\n".join(self.stdout)

    @property
    def stderr_text(self) -> str:
        """Return captured stderr joined into a single string."""

        return "\n".join(self.stderr)


__all__ = [
    "Encoding",
    "JsonScalar",
    "JsonValue",
    "LintFinding",
    "ScanResult",
    "SuppressionRecord",
    "ToolExitCategory",
    "ToolOutcome",
    "coerce_output_sequence",
]
