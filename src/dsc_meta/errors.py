# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across the harness."""

from __future__ import annotations


class DscMetaError(Exception):
    """Base class for errors raised by the meta-test harness."""


class ConfigError(DscMetaError):
    """Raised when configuration input is invalid."""


class CatalogError(DscMetaError):
    """Raised when the rule catalog violates its tier invariants."""


class OptInError(DscMetaError):
    """Raised when the opt-in manifest is not a JSON array of strings."""


class ManifestError(DscMetaError):
    """Raised when a module manifest cannot be read or decoded."""


class ToolUnavailableError(DscMetaError):
    """Raised when an external tool cannot be located on ``PATH``."""

    def __init__(self, tool: str, detail: str | None = None) -> None:
        """Initialise the error with the missing tool name.

        Args:
            tool: Executable name that could not be resolved.
            detail: Optional context from the underlying lookup failure.
        """

        message = f"External tool '{tool}' is not available"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.tool = tool


class ToolInvocationError(DscMetaError):
    """Raised when an external tool ran but failed for reasons unrelated to findings."""

    def __init__(self, tool: str, returncode: int, detail: str | None = None) -> None:
        message = f"External tool '{tool}' failed with exit status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.tool = tool
        self.returncode = returncode


class ToolOutputError(DscMetaError):
    """Raised when a tool wrote output that could not be decoded."""

    def __init__(self, excerpt: str) -> None:
        super().__init__(f"Unrecognised tool output: {excerpt}")
        self.excerpt = excerpt


__all__ = [
    "CatalogError",
    "ConfigError",
    "DscMetaError",
    "ManifestError",
    "OptInError",
    "ToolInvocationError",
    "ToolOutputError",
    "ToolUnavailableError",
]
