# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tool runner abstraction used by every check that shells out."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from .errors import ToolInvocationError, ToolUnavailableError
from .models import ToolOutcome
from .process import CommandOptions, run_command

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class ToolRunner(Protocol):
    """Execute an external command and report its captured output."""

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> ToolOutcome:
        """Run ``args`` and return the captured outcome.

        Args:
            args: Command and arguments.
            cwd: Optional working directory.

        Returns:
            ToolOutcome: Captured return code and output streams.

        Raises:
            ToolUnavailableError: If the executable cannot be located.
        """

        raise NotImplementedError


class SubprocessToolRunner:
    """Run tools as real subprocesses with a bounded wait."""

    def __init__(self, *, timeout: float | None = None) -> None:
        self._options = CommandOptions().with_timeout(timeout)

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> ToolOutcome:
        LOGGER.debug("Running %s", shlex.join(args))
        options = CommandOptions(cwd=cwd, timeout=self._options.timeout)
        try:
            completed = run_command(args, options=options)
        except FileNotFoundError as exc:
            raise ToolUnavailableError(args[0] if args else "<empty>", str(exc)) from exc
        LOGGER.debug("%s exited with %s", args[0], completed.returncode)
        return ToolOutcome(
            command=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


_COMMAND_NOT_FOUND_MARKERS: Final[tuple[str, ...]] = (
    "is not recognized as a name of a cmdlet",
    "is not recognized as the name of a cmdlet",
)


def powershell_quote(value: str) -> str:
    """Return ``value`` as a single-quoted PowerShell string literal."""

    return "'" + value.replace("'", "''") + "'"


def powershell_array(values: Sequence[str]) -> str:
    """Return ``values`` as a PowerShell array literal of quoted strings."""

    return "@(" + ", ".join(powershell_quote(value) for value in values) + ")"


def ensure_completed(outcome: ToolOutcome, *, tool: str) -> ToolOutcome:
    """Return ``outcome`` when the tool ran, raising for invocation failures.

    Args:
        outcome: Result captured by a :class:`ToolRunner`.
        tool: Name reported in errors (executable or cmdlet).

    Returns:
        ToolOutcome: The unchanged outcome when the tool completed.

    Raises:
        ToolUnavailableError: If the shell reports that ``tool`` does not exist.
        ToolInvocationError: If the tool exited non-zero for another reason.
    """

    if outcome.ok:
        return outcome
    stderr = outcome.stderr_text
    if any(marker in stderr for marker in _COMMAND_NOT_FOUND_MARKERS):
        raise ToolUnavailableError(tool, stderr.strip().splitlines()[0] if stderr.strip() else None)
    detail = stderr.strip().splitlines()[-1] if stderr.strip() else None
    raise ToolInvocationError(tool, outcome.returncode, detail)


__all__ = [
    "SubprocessToolRunner",
    "ToolRunner",
    "ensure_completed",
    "powershell_array",
    "powershell_quote",
]
