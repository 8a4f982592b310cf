# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Compile example configurations through PowerShell DSC."""

from __future__ import annotations

import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Final

from .config import POWERSHELL_COMMAND
from .models import ToolOutcome
from .tooling import ToolRunner, powershell_quote

_COMPILE_TEMPLATE: Final[str] = """\
$ErrorActionPreference = 'Stop'
$examplePath = {example}
$outputPath = {output}
. $examplePath
$configuration = Get-Command -CommandType Configuration |
    Where-Object {{ $_.ScriptBlock.File -eq $examplePath }} |
    Select-Object -First 1
if (-not $configuration) {{ throw "No configuration is defined in $examplePath" }}
if (-not (Get-Variable -Name ConfigurationData -Scope Script -ErrorAction SilentlyContinue)) {{
    $ConfigurationData = @{{
        AllNodes = @(@{{ NodeName = 'localhost'; PSDscAllowPlainTextPassword = $true; PSDscAllowDomainUser = $true }})
    }}
}}
& $configuration.Name -OutputPath $outputPath -ConfigurationData $ConfigurationData | Out-Null
"""


def find_examples(root: Path, directory: str = "Examples") -> list[Path]:
    """Return every example script under ``root / directory`` in sorted order."""

    base = root / directory
    if not base.is_dir():
        return []
    return sorted(path for path in base.rglob("*.ps1") if path.is_file())


class ExampleCompiler:
    """Dot-source an example and compile its configuration into a scratch directory."""

    def __init__(self, runner: ToolRunner, *, command: Sequence[str] = POWERSHELL_COMMAND) -> None:
        self._runner = runner
        self._command = tuple(command)

    def build_script(self, example: Path, output: Path) -> str:
        """Return the PowerShell script compiling ``example`` into ``output``."""

        return _COMPILE_TEMPLATE.format(
            example=powershell_quote(str(example)),
            output=powershell_quote(str(output)),
        )

    def compile(self, example: Path) -> ToolOutcome:
        """Compile ``example`` and return the captured outcome.

        A non-zero return code means the example failed to compile.

        Raises:
            ToolUnavailableError: If PowerShell cannot be located.
        """

        with tempfile.TemporaryDirectory(prefix="dsc-meta-example-") as scratch:
            script = self.build_script(example.resolve(), Path(scratch))
            return self._runner.run([*self._command, script], cwd=example.parent)


__all__ = ["ExampleCompiler", "find_examples"]
