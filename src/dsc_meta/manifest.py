# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Module manifest model, reader and class-resource discovery."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path, PureWindowsPath
from typing import Any, Final

from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import POWERSHELL_COMMAND
from .errors import ManifestError
from .tooling import ToolRunner, ensure_completed, powershell_quote

CLASS_RESOURCE_MINIMUM: Final[Version] = Version("5.0")
SCRIPT_RESOURCE_MINIMUM: Final[Version] = Version("4.0")
MANIFEST_CMDLET: Final[str] = "Import-PowerShellDataFile"

_CLASS_RESOURCE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\s*\[DscResource\([^)]*\)\]\s*(?:\[[^\]]*\]\s*)*class\s+(?P<name>[A-Za-z_][A-Za-z0-9_]*)",
    re.IGNORECASE | re.MULTILINE,
)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, Mapping)):
        return [value]
    return list(value)


class ModuleManifest(BaseModel):
    """Fields of a ``.psd1`` module manifest that the harness validates."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    powershell_version: str | None = Field(default=None, alias="PowerShellVersion")
    exported_dsc_resources: tuple[str, ...] = Field(default=(), alias="ExportedDscResources")
    nested_modules: tuple[str, ...] = Field(default=(), alias="NestedModules")

    @field_validator("powershell_version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("exported_dsc_resources", mode="before")
    @classmethod
    def _coerce_exports(cls, value: Any) -> tuple[str, ...]:
        return tuple(str(item) for item in _as_list(value))

    @field_validator("nested_modules", mode="before")
    @classmethod
    def _coerce_nested(cls, value: Any) -> tuple[str, ...]:
        """Flatten nested module entries given as strings or ``@{ModuleName=...}`` tables."""

        names: list[str] = []
        for item in _as_list(value):
            if isinstance(item, Mapping):
                name = item.get("ModuleName")
                if name:
                    names.append(str(name))
            else:
                names.append(str(item))
        return tuple(names)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source: Path | None = None) -> ModuleManifest:
        """Validate a decoded manifest mapping.

        Raises:
            ManifestError: If the mapping does not describe a manifest.
        """

        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise ManifestError(f"Invalid module manifest {source or ''}: {exc}".strip()) from exc

    @property
    def declared_version(self) -> Version | None:
        """Return ``PowerShellVersion`` as a comparable version, if present.

        Raises:
            ManifestError: If the declared value is not a version string.
        """

        if not self.powershell_version:
            return None
        try:
            return Version(self.powershell_version)
        except InvalidVersion as exc:
            raise ManifestError(f"PowerShellVersion '{self.powershell_version}' is not a valid version") from exc

    def nested_module_names(self) -> set[str]:
        """Return nested module entries reduced to their file stems.

        Entries are usually Windows-style relative paths such as
        ``DSCClassResources\\Foo\\Foo.psd1``.
        """

        return {PureWindowsPath(entry).stem for entry in self.nested_modules}


@dataclass(frozen=True, slots=True)
class ClassResource:
    """A class-based DSC resource declared in a module file."""

    name: str
    path: Path


def find_class_resources(module_root: Path, *, exclude_dirs: Sequence[str] = ()) -> list[ClassResource]:
    """Return class-based resources declared in ``.psm1`` files under ``module_root``.

    Args:
        module_root: Module repository root.
        exclude_dirs: Directory names to skip.

    Returns:
        list[ClassResource]: Resources sorted by name.
    """

    excluded = set(exclude_dirs)
    resources: list[ClassResource] = []
    for path in sorted(module_root.rglob("*.psm1")):
        if excluded.intersection(path.relative_to(module_root).parts):
            continue
        text = path.read_text(encoding="utf-8-sig", errors="replace")
        resources.extend(
            ClassResource(name=match.group("name"), path=path) for match in _CLASS_RESOURCE_PATTERN.finditer(text)
        )
    return sorted(resources, key=lambda resource: resource.name.lower())


def minimum_powershell_version(class_resources: Sequence[ClassResource]) -> Version:
    """Return the minimum ``PowerShellVersion`` a module must declare.

    Class-based resources require PowerShell 5.0; script resources need 4.0.
    """

    return CLASS_RESOURCE_MINIMUM if class_resources else SCRIPT_RESOURCE_MINIMUM


class ManifestReader:
    """Decode ``.psd1`` manifests with ``Import-PowerShellDataFile``."""

    def __init__(self, runner: ToolRunner, *, command: Sequence[str] = POWERSHELL_COMMAND) -> None:
        self._runner = runner
        self._command = tuple(command)

    def read(self, path: Path) -> ModuleManifest:
        """Return the manifest stored at ``path``.

        Raises:
            ManifestError: If the file is missing or its content cannot be decoded.
            ToolUnavailableError: If PowerShell cannot be located.
            ToolInvocationError: If PowerShell failed to import the manifest.
        """

        if not path.is_file():
            raise ManifestError(f"Module manifest {path} does not exist")
        script = f"{MANIFEST_CMDLET} -Path {powershell_quote(str(path))} | ConvertTo-Json -Depth 5"
        outcome = ensure_completed(self._runner.run([*self._command, script]), tool=MANIFEST_CMDLET)
        try:
            payload = json.loads(outcome.stdout_text)
        except json.JSONDecodeError as exc:
            raise ManifestError(f"Unable to decode manifest {path}: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise ManifestError(f"Module manifest {path} did not decode to a table")
        return ModuleManifest.from_mapping(payload, source=path)


__all__ = [
    "CLASS_RESOURCE_MINIMUM",
    "ClassResource",
    "ManifestReader",
    "ModuleManifest",
    "SCRIPT_RESOURCE_MINIMUM",
    "find_class_resources",
    "minimum_powershell_version",
]
