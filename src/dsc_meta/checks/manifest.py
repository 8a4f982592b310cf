# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Module manifest validation check."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..config import resolve_manifest_path
from ..errors import ManifestError, ToolInvocationError, ToolUnavailableError
from ..manifest import ManifestReader, ModuleManifest, find_class_resources, minimum_powershell_version
from ..scanner import relative_label
from .base import CheckContext, CheckResult

MANIFEST_CATEGORY: Final[str] = "manifest"


@dataclass(slots=True)
class ManifestCheck:
    """Validate the declared PowerShell version and class resource registration."""

    name: str = MANIFEST_CATEGORY

    def run(self, ctx: CheckContext, result: CheckResult) -> None:
        """Read the module manifest and validate it against discovered resources.

        Args:
            ctx: Check context describing the repository.
            result: Collector receiving manifest violations.
        """

        path = resolve_manifest_path(ctx.root, ctx.config)
        if path is None:
            result.add_error("No module manifest (.psd1) found at the repository root", check=self.name)
            return
        reader = ManifestReader(ctx.runner, command=ctx.config.analyzer.command)
        try:
            manifest = reader.read(path)
        except ToolUnavailableError as exc:
            result.add_warning(f"Skipping manifest validation: {exc}", path, check=self.name)
            return
        except ToolInvocationError as exc:
            result.add_error(f"Unable to read {relative_label(path, ctx.root)}: {exc}", path, check=self.name)
            return
        except ManifestError as exc:
            result.add_error(str(exc), path, check=self.name)
            return
        self.validate(ctx, manifest, result, label=relative_label(path, ctx.root))

    def validate(self, ctx: CheckContext, manifest: ModuleManifest, result: CheckResult, *, label: str) -> None:
        """Validate an already decoded manifest.

        Args:
            ctx: Check context describing the repository.
            manifest: Decoded manifest.
            result: Collector receiving manifest violations.
            label: Manifest location used in messages.
        """

        class_resources = find_class_resources(ctx.root, exclude_dirs=ctx.config.scan.exclude_dirs)
        minimum = minimum_powershell_version(class_resources)
        try:
            declared = manifest.declared_version
        except ManifestError as exc:
            result.add_error(f"{label}: {exc}", check=self.name)
            declared = None
        else:
            if declared is None:
                result.add_error(f"{label} does not declare PowerShellVersion", check=self.name)
        if declared is not None and declared < minimum:
            reason = "the module contains class-based resources" if class_resources else "DSC resources require it"
            result.add_error(
                f"{label} declares PowerShellVersion {declared} but {minimum} is required because {reason}",
                check=self.name,
            )

        exported = {name.lower() for name in manifest.exported_dsc_resources}
        nested = {name.lower() for name in manifest.nested_module_names()}
        for resource in class_resources:
            if resource.name.lower() not in exported:
                result.add_error(
                    f"Class resource '{resource.name}' is not listed in ExportedDscResources of {label}",
                    resource.path,
                    check=self.name,
                )
            if resource.name.lower() not in nested:
                result.add_error(
                    f"Class resource '{resource.name}' is not listed in NestedModules of {label}",
                    resource.path,
                    check=self.name,
                )


__all__ = ["MANIFEST_CATEGORY", "ManifestCheck"]
