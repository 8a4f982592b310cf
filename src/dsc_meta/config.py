# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and layered loading for the meta-test harness."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "dsc-meta"
REPO_CONFIG_FILENAME: Final[str] = ".dsc-meta.toml"
DEFAULT_OPT_IN_FILENAME: Final[str] = ".MetaTestOptIn.json"

DEFAULT_CHECKS: Final[tuple[str, ...]] = (
    "formatting",
    "manifest",
    "schema",
    "analyzer",
    "suppressions",
    "examples",
    "markdown",
)
DEFAULT_TEXT_EXTENSIONS: Final[tuple[str, ...]] = (
    ".gitignore",
    ".gitattributes",
    ".ps1",
    ".psm1",
    ".psd1",
    ".json",
    ".xml",
    ".cmd",
    ".mof",
    ".md",
    ".yml",
    ".txt",
)
DEFAULT_EXCLUDE_DIRS: Final[tuple[str, ...]] = (".git", "node_modules", "DscResource.Tests")
POWERSHELL_COMMAND: Final[tuple[str, ...]] = ("pwsh", "-NoProfile", "-NonInteractive", "-Command")


class ScanConfig(BaseModel):
    """Control which files the formatting scan considers text."""

    model_config = ConfigDict(validate_assignment=True)

    text_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_TEXT_EXTENSIONS))
    exclude_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))


class AnalyzerConfig(BaseModel):
    """Settings for the PSScriptAnalyzer invocation."""

    model_config = ConfigDict(validate_assignment=True)

    command: list[str] = Field(default_factory=lambda: list(POWERSHELL_COMMAND))
    extensions: list[str] = Field(default_factory=lambda: [".ps1", ".psm1"])


class MarkdownConfig(BaseModel):
    """Settings for the markdown linting toolchain."""

    model_config = ConfigDict(validate_assignment=True)

    command: list[str] = Field(default_factory=lambda: ["markdownlint", "--json"])


class ExampleConfig(BaseModel):
    """Settings for example configuration compilation."""

    model_config = ConfigDict(validate_assignment=True)

    command: list[str] = Field(default_factory=lambda: list(POWERSHELL_COMMAND))
    directory: str = "Examples"


class CatalogOverrides(BaseModel):
    """Optional replacements for the shipped rule catalog tiers."""

    model_config = ConfigDict(validate_assignment=True)

    required: list[str] | None = None
    flagged: list[str] | None = None
    ignored: list[str] | None = None
    excluded: list[str] | None = None

    def as_mapping(self) -> dict[str, list[str]]:
        """Return only the tiers that were explicitly overridden."""

        return {key: value for key, value in self.model_dump().items() if value is not None}


class MetaConfig(BaseModel):
    """Root configuration for a meta-test run."""

    model_config = ConfigDict(validate_assignment=True)

    checks: list[str] = Field(default_factory=lambda: list(DEFAULT_CHECKS))
    timeout: float = Field(default=300.0, gt=0)
    opt_in_file: str = DEFAULT_OPT_IN_FILENAME
    manifest: Path | None = None
    scan: ScanConfig = Field(default_factory=ScanConfig)
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    markdown: MarkdownConfig = Field(default_factory=MarkdownConfig)
    examples: ExampleConfig = Field(default_factory=ExampleConfig)
    catalog: CatalogOverrides = Field(default_factory=CatalogOverrides)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _normalise_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``data`` with TOML-style dashed keys converted to identifiers."""

    normalised: dict[str, Any] = {}
    for key, value in data.items():
        name = str(key).replace("-", "_")
        normalised[name] = _normalise_keys(value) if isinstance(value, Mapping) else value
    return normalised


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc


def _pyproject_fragment(path: Path) -> dict[str, Any]:
    tool_section = _read_toml(path).get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return dict(section)


def config_sources(root: Path) -> list[Path]:
    """Return the configuration files that exist under ``root`` in precedence order."""

    candidates = (root / PYPROJECT_FILENAME, root / REPO_CONFIG_FILENAME)
    return [candidate for candidate in candidates if candidate.is_file()]


def load_config(root: Path, overrides: Mapping[str, Any] | None = None) -> MetaConfig:
    """Load layered configuration for the repository at ``root``.

    Built-in defaults are overlaid with ``[tool.dsc-meta]`` from
    ``pyproject.toml``, then ``.dsc-meta.toml``, then ``overrides``.

    Args:
        root: Repository root being validated.
        overrides: Optional mapping applied last (typically CLI flags).

    Returns:
        MetaConfig: Validated configuration.

    Raises:
        ConfigError: If a source cannot be parsed or the merged data is invalid.
    """

    merged: dict[str, Any] = {}
    for source in config_sources(root):
        if source.name == PYPROJECT_FILENAME:
            fragment = _pyproject_fragment(source)
        else:
            fragment = _read_toml(source)
        if fragment:
            LOGGER.debug("Loaded configuration fragment from %s", source)
        merged = _deep_merge(merged, _normalise_keys(fragment))
    if overrides:
        merged = _deep_merge(merged, _normalise_keys(overrides))
    try:
        return MetaConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid dsc-meta configuration: {exc}") from exc


def resolve_manifest_path(root: Path, config: MetaConfig) -> Path | None:
    """Return the module manifest path for ``root``.

    The configured manifest wins; otherwise ``<root name>.psd1`` is preferred,
    falling back to the only ``.psd1`` at the root when exactly one exists.
    """

    if config.manifest is not None:
        return config.manifest if config.manifest.is_absolute() else root / config.manifest
    named = root / f"{root.name}.psd1"
    if named.is_file():
        return named
    candidates: Sequence[Path] = sorted(root.glob("*.psd1"))
    if len(candidates) == 1:
        return candidates[0]
    return None


__all__ = [
    "AnalyzerConfig",
    "CatalogOverrides",
    "DEFAULT_CHECKS",
    "DEFAULT_OPT_IN_FILENAME",
    "ExampleConfig",
    "MarkdownConfig",
    "MetaConfig",
    "ScanConfig",
    "config_sources",
    "load_config",
    "resolve_manifest_path",
]
