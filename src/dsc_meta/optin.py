# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Repository-level opt-in manifest controlling which optional suites gate the build."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Final

from jsonschema import Draft202012Validator
from jsonschema import exceptions as jsonschema_exceptions
from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_OPT_IN_FILENAME
from .errors import OptInError

LOGGER = logging.getLogger(__name__)

EXAMPLES_SUITE: Final[str] = "Common Tests - Validate Example Files"
MARKDOWN_SUITE: Final[str] = "Common Tests - Validate Markdown Files"
FLAGGED_RULES_SUITE: Final[str] = "Common Tests - Flagged Script Analyzer Rules"
NEW_RULES_SUITE: Final[str] = "Common Tests - New Error-Level Script Analyzer Rules"
OPT_IN_SCHEMA_RESOURCE: Final[str] = "opt_in.schema.json"

KNOWN_SUITES: Final[tuple[str, ...]] = (
    EXAMPLES_SUITE,
    MARKDOWN_SUITE,
    FLAGGED_RULES_SUITE,
    NEW_RULES_SUITE,
)


class OptInManifest(BaseModel):
    """Ordered list of suite names a repository has opted in to."""

    model_config = ConfigDict(frozen=True)

    suites: tuple[str, ...] = Field(default_factory=tuple)
    source: Path | None = None

    def enforces(self, suite: str) -> bool:
        """Return ``True`` when failures in ``suite`` should fail the run."""

        return is_opted_in(suite, self.suites)


def is_opted_in(suite_name: str, manifest: OptInManifest | Sequence[str]) -> bool:
    """Return ``True`` when ``suite_name`` appears in ``manifest``.

    Matching is exact and case-sensitive.

    Args:
        suite_name: Suite name to look up.
        manifest: Loaded manifest or a plain sequence of suite names.

    Returns:
        bool: ``True`` when the suite was opted in.
    """

    suites = manifest.suites if isinstance(manifest, OptInManifest) else manifest
    return suite_name in suites


@lru_cache(maxsize=1)
def _opt_in_validator() -> Draft202012Validator:
    payload = resources.files("dsc_meta.data").joinpath(OPT_IN_SCHEMA_RESOURCE).read_text(encoding="utf-8")
    schema = json.loads(payload)
    return Draft202012Validator(schema)


def load_opt_in_manifest(root: Path, filename: str = DEFAULT_OPT_IN_FILENAME) -> OptInManifest:
    """Load the opt-in manifest stored at ``root / filename``.

    A missing file means no opt-ins.

    Args:
        root: Repository root.
        filename: Manifest file name relative to ``root``.

    Returns:
        OptInManifest: Parsed manifest.

    Raises:
        OptInError: If the file is not a JSON array of strings.
    """

    path = root / filename
    if not path.is_file():
        LOGGER.debug("No opt-in manifest at %s; optional suites are advisory", path)
        return OptInManifest()
    try:
        payload = json.loads(path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as exc:
        raise OptInError(f"Opt-in manifest {path} is not valid JSON: {exc}") from exc
    try:
        _opt_in_validator().validate(payload)
    except jsonschema_exceptions.ValidationError as exc:
        raise OptInError(f"Opt-in manifest {path} must be a JSON array of strings: {exc.message}") from exc
    unknown = [item for item in payload if item not in KNOWN_SUITES]
    if unknown:
        LOGGER.debug("Opt-in manifest names suites this harness does not gate: %s", ", ".join(unknown))
    return OptInManifest(suites=tuple(payload), source=path)


__all__ = [
    "EXAMPLES_SUITE",
    "FLAGGED_RULES_SUITE",
    "KNOWN_SUITES",
    "MARKDOWN_SUITE",
    "NEW_RULES_SUITE",
    "OptInManifest",
    "is_opted_in",
    "load_opt_in_manifest",
]
