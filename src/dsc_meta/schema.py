# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Script resource schema parsing and parameter cross-checking."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final

RESOURCES_DIRECTORY: Final[str] = "DSCResources"
SCHEMA_SUFFIX: Final[str] = ".schema.mof"
TARGET_FUNCTIONS: Final[tuple[str, ...]] = ("Get-TargetResource", "Set-TargetResource", "Test-TargetResource")
_MUTATING_FUNCTIONS: Final[tuple[str, ...]] = ("Set-TargetResource", "Test-TargetResource")

_QUOTED: Final[re.Pattern[str]] = re.compile(r'"(?:[^"\\]|\\.)*"')
_CLASS_HEADER: Final[re.Pattern[str]] = re.compile(
    r"(?:\[(?P<qualifiers>(?:[^\[\]\"]|\"(?:[^\"\\]|\\.)*\")*)\]\s*)?"
    r"class\s+(?P<name>\w+)\s*:\s*OMI_BaseResource\s*\{",
    re.IGNORECASE,
)
_FRIENDLY_NAME: Final[re.Pattern[str]] = re.compile(r'FriendlyName\s*\(\s*"(?P<name>[^"]*)"\s*\)', re.IGNORECASE)
_PROPERTY: Final[re.Pattern[str]] = re.compile(
    r"\[(?P<qualifiers>(?:[^\[\]\"]|\"(?:[^\"\\]|\\.)*\")*)\]\s*"
    r"(?P<type>\w+)\s+(?P<name>\w+)\s*(?P<array>\[\s*\])?\s*;",
)
_ACCESS_QUALIFIER: Final[re.Pattern[str]] = re.compile(r"\b(Key|Required|Write|Read)\b", re.IGNORECASE)
_FUNCTION_HEADER: Final[str] = r"function\s+{name}\b"
_PARAM_KEYWORD: Final[re.Pattern[str]] = re.compile(r"\bparam\s*\(", re.IGNORECASE)
# String literals are matched so a "#" inside quotes is not taken for a comment.
_COMMENT_OR_STRING: Final[re.Pattern[str]] = re.compile(
    r"'(?:[^']|'')*'|\"(?:[^\"`]|`.)*\"|<#.*?#>|#[^\n]*",
    re.DOTALL,
)
_VARIABLE: Final[re.Pattern[str]] = re.compile(r"^\$(?P<name>\w+)")
_OPENERS: Final[dict[str, str]] = {"(": ")", "[": "]", "{": "}"}


class PropertyAccess(str, Enum):
    """MOF access qualifiers for resource properties."""

    KEY = "key"
    REQUIRED = "required"
    WRITE = "write"
    READ = "read"


@dataclass(frozen=True, slots=True)
class SchemaProperty:
    """A single property declared in a resource schema."""

    name: str
    mof_type: str
    access: PropertyAccess
    is_array: bool = False


@dataclass(frozen=True, slots=True)
class ResourceSchema:
    """Parsed ``.schema.mof`` class for a script resource."""

    class_name: str
    friendly_name: str | None
    properties: tuple[SchemaProperty, ...] = field(default_factory=tuple)

    def with_access(self, *access: PropertyAccess) -> list[SchemaProperty]:
        """Return properties whose access qualifier is one of ``access``."""

        return [prop for prop in self.properties if prop.access in access]


@dataclass(frozen=True, slots=True)
class ScriptResource:
    """Locations of a script resource's module and schema files."""

    name: str
    module: Path
    schema: Path


class SchemaParseError(ValueError):
    """Raised when a schema document contains no resource class."""


def parse_mof_schema(text: str) -> ResourceSchema:
    """Parse the resource class from a ``.schema.mof`` document.

    Args:
        text: Schema document content.

    Returns:
        ResourceSchema: Class name, friendly name and properties.

    Raises:
        SchemaParseError: If no class deriving from ``OMI_BaseResource`` exists.
    """

    header = _CLASS_HEADER.search(text)
    if header is None:
        raise SchemaParseError("no class deriving from OMI_BaseResource was found")
    friendly = _FRIENDLY_NAME.search(header.group("qualifiers") or "")
    body_end = text.find("};", header.end())
    body = text[header.end() : body_end if body_end != -1 else len(text)]
    properties: list[SchemaProperty] = []
    for match in _PROPERTY.finditer(body):
        qualifiers = _QUOTED.sub('""', match.group("qualifiers"))
        access = _ACCESS_QUALIFIER.search(qualifiers)
        properties.append(
            SchemaProperty(
                name=match.group("name"),
                mof_type=match.group("type"),
                access=PropertyAccess(access.group(1).lower()) if access else PropertyAccess.WRITE,
                is_array=match.group("array") is not None,
            ),
        )
    return ResourceSchema(
        class_name=header.group("name"),
        friendly_name=friendly.group("name") if friendly else None,
        properties=tuple(properties),
    )


def _balanced_end(text: str, start: int) -> int:
    """Return the index just past the bracket closing ``text[start]``.

    Quoted strings are skipped. Returns ``len(text)`` when unbalanced.
    """

    stack: list[str] = []
    quote: str | None = None
    index = start
    while index < len(text):
        char = text[index]
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif stack and char == stack[-1]:
            stack.pop()
            if not stack:
                return index + 1
        index += 1
    return len(text)


def _split_top_level(text: str) -> list[str]:
    """Split ``text`` on commas that are not nested inside brackets or quotes."""

    segments: list[str] = []
    depth = 0
    quote: str | None = None
    current: list[str] = []
    for char in text:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char in _OPENERS:
            depth += 1
        elif char in _OPENERS.values():
            depth -= 1
        elif char == "," and depth == 0:
            segments.append("".join(current))
            current = []
            continue
        current.append(char)
    segments.append("".join(current))
    return segments


def _parameter_name(segment: str) -> str | None:
    """Return the variable declared by one ``param()`` segment, skipping attributes."""

    remainder = segment.strip()
    while remainder.startswith("["):
        remainder = remainder[_balanced_end(remainder, 0) :].lstrip()
    match = _VARIABLE.match(remainder)
    return match.group("name") if match else None


def _drop_comment(match: re.Match[str]) -> str:
    token = match.group(0)
    return "" if token.startswith(("#", "<#")) else token


def _strip_comments(text: str) -> str:
    return _COMMENT_OR_STRING.sub(_drop_comment, text)


def parse_function_parameters(text: str, function: str) -> list[str] | None:
    """Return the parameter names declared by ``function`` in ``text``.

    Args:
        text: Resource module source.
        function: Function name such as ``Set-TargetResource``.

    Returns:
        list[str] | None: Parameter names in declaration order, or ``None`` when
        the function is not defined.
    """

    source = _strip_comments(text)
    header = re.search(_FUNCTION_HEADER.format(name=re.escape(function)), source, re.IGNORECASE)
    if header is None:
        return None
    body_start = source.find("{", header.end())
    if body_start == -1:
        return None
    body = source[body_start : _balanced_end(source, body_start)]
    param = _PARAM_KEYWORD.search(body)
    if param is None:
        return []
    open_index = param.end() - 1
    block = body[open_index + 1 : _balanced_end(body, open_index) - 1]
    names = (_parameter_name(segment) for segment in _split_top_level(block))
    return [name for name in names if name]


def parse_resource_functions(text: str) -> dict[str, list[str] | None]:
    """Return parameters of the Get/Set/Test target resource functions."""

    return {function: parse_function_parameters(text, function) for function in TARGET_FUNCTIONS}


def validate_resource(schema: ResourceSchema, functions: Mapping[str, Sequence[str] | None]) -> list[str]:
    """Cross-check a schema against the target resource function parameters.

    Comparisons are case-insensitive, matching PowerShell parameter binding.

    Args:
        schema: Parsed schema of the resource.
        functions: Mapping of function name to parameter names (``None`` when undefined).

    Returns:
        list[str]: Human-readable problems; empty when the resource is consistent.
    """

    problems: list[str] = []
    params: dict[str, set[str]] = {}
    for function in TARGET_FUNCTIONS:
        declared = functions.get(function)
        if declared is None:
            problems.append(f"function {function} is not defined")
            continue
        params[function] = {name.lower() for name in declared}

    if not schema.with_access(PropertyAccess.KEY):
        problems.append("schema declares no Key property")

    for prop in schema.with_access(PropertyAccess.KEY, PropertyAccess.REQUIRED):
        for function, names in params.items():
            if prop.name.lower() not in names:
                problems.append(f"{prop.access.value} property '{prop.name}' is not a parameter of {function}")

    for prop in schema.with_access(PropertyAccess.WRITE):
        for function in _MUTATING_FUNCTIONS:
            if function in params and prop.name.lower() not in params[function]:
                problems.append(f"write property '{prop.name}' is not a parameter of {function}")

    for prop in schema.with_access(PropertyAccess.READ):
        for function in _MUTATING_FUNCTIONS:
            if function in params and prop.name.lower() in params[function]:
                problems.append(f"read property '{prop.name}' must not be a parameter of {function}")

    schema_names = {prop.name.lower() for prop in schema.properties}
    for function in _MUTATING_FUNCTIONS:
        for name in functions.get(function) or ():
            if name.lower() not in schema_names:
                problems.append(f"parameter '{name}' of {function} has no schema property")
    return problems


def find_script_resources(module_root: Path) -> list[ScriptResource]:
    """Return script resources under ``module_root / DSCResources``."""

    base = module_root / RESOURCES_DIRECTORY
    if not base.is_dir():
        return []
    resources: list[ScriptResource] = []
    for directory in sorted(path for path in base.iterdir() if path.is_dir()):
        module = directory / f"{directory.name}.psm1"
        if not module.is_file():
            continue
        resources.append(
            ScriptResource(name=directory.name, module=module, schema=directory / f"{directory.name}{SCHEMA_SUFFIX}"),
        )
    return resources


__all__ = [
    "PropertyAccess",
    "ResourceSchema",
    "SchemaParseError",
    "SchemaProperty",
    "ScriptResource",
    "find_script_resources",
    "parse_function_parameters",
    "parse_mof_schema",
    "parse_resource_functions",
    "validate_resource",
]
