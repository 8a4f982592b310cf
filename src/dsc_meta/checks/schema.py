# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Script resource schema validation check."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..schema import (
    SchemaParseError,
    find_script_resources,
    parse_mof_schema,
    parse_resource_functions,
    validate_resource,
)
from .base import CheckContext, CheckResult

SCHEMA_CATEGORY: Final[str] = "schema"


@dataclass(slots=True)
class SchemaCheck:
    """Validate each script resource's schema against its declared parameters."""

    name: str = SCHEMA_CATEGORY

    def run(self, ctx: CheckContext, result: CheckResult) -> None:
        for resource in find_script_resources(ctx.root):
            if not resource.schema.is_file():
                result.add_error(
                    f"Resource '{resource.name}' has no {resource.schema.name}",
                    resource.module,
                    check=self.name,
                )
                continue
            try:
                schema = parse_mof_schema(resource.schema.read_text(encoding="utf-8-sig", errors="replace"))
            except SchemaParseError as exc:
                result.add_error(
                    f"Resource '{resource.name}' schema is invalid: {exc}",
                    resource.schema,
                    check=self.name,
                )
                continue
            functions = parse_resource_functions(resource.module.read_text(encoding="utf-8-sig", errors="replace"))
            for problem in validate_resource(schema, functions):
                result.add_error(f"Resource '{resource.name}': {problem}", resource.module, check=self.name)


__all__ = ["SCHEMA_CATEGORY", "SchemaCheck"]
