# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer application exposing the ``dsc-meta`` commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Final

import typer

from ..catalog import RuleTier, load_rule_catalog
from ..config import load_config
from ..console import detect_tty
from ..errors import DscMetaError
from ..logging import configure_debug_logging, fail, info
from ..optin import KNOWN_SUITES, load_opt_in_manifest
from ..runner import MetaTestOptions, MetaTestRunner
from .rendering import render_listing, render_result

CONFIG_ERROR_EXIT: Final[int] = 2
TIER_NAMES: Final[tuple[str, ...]] = ("required", "flagged", "ignored", "excluded")

ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Repository root of the DSC resource module."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool | None,
    typer.Option("--color/--no-color", help="Force colour output on or off (default: detect TTY)."),
]

app = typer.Typer(
    name="dsc-meta",
    help="Run common meta tests against a PowerShell DSC resource module.",
    no_args_is_help=True,
    add_completion=False,
)


def _use_color(color: bool | None) -> bool:
    return detect_tty() if color is None else color


@app.command("run")
def run_command(
    root: ROOT_OPTION = Path("."),
    check: Annotated[
        list[str] | None,
        typer.Option("--check", "-c", help="Run only the named check (repeatable)."),
    ] = None,
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
) -> None:
    """Run the meta checks and exit non-zero when any hard failure is found."""

    configure_debug_logging(verbose=verbose)
    use_color = _use_color(color)
    resolved_root = root.resolve()
    try:
        runner = MetaTestRunner(resolved_root, options=MetaTestOptions())
        result = runner.run(check or None)
    except DscMetaError as exc:
        fail(str(exc), use_emoji=emoji, use_color=use_color)
        raise typer.Exit(code=CONFIG_ERROR_EXIT) from exc
    render_result(result, root=resolved_root, use_emoji=emoji, use_color=use_color)
    raise typer.Exit(code=result.exit_code())


@app.command("rules")
def rules_command(
    root: ROOT_OPTION = Path("."),
    tier: Annotated[
        str | None,
        typer.Option("--tier", "-t", help=f"Only list one tier ({', '.join(TIER_NAMES)})."),
    ] = None,
    color: COLOR_OPTION = None,
) -> None:
    """List the analyzer rule catalog, including repository overrides."""

    use_color = _use_color(color)
    if tier is not None and tier not in TIER_NAMES:
        fail(f"Unknown tier '{tier}' (choose from {', '.join(TIER_NAMES)})", use_emoji=False, use_color=use_color)
        raise typer.Exit(code=CONFIG_ERROR_EXIT)
    try:
        config = load_config(root.resolve())
        catalog = load_rule_catalog(config.catalog.as_mapping())
    except DscMetaError as exc:
        fail(str(exc), use_emoji=False, use_color=use_color)
        raise typer.Exit(code=CONFIG_ERROR_EXIT) from exc
    for name in TIER_NAMES:
        if tier is not None and name != tier:
            continue
        rules = catalog.excluded if name == "excluded" else catalog.rules_in(RuleTier(name))
        render_listing(f"{name} ({len(rules)})", sorted(rules), use_color=use_color)


@app.command("opt-ins")
def opt_ins_command(
    root: ROOT_OPTION = Path("."),
    color: COLOR_OPTION = None,
) -> None:
    """Show which optional suites the repository has opted in to."""

    use_color = _use_color(color)
    resolved_root = root.resolve()
    try:
        config = load_config(resolved_root)
        manifest = load_opt_in_manifest(resolved_root, config.opt_in_file)
    except DscMetaError as exc:
        fail(str(exc), use_emoji=False, use_color=use_color)
        raise typer.Exit(code=CONFIG_ERROR_EXIT) from exc
    if manifest.source is None:
        info(f"No {config.opt_in_file} found; optional suites only warn", use_emoji=False, use_color=use_color)
    entries = [f"[{'x' if manifest.enforces(suite) else ' '}] {suite}" for suite in KNOWN_SUITES]
    entries.extend(f"[?] {suite}" for suite in manifest.suites if suite not in KNOWN_SUITES)
    render_listing(config.opt_in_file, entries, use_color=use_color)


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main"]
