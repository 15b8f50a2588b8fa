# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application for running, rendering and checking external hooks."""

from __future__ import annotations

import logging
import sys
from typing import Annotated

import typer

from ..constants import PRE_RECEIVE_SUMMARY
from ..logging import configure_logging
from ._models import (
    ADMIN_OPTION,
    ASYNC_OPTION,
    CONFIG_OPTION,
    CWD_OPTION,
    EMOJI_OPTION,
    EXECUTABLE_ARGUMENT,
    PARAM_OPTION,
    PATH_ARGUMENT,
    SAFE_MODE_OPTION,
    SUMMARY_OPTION,
    TIMEOUT_OPTION,
    HookCommandOptions,
    RunOptions,
)
from ._services import (
    load_config,
    read_ref_changes,
    render_script,
    resolve_executable,
    run_hook,
    validate_settings,
)
from .shared import CLIError, build_cli_logger

app = typer.Typer(
    name="externhooks",
    help="Run external executables as source-control hooks.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _configure(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase diagnostic logging; repeatable."),
    ] = 0,
) -> None:
    """Configure operator logging before any command runs."""

    level = logging.WARNING if verbose == 0 else logging.INFO if verbose == 1 else logging.DEBUG
    configure_logging(level)


@app.command("run")
def run_command(
    exe: EXECUTABLE_ARGUMENT,
    param: PARAM_OPTION = None,
    safe_mode: SAFE_MODE_OPTION = False,
    cwd: CWD_OPTION = None,
    config: CONFIG_OPTION = None,
    summary: SUMMARY_OPTION = PRE_RECEIVE_SUMMARY,
    timeout: TIMEOUT_OPTION = None,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Feed ref changes from stdin to EXE and report whether it accepts them."""

    options = RunOptions.from_cli(
        exe,
        param,
        safe_mode=safe_mode,
        config_path=config,
        cwd=cwd,
        summary=summary,
        timeout=timeout,
        emoji=emoji,
    )
    logger = build_cli_logger(emoji=emoji)
    try:
        server_config = load_config(config)
        ref_changes = read_ref_changes(sys.stdin)
        result = run_hook(options, ref_changes, server_config)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    if result.accepted:
        logger.ok(f"Accepted {len(ref_changes)} ref change(s)")
        raise typer.Exit(code=0)
    logger.fail(result.summary)
    if result.detail:
        logger.echo(result.detail, nl=not result.detail.endswith("\n"))
    raise typer.Exit(code=1)


@app.command("render")
def render_command(
    exe: EXECUTABLE_ARGUMENT,
    param: PARAM_OPTION = None,
    run_async: ASYNC_OPTION = False,
    safe_mode: SAFE_MODE_OPTION = False,
    config: CONFIG_OPTION = None,
) -> None:
    """Print the hook script that would be installed for EXE."""

    options = HookCommandOptions(
        exe=exe,
        params=tuple(param or ()),
        safe_mode=safe_mode,
        config_path=config,
        emoji=False,
    )
    logger = build_cli_logger(emoji=False)
    try:
        script = render_script(options, run_async=run_async, config=load_config(config))
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    logger.echo(script, nl=False)


@app.command("resolve")
def resolve_command(
    path: PATH_ARGUMENT,
    safe_mode: SAFE_MODE_OPTION = False,
    config: CONFIG_OPTION = None,
) -> None:
    """Print the file PATH designates."""

    logger = build_cli_logger(emoji=False)
    try:
        resolved = resolve_executable(path, safe_mode=safe_mode, config=load_config(config))
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    logger.echo(str(resolved))


@app.command("validate")
def validate_command(
    exe: EXECUTABLE_ARGUMENT,
    param: PARAM_OPTION = None,
    safe_mode: SAFE_MODE_OPTION = False,
    config: CONFIG_OPTION = None,
    admin: ADMIN_OPTION = True,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Check hook settings for EXE as the settings form would."""

    options = HookCommandOptions(
        exe=exe,
        params=tuple(param or ()),
        safe_mode=safe_mode,
        config_path=config,
        emoji=emoji,
    )
    logger = build_cli_logger(emoji=emoji)
    try:
        messages = validate_settings(options, admin=admin, config=load_config(config))
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    if messages:
        for message in messages:
            logger.fail(message)
        raise typer.Exit(code=1)
    logger.ok("Settings are valid")


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
