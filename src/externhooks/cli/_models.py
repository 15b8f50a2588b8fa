# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Option declarations and data structures for the externhooks CLI."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from ..constants import PARAMS_SEPARATOR

EXECUTABLE_ARGUMENT = Annotated[str, typer.Argument(help="Executable run by the hook.")]
PATH_ARGUMENT = Annotated[str, typer.Argument(help="Executable path as entered in the hook settings.")]
PARAM_OPTION = Annotated[
    list[str] | None,
    typer.Option("--param", "-p", help="Argument passed to the executable; repeatable."),
]
SAFE_MODE_OPTION = Annotated[
    bool,
    typer.Option("--safe-mode", help="Resolve the executable inside the external-hooks sandbox."),
]
ASYNC_OPTION = Annotated[
    bool,
    typer.Option("--async", help="Run the executable in the background."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to externhooks.toml."),
]
CWD_OPTION = Annotated[
    Path | None,
    typer.Option("--cwd", help="Working directory of the executable."),
]
SUMMARY_OPTION = Annotated[
    str,
    typer.Option("--summary", help="Rejection headline."),
]
TIMEOUT_OPTION = Annotated[
    float | None,
    typer.Option("--timeout", min=0.0, help="Kill the executable after this many seconds."),
]
ADMIN_OPTION = Annotated[
    bool,
    typer.Option("--admin/--no-admin", help="Validate as a system administrator."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]


@dataclass(slots=True)
class HookCommandOptions:
    """Settings shared by the commands that act on one executable."""

    exe: str
    params: tuple[str, ...]
    safe_mode: bool
    config_path: Path | None
    emoji: bool

    @property
    def params_text(self) -> str:
        """Return ``params`` encoded the way hook settings store them."""

        return PARAMS_SEPARATOR.join(self.params)

    def settings_mapping(self, **extra: object) -> dict[str, object]:
        """Return the raw settings mapping for these options."""

        return {"exe": self.exe, "params": self.params_text, "safe_path": self.safe_mode, **extra}


@dataclass(slots=True)
class RunOptions:
    """Options for the ``run`` command."""

    hook: HookCommandOptions
    cwd: Path
    summary: str
    timeout: float | None

    @classmethod
    def from_cli(
        cls,
        exe: str,
        params: Sequence[str] | None,
        *,
        safe_mode: bool,
        config_path: Path | None,
        cwd: Path | None,
        summary: str,
        timeout: float | None,
        emoji: bool,
    ) -> RunOptions:
        """Return options parsed from CLI arguments."""

        return cls(
            hook=HookCommandOptions(
                exe=exe,
                params=tuple(params or ()),
                safe_mode=safe_mode,
                config_path=config_path,
                emoji=emoji,
            ),
            cwd=(cwd or Path.cwd()).resolve(),
            summary=summary,
            timeout=timeout or None,
        )


__all__ = [
    "ADMIN_OPTION",
    "ASYNC_OPTION",
    "CONFIG_OPTION",
    "CWD_OPTION",
    "EMOJI_OPTION",
    "EXECUTABLE_ARGUMENT",
    "HookCommandOptions",
    "PARAM_OPTION",
    "PATH_ARGUMENT",
    "RunOptions",
    "SAFE_MODE_OPTION",
    "SUMMARY_OPTION",
    "TIMEOUT_OPTION",
]
