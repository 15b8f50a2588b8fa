# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render the bash wrapper installed upstream as a hook script."""

from __future__ import annotations

from collections.abc import Sequence
from importlib import resources
from pathlib import Path
from typing import Final

TEMPLATE_NAME: Final[str] = "hook-script.template.bash"
_QUOTE_ESCAPE: Final[str] = "'\"'\"'"


def shell_quote(value: str) -> str:
    """Return ``value`` single-quoted for bash.

    Embedded single quotes close the quoted string, emit a double-quoted
    quote and reopen it, so any byte sequence survives unchanged.

    Args:
        value: Argument or path to quote.

    Returns:
        str: Quoted representation.
    """

    return "'" + value.replace("'", _QUOTE_ESCAPE) + "'"


def load_template() -> str:
    """Return the packaged preamble with a trailing newline on every line."""

    text = resources.files("externhooks").joinpath("resources", TEMPLATE_NAME).read_text(encoding="utf-8")
    return "".join(f"{line}\n" for line in text.splitlines())


class ScriptTemplater:
    """Turn an executable and its arguments into a hook script body."""

    def __init__(self, template: str | None = None) -> None:
        self._template = load_template() if template is None else template

    def render(self, executable: Path | str, args: Sequence[str], run_async: bool = False) -> str:
        """Return the script invoking ``executable`` with ``args``.

        In async mode stdin is spooled to a temporary file and the invocation
        runs detached in a background subshell that removes the file on exit,
        so the host sees the script finish immediately with status 0.

        Args:
            executable: Resolved executable path.
            args: Arguments passed verbatim after the executable.
            run_async: Fire and forget instead of waiting for the executable.

        Returns:
            str: Complete script text.
        """

        lines = [self._template, "\n\n"]
        if run_async:
            lines.append('stdin="$(mktemp)"\n')
            lines.append('cat >"$stdin"\n')
            lines.append("(\n")
            lines.append('    trap "rm \\"$stdin\\"" EXIT\n')
            lines.append("    ")

        lines.append(shell_quote(str(executable)))
        for arg in args:
            if arg:
                lines.append(" " + shell_quote(arg))

        if run_async:
            lines.append(' <"$stdin"\n')
            lines.append(") >/dev/null 2>&1 <&- &\n")

        lines.append("\n")
        return "".join(lines)


__all__ = ["TEMPLATE_NAME", "ScriptTemplater", "load_template", "shell_quote"]
