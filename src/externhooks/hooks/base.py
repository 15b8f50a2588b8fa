# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Execution core shared by the hook adapters."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ..config import HookSettings
from ..constants import REPOSITORY_DIR_DETAIL, REPOSITORY_DIR_SUMMARY
from ..environment import HookEnvironmentBuilder
from ..interfaces import ApplicationProperties
from ..license import LicenseGate
from ..models import HookResult, ProcessSpec, RefChange, Repository, Scope
from ..resolver import ExecutableResolver
from ..runner import HookRunner, internal_error

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HookContext:
    """Settings in effect for one hook invocation."""

    settings: HookSettings = field(default_factory=HookSettings)
    scope: Scope | None = None

    @classmethod
    def from_settings(cls, settings: Mapping[str, object] | None, scope: Scope | None = None) -> HookContext:
        """Build a context from the raw settings mapping stored by the host."""

        return cls(settings=HookSettings.from_settings(settings), scope=scope)


class HookExecutor:
    """Turn hook settings into a process spec and run it."""

    def __init__(
        self,
        *,
        license_gate: LicenseGate,
        application: ApplicationProperties,
        environment: HookEnvironmentBuilder,
        resolver: ExecutableResolver | None = None,
        runner: HookRunner | None = None,
        default_timeout: float | None = None,
    ) -> None:
        self.license_gate = license_gate
        self.application = application
        self.environment = environment
        self.resolver = resolver or ExecutableResolver(application)
        self.runner = runner or HookRunner()
        self.default_timeout = default_timeout

    def command(self, settings: HookSettings) -> tuple[str, ...] | None:
        """Return the argv for ``settings``.

        Args:
            settings: Hook settings naming the executable and its parameters.

        Returns:
            tuple[str, ...] | None: Executable followed by its arguments, or
            ``None`` when the executable cannot be resolved.
        """

        if not settings.exe:
            return None
        executable = self.resolver.resolve(settings.exe, settings.safe_path)
        if executable is None:
            return None
        return (str(executable), *settings.arguments())

    def repository_dir(self, repository: Repository) -> Path | None:
        """Return the absolute storage directory of ``repository``."""

        location = self.application.repository_dir(repository)
        if location is None:
            return None
        return Path(os.path.abspath(location))

    def execute(
        self,
        settings: HookSettings,
        *,
        cwd: Path,
        env: Mapping[str, str],
        ref_changes: Iterable[RefChange],
        summary: str,
        cancel: threading.Event | None = None,
    ) -> HookResult:
        """Run the configured executable and return its decision.

        Args:
            settings: Hook settings naming the executable.
            cwd: Working directory of the child.
            env: Variables layered over the server environment.
            ref_changes: Ref changes streamed to stdin.
            summary: Rejection headline used on a nonzero exit.
            cancel: Optional event aborting the run.

        Returns:
            HookResult: The runner's decision, or an internal-error rejection
            when no command can be built.
        """

        command = self.command(settings)
        if command is None:
            LOGGER.error("Unable to resolve executable %r (safe mode: %s)", settings.exe, settings.safe_path)
            return internal_error()
        spec = ProcessSpec(
            command=command,
            cwd=cwd,
            env=dict(env),
            timeout=settings.timeout or self.default_timeout,
        )
        return self.runner.run(spec, ref_changes, summary, cancel=cancel)


def missing_repository_dir(repository: Repository) -> HookResult:
    """Return the rejection used when the repository storage cannot be found."""

    LOGGER.error("Can't get repository directory for %s/%s", repository.project.key, repository.slug)
    return HookResult.rejected(REPOSITORY_DIR_SUMMARY, REPOSITORY_DIR_DETAIL)


__all__ = ["HookContext", "HookExecutor", "missing_repository_dir"]
