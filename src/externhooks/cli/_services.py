# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helper services used by the externhooks CLI commands."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..config import (
    ConfigError,
    ConfiguredApplication,
    ConfiguredLicenseManager,
    HookSettings,
    ServerConfig,
    load_server_config,
)
from ..license import LicenseGate
from ..models import HookResult, ProcessSpec, RefChange, Repository, Scope, User
from ..resolver import ExecutableResolver, SettingsValidationErrors, SettingsValidator
from ..runner import HookRunner
from ..templating import ScriptTemplater
from ._models import HookCommandOptions, RunOptions
from .shared import CLIError

USAGE_EXIT_CODE = 2


def load_config(path: Path | None) -> ServerConfig:
    """Return the server configuration, converting errors for the CLI.

    Raises:
        CLIError: When the configuration file is malformed.
    """

    try:
        return load_server_config(path)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=USAGE_EXIT_CODE) from exc


def read_ref_changes(lines: Iterable[str]) -> list[RefChange]:
    """Parse ``<from> <to> <ref>`` lines, ignoring blank ones.

    Raises:
        CLIError: When a line is malformed.
    """

    changes: list[RefChange] = []
    for line in lines:
        if not line.strip():
            continue
        try:
            changes.append(RefChange.parse_line(line))
        except ValueError as exc:
            raise CLIError(str(exc), exit_code=USAGE_EXIT_CODE) from exc
    return changes


def build_settings(options: HookCommandOptions, **extra: object) -> HookSettings:
    """Return hook settings described by CLI options.

    Raises:
        CLIError: When the options do not form valid settings.
    """

    try:
        return HookSettings.from_settings(options.settings_mapping(**extra))
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=USAGE_EXIT_CODE) from exc


def resolve_executable(path: str, *, safe_mode: bool, config: ServerConfig) -> Path:
    """Resolve ``path`` the way the hooks will.

    Raises:
        CLIError: When the path cannot be resolved.
    """

    if not path:
        raise CLIError("Executable is blank", exit_code=USAGE_EXIT_CODE)
    resolved = ExecutableResolver(ConfiguredApplication(config)).resolve(path, safe_mode)
    if resolved is None:
        raise CLIError(f"Unable to resolve {path!r} inside the sandbox")
    return resolved


def run_hook(options: RunOptions, ref_changes: Iterable[RefChange], config: ServerConfig) -> HookResult:
    """Run the executable named by ``options`` with the ref-change protocol."""

    settings = build_settings(options.hook, timeout=options.timeout)
    executable = resolve_executable(settings.exe, safe_mode=settings.safe_path, config=config)
    spec = ProcessSpec(
        command=(str(executable), *settings.arguments()),
        cwd=options.cwd,
        timeout=settings.timeout or config.default_timeout,
    )
    return HookRunner().run(spec, ref_changes, options.summary)


def render_script(options: HookCommandOptions, *, run_async: bool, config: ServerConfig) -> str:
    """Return the hook script generated for ``options``."""

    settings = build_settings(options, **{"async": run_async})
    executable = resolve_executable(settings.exe, safe_mode=settings.safe_path, config=config)
    return ScriptTemplater().render(executable, settings.arguments(), settings.run_async)


@dataclass(frozen=True, slots=True)
class LocalAuthentication:
    """Authentication context for the user running the CLI."""

    user: User = field(default_factory=lambda: User(id=0, name="externhooks", slug="externhooks"))

    def current_user(self) -> User:
        return self.user


@dataclass(frozen=True, slots=True)
class StaticPermissions:
    """Permission service granting a fixed answer to every question."""

    admin: bool

    def is_system_admin(self, user: User) -> bool:
        return self.admin

    def has_repository_permission(self, user: User, repository: Repository, permission: str) -> bool:
        return self.admin

    def has_direct_repository_permission(self, user: User, repository: Repository, permission: str) -> bool:
        return self.admin


def validate_settings(options: HookCommandOptions, *, admin: bool, config: ServerConfig) -> list[str]:
    """Run the settings validation chain and return its messages."""

    application = ConfiguredApplication(config)
    validator = SettingsValidator(
        license_gate=LicenseGate(ConfiguredLicenseManager(config)),
        application=application,
        permissions=StaticPermissions(admin=admin),
        auth=LocalAuthentication(),
    )
    errors = SettingsValidationErrors()
    validator.validate(build_settings(options), errors, Scope.global_scope())
    return errors.messages()


__all__ = [
    "LocalAuthentication",
    "StaticPermissions",
    "USAGE_EXIT_CODE",
    "build_settings",
    "load_config",
    "read_ref_changes",
    "render_script",
    "resolve_executable",
    "run_hook",
    "validate_settings",
]
