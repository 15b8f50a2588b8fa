# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Executable resolution, safe-mode sandboxing and settings validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from .config import HookSettings
from .constants import SAFE_DIR_NAME, SETTING_EXE
from .interfaces import ApplicationProperties, AuthenticationContext, PermissionService
from .license import LicenseGate
from .models import Scope

LOGGER = logging.getLogger(__name__)

UNLICENSED_MESSAGE = "External Hooks Add-on is Unlicensed."
EXPIRED_MESSAGE = "License for External Hooks is expired."
CLUSTER_SAFE_MODE_MESSAGE = 'Bitbucket is running in DataCenter mode. You must use "safe mode" option.'
SYSADMIN_MESSAGE = (
    'You should be a Bitbucket System Administrator to edit this field without "safe mode" option.'
)
BLANK_MESSAGE = "Executable is blank, please specify something"
UNRESOLVED_MESSAGE = "Specified path for executable can not be resolved."
MISSING_MESSAGE = "Executable does not exist"
NOT_EXECUTABLE_MESSAGE = "Specified path is not executable file. Check executable flag."


def normalize_relative(path: str) -> PurePosixPath | None:
    """Collapse ``.`` and ``..`` segments of ``path`` lexically.

    Leading separators are dropped so the result is always relative.

    Args:
        path: Path as typed by the administrator.

    Returns:
        PurePosixPath | None: Normalised relative path, or ``None`` when a
        ``..`` segment would climb above the starting directory.
    """

    parts: list[str] = []
    for segment in path.replace("\\", "/").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if not parts:
                return None
            parts.pop()
            continue
        parts.append(segment)
    return PurePosixPath(*parts)


class ExecutableResolver:
    """Map configured executable paths onto files on disk."""

    def __init__(self, application: ApplicationProperties) -> None:
        self._application = application

    @property
    def safe_dir(self) -> Path:
        """Return the sandbox used when safe mode is enabled."""

        home = self._application.shared_home_dir if self._application.clustered else self._application.home_dir
        return Path(os.path.abspath(home)) / SAFE_DIR_NAME

    def resolve(self, path: str, safe_mode: bool) -> Path | None:
        """Return the file ``path`` designates.

        Args:
            path: Configured executable path.
            safe_mode: Confine resolution to :attr:`safe_dir` when ``True``.

        Returns:
            Path | None: ``path`` verbatim outside safe mode; inside safe mode
            the normalised path anchored under the sandbox, or ``None`` when it
            cannot be normalised.
        """

        if not safe_mode:
            return Path(path)
        relative = normalize_relative(path)
        if relative is None:
            LOGGER.debug("Safe-mode path %r escapes the sandbox", path)
            return None
        return self.safe_dir.joinpath(*relative.parts)


@dataclass(slots=True)
class SettingsValidationErrors:
    """Field-level validation failures reported back to the settings form."""

    field_errors: dict[str, list[str]] = field(default_factory=dict)

    def add_field_error(self, field_name: str, message: str) -> None:
        """Record ``message`` against ``field_name``."""

        self.field_errors.setdefault(field_name, []).append(message)

    @property
    def has_errors(self) -> bool:
        """Return ``True`` when any error was recorded."""

        return bool(self.field_errors)

    def messages(self) -> list[str]:
        """Return every recorded message in insertion order."""

        return [message for messages in self.field_errors.values() for message in messages]


class SettingsValidator:
    """Validate hook settings before the host activates them."""

    def __init__(
        self,
        *,
        license_gate: LicenseGate,
        application: ApplicationProperties,
        permissions: PermissionService,
        auth: AuthenticationContext,
        resolver: ExecutableResolver | None = None,
    ) -> None:
        self._license = license_gate
        self._application = application
        self._permissions = permissions
        self._auth = auth
        self._resolver = resolver or ExecutableResolver(application)

    def validate(self, settings: HookSettings, errors: SettingsValidationErrors, scope: Scope) -> None:
        """Record the first problem found in ``settings`` on ``errors``.

        Checks run in a fixed order and stop at the first failure: license
        presence, license validity, cluster safe-mode requirement, system
        administrator requirement outside safe mode, blank executable,
        resolution, existence, executable bit.

        Args:
            settings: Settings submitted for the hook.
            errors: Collector receiving field errors.
            scope: Scope the settings are saved at.
        """

        message = self._first_failure(settings)
        if message is not None:
            LOGGER.info("Rejected settings for %s: %s", scope, message)
            errors.add_field_error(SETTING_EXE, message)

    def _first_failure(self, settings: HookSettings) -> str | None:
        if not self._license.is_defined():
            return UNLICENSED_MESSAGE
        if not self._license.is_valid():
            return EXPIRED_MESSAGE
        if self._application.clustered and not settings.safe_path:
            return CLUSTER_SAFE_MODE_MESSAGE
        if not settings.safe_path and not self._permissions.is_system_admin(self._auth.current_user()):
            return SYSADMIN_MESSAGE
        if not settings.exe:
            return BLANK_MESSAGE

        executable = self._resolver.resolve(settings.exe, settings.safe_path)
        if executable is None:
            return UNRESOLVED_MESSAGE
        if not executable.is_file():
            return MISSING_MESSAGE
        try:
            executable_bit = os.access(executable, os.X_OK)
        except OSError:
            LOGGER.exception("Unable to inspect %s", executable)
            executable_bit = False
        if not executable_bit:
            return NOT_EXECUTABLE_MESSAGE

        LOGGER.info("Setting executable %s", executable)
        return None


__all__ = [
    "BLANK_MESSAGE",
    "CLUSTER_SAFE_MODE_MESSAGE",
    "EXPIRED_MESSAGE",
    "ExecutableResolver",
    "MISSING_MESSAGE",
    "NOT_EXECUTABLE_MESSAGE",
    "SYSADMIN_MESSAGE",
    "SettingsValidationErrors",
    "SettingsValidator",
    "UNLICENSED_MESSAGE",
    "UNRESOLVED_MESSAGE",
    "normalize_relative",
]
