# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Route hook enable/disable events to the installer of each hook family."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..config import HookSettings
from ..interfaces import RepositoryHookService
from ..models import HookScript, Scope, ScopeType
from .installer import HookScriptInstaller

LOGGER = logging.getLogger(__name__)


class HooksCoordinator:
    """Keep host hook scripts in step with hook settings."""

    def __init__(self, hooks: RepositoryHookService, installers: Iterable[HookScriptInstaller]) -> None:
        self._hooks = hooks
        self._installers = {installer.hook_key: installer for installer in installers}

    @property
    def hook_keys(self) -> tuple[str, ...]:
        """Return the keys of the script-backed hook families."""

        return tuple(self._installers)

    def installer_for(self, hook_key: str) -> HookScriptInstaller | None:
        """Return the installer responsible for ``hook_key``."""

        return self._installers.get(hook_key)

    def enable(self, scope: Scope, hook_key: str) -> HookScript | None:
        """Install the script for ``hook_key`` from the settings stored at ``scope``.

        Args:
            scope: Scope the hook was enabled at.
            hook_key: Key of the hook family.

        Returns:
            HookScript | None: The installed script, or ``None`` for hook
            families that run in-process.

        Raises:
            ConfigError: When the stored settings are invalid.
        """

        installer = self.installer_for(hook_key)
        if installer is None:
            LOGGER.debug("%s is not backed by a hook script", hook_key)
            return None
        settings = HookSettings.from_settings(self._hooks.get_settings(scope, hook_key))
        return installer.install(settings, scope)

    def disable(self, scope: Scope, hook_key: str) -> None:
        """Remove the script for ``hook_key`` at ``scope``.

        Below the global scope an ancestor may still provide a script for the
        same family; it is masked so the hook stays off at ``scope``.
        """

        installer = self.installer_for(hook_key)
        if installer is None:
            return
        installer.uninstall(hook_key, scope)
        if scope.type is not ScopeType.GLOBAL:
            installer.mask(scope)


__all__ = ["HooksCoordinator"]
