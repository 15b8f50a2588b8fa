# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Recreate hook scripts for every hook enabled at a scope."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..constants import PLUGIN_KEY
from ..interfaces import RepositoryHookService
from ..models import Scope
from .coordinator import HooksCoordinator
from .scope import belongs_to_plugin, is_inherited

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ProvisionOutcome:
    """Hook keys handled while provisioning a single scope."""

    scope: Scope
    installed: list[str] = field(default_factory=list)
    inherited: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class HookProvisioner:
    """Install scripts for the hooks enabled and configured at a scope."""

    def __init__(
        self,
        hooks: RepositoryHookService,
        coordinator: HooksCoordinator,
        *,
        plugin_key: str = PLUGIN_KEY,
    ) -> None:
        self._hooks = hooks
        self._coordinator = coordinator
        self._plugin_key = plugin_key

    def install(self, scope: Scope) -> ProvisionOutcome:
        """Recreate the scripts of every hook of this plugin configured at ``scope``.

        Hooks that are disabled, unconfigured or inherited from an ancestor
        scope are skipped. A failure while enabling one hook is logged and
        does not stop the others.

        Args:
            scope: Project, repository or global scope to provision.

        Returns:
            ProvisionOutcome: Installed, inherited and failed hook keys.
        """

        LOGGER.debug("Creating hook scripts on %s", scope)
        outcome = ProvisionOutcome(scope=scope)
        for hook in self._hooks.search(scope):
            if not belongs_to_plugin(hook, self._plugin_key):
                continue
            if not hook.enabled or not hook.configured:
                continue
            if is_inherited(hook, scope):
                LOGGER.info("Hook %s is enabled & configured (inherited of %s)", hook.key, hook.scope)
                outcome.inherited.append(hook.key)
                continue
            try:
                script = self._coordinator.enable(scope, hook.key)
            except Exception:  # noqa: BLE001
                LOGGER.exception("Unable to install hook script %s on %s", hook.key, scope)
                outcome.failed.append(hook.key)
                continue
            if script is not None:
                outcome.installed.append(hook.key)

        LOGGER.info("Created %d hook scripts on scope %s", len(outcome.installed), scope)
        return outcome


__all__ = ["HookProvisioner", "ProvisionOutcome"]
