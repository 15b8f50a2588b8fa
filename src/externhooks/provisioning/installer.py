# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Materialise hook settings as host hook scripts.

Every (hook family, scope) pair owns at most one live script. The id of that
script is remembered in a key-value store under
``<hook key>:<scope type>[:<resource id>]`` so a later install replaces the
script instead of adding a second one.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..config import ConfigError, HookSettings
from ..constants import PLUGIN_KEY, PUSH_TRIGGERS
from ..interfaces import HookScriptService, KeyValueStore
from ..models import HookScript, HookScriptCreateRequest, HookScriptType, Scope
from ..resolver import ExecutableResolver, SettingsValidationErrors, SettingsValidator
from ..templating import ScriptTemplater

LOGGER = logging.getLogger(__name__)


class HookScriptInstaller:
    """Install, replace and remove the hook script of one hook family."""

    def __init__(
        self,
        *,
        component: str,
        script_type: HookScriptType,
        scripts: HookScriptService,
        store: KeyValueStore,
        resolver: ExecutableResolver,
        validator: SettingsValidator | None = None,
        templater: ScriptTemplater | None = None,
        triggers: Sequence[str] = PUSH_TRIGGERS,
    ) -> None:
        self.component = component
        self.script_type = script_type
        self.triggers = tuple(triggers)
        self._scripts = scripts
        self._store = store
        self._resolver = resolver
        self._validator = validator
        self._templater = templater or ScriptTemplater()

    @property
    def hook_key(self) -> str:
        """Return the fully qualified key of the hook family."""

        return f"{PLUGIN_KEY}:{self.component}"

    def script_key(self, scope: Scope) -> str:
        """Return the store key remembering the script installed at ``scope``."""

        return f"{self.hook_key}:{scope.key_suffix()}"

    def validate(self, settings: HookSettings, errors: SettingsValidationErrors, scope: Scope) -> None:
        """Validate ``settings`` before they are saved at ``scope``."""

        if self._validator is None:
            raise ConfigError(f"No settings validator configured for {self.hook_key}")
        self._validator.validate(settings, errors, scope)

    def render(self, settings: HookSettings) -> str:
        """Return the wrapper script invoking the executable named by ``settings``.

        Raises:
            ConfigError: When the executable cannot be resolved.
        """

        executable = self._resolver.resolve(settings.exe, settings.safe_path) if settings.exe else None
        if executable is None:
            raise ConfigError(f"Unable to resolve executable {settings.exe!r} for {self.hook_key}")
        return self._templater.render(executable, settings.arguments(), settings.run_async)

    def find(self, scope: Scope) -> HookScript | None:
        """Return the live script recorded for ``scope``.

        A recorded id whose script no longer exists upstream is forgotten.

        Args:
            scope: Scope whose script is wanted.

        Returns:
            HookScript | None: The script, or ``None`` when none is recorded or alive.
        """

        key = self.script_key(scope)
        stored = self._store.get(key)
        if stored is None:
            return None
        try:
            script = self._scripts.find_by_id(int(stored))
        except ValueError:
            script = None
        if script is None:
            LOGGER.warning("Settings had id %s stored, but hook script was already gone", stored)
            self._store.remove(key)
        return script

    def install(self, settings: HookSettings, scope: Scope) -> HookScript:
        """Replace the script at ``scope`` with one rendered from ``settings``.

        Args:
            settings: Hook settings stored at ``scope``.
            scope: Scope the script is attached to.

        Returns:
            HookScript: The newly created script.

        Raises:
            ConfigError: When the executable cannot be resolved.
        """

        content = self.render(settings)

        previous = self.find(scope)
        if previous is not None:
            self._scripts.delete(previous)

        script = self._scripts.create(
            HookScriptCreateRequest(
                name=self.component,
                plugin_key=PLUGIN_KEY,
                type=self.script_type,
                content=content,
            )
        )
        self._store.put(self.script_key(scope), str(script.id))
        self._scripts.set_configuration(script, scope, self.triggers)
        LOGGER.info("Created hook script with id: %d; triggers: [%s]", script.id, ", ".join(self.triggers))
        return script

    def uninstall(self, hook_key: str, scope: Scope) -> bool:
        """Delete the script installed for ``hook_key`` at ``scope``.

        Args:
            hook_key: Key of the hook being disabled; other families are ignored.
            scope: Scope the hook is disabled at.

        Returns:
            bool: ``True`` when a live script was deleted.
        """

        if hook_key != self.hook_key:
            return False
        key = self.script_key(scope)
        stored = self._store.get(key)
        if stored is None:
            return False
        script = self.find(scope)
        self._store.remove(key)
        if script is None:
            return False
        self._scripts.delete(script)
        LOGGER.info("Deleted hook script with id: %d", script.id)
        return True

    def mask(self, scope: Scope) -> HookScript | None:
        """Silence a script inherited by ``scope`` from an ancestor.

        The nearest ancestor script is attached to ``scope`` with no triggers,
        so it no longer fires there.

        Returns:
            HookScript | None: The masked script, or ``None`` when no ancestor provides one.
        """

        for ancestor in scope.ancestors():
            script = self.find(ancestor)
            if script is not None:
                self._scripts.set_configuration(script, scope, ())
                LOGGER.info("Masked hook script %d inherited from %s at %s", script.id, ancestor, scope)
                return script
        return None


__all__ = ["HookScriptInstaller"]
