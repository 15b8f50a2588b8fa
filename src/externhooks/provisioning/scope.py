# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Scope inheritance helpers used while provisioning."""

from __future__ import annotations

from ..constants import PLUGIN_KEY
from ..models import RepositoryHook, Scope


def is_inherited(hook: RepositoryHook, scope: Scope) -> bool:
    """Return ``True`` when ``hook`` at ``scope`` is provided by an ancestor scope."""

    return hook.scope != scope and hook.scope.is_ancestor_of(scope)


def belongs_to_plugin(hook: RepositoryHook, plugin_key: str = PLUGIN_KEY) -> bool:
    """Return ``True`` when ``hook`` is one of the families shipped by ``plugin_key``."""

    return hook.key.startswith(plugin_key)


__all__ = ["belongs_to_plugin", "is_inherited"]
