# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Hook script provisioning across the project and repository hierarchy."""

from __future__ import annotations

from .coordinator import HooksCoordinator
from .installer import HookScriptInstaller
from .provisioner import HookProvisioner, ProvisionOutcome
from .scope import belongs_to_plugin, is_inherited
from .sweep import ProvisioningSweep, SweepReport
from .walker import ScopeWalker

__all__ = [
    "HookProvisioner",
    "HookScriptInstaller",
    "HooksCoordinator",
    "ProvisionOutcome",
    "ProvisioningSweep",
    "ScopeWalker",
    "SweepReport",
    "belongs_to_plugin",
    "is_inherited",
]
