# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Wire the hooks, provisioning and stores to a host and a server configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import ConfiguredApplication, ConfiguredLicenseManager, ServerConfig
from .constants import POST_RECEIVE_COMPONENT, PRE_RECEIVE_COMPONENT
from .environment import HookEnvironmentBuilder
from .hooks import HookExecutor, MergeCheckHook, PostReceiveHook, PreReceiveHook
from .interfaces import (
    ApplicationProperties,
    AuthenticationContext,
    CommentService,
    HookScriptService,
    JobScheduler,
    KeyValueStore,
    LicenseManager,
    PermissionService,
    ProjectService,
    PullRequestCheckStore,
    PullRequestService,
    RepositoryHookService,
    RepositoryService,
)
from .license import LicenseGate
from .models import HookScriptType
from .provisioning import HookProvisioner, HookScriptInstaller, HooksCoordinator, ProvisioningSweep, ScopeWalker
from .resolver import ExecutableResolver, SettingsValidator
from .store import JsonFileCheckStore, JsonFileKeyValueStore

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HostServices:
    """Host collaborators the plugin talks to.

    ``application`` and ``license_manager`` fall back to implementations
    backed by :class:`~externhooks.config.ServerConfig` when omitted, and the
    stores fall back to JSON files in the configured state directory.
    """

    auth: AuthenticationContext
    permissions: PermissionService
    projects: ProjectService
    repositories: RepositoryService
    hooks: RepositoryHookService
    scripts: HookScriptService
    comments: CommentService
    pull_requests: PullRequestService
    scheduler: JobScheduler
    application: ApplicationProperties | None = None
    license_manager: LicenseManager | None = None
    key_values: KeyValueStore | None = None
    checks: PullRequestCheckStore | None = None


@dataclass(frozen=True, slots=True)
class ExternalHooksPlugin:
    """Assembled hook adapters and provisioning services."""

    pre_receive: PreReceiveHook
    post_receive: PostReceiveHook
    merge_check: MergeCheckHook
    coordinator: HooksCoordinator
    provisioner: HookProvisioner
    sweep: ProvisioningSweep
    validator: SettingsValidator

    def start(self) -> float:
        """Schedule the startup provisioning sweep and return its delay."""

        return self.sweep.start()


def build_plugin(config: ServerConfig, host: HostServices) -> ExternalHooksPlugin:
    """Build every externhooks service for ``host``.

    Args:
        config: Server configuration supplying defaults and the state directory.
        host: Host collaborators.

    Returns:
        ExternalHooksPlugin: Ready-to-use hooks and provisioning services.

    Raises:
        StoreError: When a persisted store in the state directory is unreadable.
    """

    application = host.application or ConfiguredApplication(config)
    license_gate = LicenseGate(host.license_manager or ConfiguredLicenseManager(config))
    resolver = ExecutableResolver(application)
    validator = SettingsValidator(
        license_gate=license_gate,
        application=application,
        permissions=host.permissions,
        auth=host.auth,
        resolver=resolver,
    )

    state_dir = config.effective_state_dir
    key_values = host.key_values or JsonFileKeyValueStore.in_directory(state_dir)
    checks = host.checks or JsonFileCheckStore.in_directory(state_dir)
    LOGGER.debug("Keeping externhooks state in %s", state_dir)

    executor = HookExecutor(
        license_gate=license_gate,
        application=application,
        environment=HookEnvironmentBuilder(
            auth=host.auth,
            permissions=host.permissions,
            repositories=host.repositories,
            application=application,
        ),
        resolver=resolver,
        default_timeout=config.default_timeout,
    )
    installers = [
        HookScriptInstaller(
            component=component,
            script_type=script_type,
            scripts=host.scripts,
            store=key_values,
            resolver=resolver,
            validator=validator,
        )
        for component, script_type in (
            (PRE_RECEIVE_COMPONENT, HookScriptType.PRE),
            (POST_RECEIVE_COMPONENT, HookScriptType.POST),
        )
    ]
    coordinator = HooksCoordinator(host.hooks, installers)
    provisioner = HookProvisioner(host.hooks, coordinator)
    sweep = ProvisioningSweep(
        scheduler=host.scheduler,
        provisioner=provisioner,
        walker=ScopeWalker(host.projects, host.repositories),
        clustered=application.clustered,
        jitter=config.sweep_jitter,
    )
    return ExternalHooksPlugin(
        pre_receive=PreReceiveHook(executor),
        post_receive=PostReceiveHook(executor),
        merge_check=MergeCheckHook(
            executor,
            checks=checks,
            comments=host.comments,
            pull_requests=host.pull_requests,
        ),
        coordinator=coordinator,
        provisioner=provisioner,
        sweep=sweep,
        validator=validator,
    )


__all__ = ["ExternalHooksPlugin", "HostServices", "build_plugin"]
