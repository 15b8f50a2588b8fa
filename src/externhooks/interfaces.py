# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Protocols describing the host services externhooks collaborates with."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from .models import (
    HookScript,
    HookScriptCreateRequest,
    NamedLink,
    Project,
    PullRequest,
    PullRequestCheck,
    Repository,
    RepositoryHook,
    Scope,
    User,
)


@runtime_checkable
class AuthenticationContext(Protocol):
    """Expose the user driving the current request."""

    @abstractmethod
    def current_user(self) -> User:
        """Return the authenticated user."""


@runtime_checkable
class PermissionService(Protocol):
    """Answer permission questions for users and repositories."""

    @abstractmethod
    def is_system_admin(self, user: User) -> bool:
        """Return ``True`` when ``user`` holds the system administrator permission."""

    @abstractmethod
    def has_repository_permission(self, user: User, repository: Repository, permission: str) -> bool:
        """Return ``True`` when ``user`` holds ``permission`` on ``repository``.

        Args:
            user: User being checked.
            repository: Repository the permission applies to.
            permission: Either ``"REPO_ADMIN"`` or ``"REPO_WRITE"``.
        """

    @abstractmethod
    def has_direct_repository_permission(self, user: User, repository: Repository, permission: str) -> bool:
        """Return ``True`` when ``permission`` is granted directly, not through groups or projects."""


class ProjectService(Protocol):
    """Enumerate projects known to the host."""

    @abstractmethod
    def find_all(self) -> Iterable[Project]:
        """Return every project in a stable order."""


class RepositoryService(Protocol):
    """Enumerate repositories and their clone links."""

    @abstractmethod
    def find_by_project(self, project: Project) -> Iterable[Repository]:
        """Return every repository of ``project`` in a stable order."""

    @abstractmethod
    def clone_links(self, repository: Repository, protocol: str | None = None) -> Sequence[NamedLink]:
        """Return the clone links of ``repository``, optionally filtered by protocol."""


class ApplicationProperties(Protocol):
    """Expose server-wide locations."""

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Return the externally visible base URL."""

    @property
    @abstractmethod
    def home_dir(self) -> Path:
        """Return the node-local home directory."""

    @property
    @abstractmethod
    def shared_home_dir(self) -> Path:
        """Return the home directory shared by every cluster node."""

    @property
    @abstractmethod
    def clustered(self) -> bool:
        """Return ``True`` when the server runs as a multi-node cluster."""

    @abstractmethod
    def repository_dir(self, repository: Repository) -> Path | None:
        """Return the on-disk storage path of ``repository`` when it can be located."""


@runtime_checkable
class License(Protocol):
    """License entity installed for the plugin."""

    @abstractmethod
    def is_valid(self) -> bool:
        """Return ``True`` while the license is in force."""


class LicenseManager(Protocol):
    """Look up the plugin license."""

    @abstractmethod
    def get_license(self) -> License | None:
        """Return the installed license, or ``None`` when none is defined."""


class RepositoryHookService(Protocol):
    """Search hook configurations attached to a scope."""

    @abstractmethod
    def search(self, scope: Scope) -> Sequence[RepositoryHook]:
        """Return hook entries visible at ``scope`` with their effective scope."""

    @abstractmethod
    def get_settings(self, scope: Scope, hook_key: str) -> Mapping[str, object] | None:
        """Return the raw settings stored for ``hook_key`` at ``scope``."""


class HookScriptService(Protocol):
    """Create, find and delete upstream hook scripts."""

    @abstractmethod
    def find_by_id(self, script_id: int) -> HookScript | None:
        """Return the script with ``script_id`` or ``None`` when it is gone."""

    @abstractmethod
    def create(self, request: HookScriptCreateRequest) -> HookScript:
        """Create a script and return it with its assigned id."""

    @abstractmethod
    def delete(self, script: HookScript) -> None:
        """Delete ``script`` and every configuration attached to it."""

    @abstractmethod
    def set_configuration(self, script: HookScript, scope: Scope, triggers: Sequence[str]) -> None:
        """Attach ``script`` to ``scope`` firing on ``triggers``."""


class CommentService(Protocol):
    """Post comments on pull requests."""

    @abstractmethod
    def add_comment(self, pull_request: PullRequest, text: str) -> None:
        """Add a top-level comment with ``text``."""


class PullRequestService(Protocol):
    """Mutate pull request state."""

    @abstractmethod
    def decline(self, pull_request: PullRequest, version: int) -> None:
        """Decline ``pull_request`` provided it is still at ``version``."""


class JobScheduler(Protocol):
    """Cluster-aware scheduler running jobs once per cluster."""

    @abstractmethod
    def register_job_runner(self, runner_key: str, runner: Callable[[], object]) -> None:
        """Register ``runner`` under ``runner_key``."""

    @abstractmethod
    def schedule_once(self, job_id: str, runner_key: str, delay: float) -> None:
        """Run the registered runner once, ``delay`` seconds from now, on a single node."""

    @abstractmethod
    def unschedule(self, job_id: str) -> None:
        """Remove ``job_id`` from the schedule."""


@runtime_checkable
class KeyValueStore(Protocol):
    """Process-wide keyed storage for plugin bookkeeping."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``."""

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Forget ``key``; a missing key is not an error."""


@runtime_checkable
class PullRequestCheckStore(Protocol):
    """Persistence for :class:`PullRequestCheck` records."""

    @abstractmethod
    def find(self, project_id: int, repository_id: int, pull_request_id: int) -> Sequence[PullRequestCheck]:
        """Return every record stored for the pull request."""

    @abstractmethod
    def create(self, check: PullRequestCheck) -> PullRequestCheck:
        """Persist a new record and return it."""

    @abstractmethod
    def save(self, check: PullRequestCheck) -> None:
        """Persist changes made to an existing record."""


__all__ = [
    "ApplicationProperties",
    "AuthenticationContext",
    "CommentService",
    "HookScriptService",
    "JobScheduler",
    "KeyValueStore",
    "License",
    "LicenseManager",
    "PermissionService",
    "ProjectService",
    "PullRequestCheckStore",
    "PullRequestService",
    "RepositoryHookService",
    "RepositoryService",
]
