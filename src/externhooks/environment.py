# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Environment variables exported to hook programs."""

from __future__ import annotations

import logging
from typing import Final, Literal

from .interfaces import ApplicationProperties, AuthenticationContext, PermissionService, RepositoryService
from .models import PullRequest, PullRequestRef, Repository

LOGGER = logging.getLogger(__name__)

REPO_ADMIN: Final[str] = "REPO_ADMIN"
REPO_WRITE: Final[str] = "REPO_WRITE"

CloneProtocol = Literal["ssh", "http"]


def _flag(value: bool) -> str:
    return "true" if value else "false"


class HookEnvironmentBuilder:
    """Assemble the variables describing a push or a pull request merge."""

    def __init__(
        self,
        *,
        auth: AuthenticationContext,
        permissions: PermissionService,
        repositories: RepositoryService,
        application: ApplicationProperties,
    ) -> None:
        self._auth = auth
        self._permissions = permissions
        self._repositories = repositories
        self._application = application

    def pre_receive(self, repository: Repository) -> dict[str, str]:
        """Return the ``STASH_*`` variables for a push into ``repository``.

        ``STASH_USER_EMAIL`` is left out when the user has no address, and
        one ``STASH_REPO_CLONE_<NAME>`` variable is exported per clone link.

        Args:
            repository: Repository receiving the push.

        Returns:
            dict[str, str]: Variables layered over the server environment.
        """

        user = self._auth.current_user()
        env: dict[str, str] = {"STASH_USER_NAME": user.name}
        if user.email is not None:
            env["STASH_USER_EMAIL"] = user.email
        else:
            LOGGER.error("Can't get user email address for %s", user.name)
        env["STASH_REPO_NAME"] = repository.name

        permissions = self._permissions
        env["STASH_IS_ADMIN"] = _flag(permissions.has_repository_permission(user, repository, REPO_ADMIN))
        env["STASH_IS_WRITE"] = _flag(permissions.has_repository_permission(user, repository, REPO_WRITE))
        env["STASH_IS_DIRECT_ADMIN"] = _flag(
            permissions.has_direct_repository_permission(user, repository, REPO_ADMIN)
        )
        env["STASH_IS_DIRECT_WRITE"] = _flag(
            permissions.has_direct_repository_permission(user, repository, REPO_WRITE)
        )
        env["STASH_REPO_IS_FORK"] = _flag(repository.is_fork)

        for link in self._repositories.clone_links(repository):
            env[f"STASH_REPO_CLONE_{link.name.upper()}"] = link.href

        env["STASH_BASE_URL"] = self._application.base_url
        env["STASH_PROJECT_NAME"] = repository.project.name
        env["STASH_PROJECT_KEY"] = repository.project.key
        return env

    def merge_check(self, pull_request: PullRequest) -> dict[str, str]:
        """Return the push variables of the target plus ``PULL_REQUEST_*`` variables.

        Args:
            pull_request: Pull request being merged.

        Returns:
            dict[str, str]: Variables layered over the server environment.
        """

        env = self.pre_receive(pull_request.to_ref.repository)
        env.update(self._ref_variables("FROM", pull_request.from_ref))
        env.update(self._ref_variables("TO", pull_request.to_ref))

        author = pull_request.author
        env["PULL_REQUEST_URL"] = self.pull_request_url(pull_request)
        env["PULL_REQUEST_ID"] = str(pull_request.id)
        env["PULL_REQUEST_VERSION"] = str(pull_request.version)
        env["PULL_REQUEST_AUTHOR_ID"] = str(author.id)
        env["PULL_REQUEST_AUTHOR_DISPLAY_NAME"] = author.display_name
        env["PULL_REQUEST_AUTHOR_NAME"] = author.name
        if author.email is not None:
            env["PULL_REQUEST_AUTHOR_EMAIL"] = author.email
        env["PULL_REQUEST_AUTHOR_SLUG"] = author.slug
        env["PULL_REQUEST_TITLE"] = pull_request.title
        return env

    def pull_request_url(self, pull_request: PullRequest) -> str:
        """Return the browser URL of ``pull_request``."""

        repository = pull_request.to_ref.repository
        return (
            f"{self._application.base_url}/projects/{repository.project.key}"
            f"/repos/{repository.slug}/pull-requests/{pull_request.id}"
        )

    def _ref_variables(self, side: str, ref: PullRequestRef) -> dict[str, str]:
        repository = ref.repository
        prefix = f"PULL_REQUEST_{side}_"
        return {
            f"{prefix}HASH": ref.latest_commit,
            f"{prefix}ID": ref.id,
            f"{prefix}BRANCH": ref.display_id,
            f"{prefix}REPO_ID": str(repository.id),
            f"{prefix}REPO_NAME": repository.name,
            f"{prefix}REPO_PROJECT_ID": str(repository.project.id),
            f"{prefix}REPO_PROJECT_KEY": repository.project.key,
            f"{prefix}REPO_SLUG": repository.slug,
            f"{prefix}SSH_CLONE_URL": self._clone_url(repository, "ssh"),
            f"{prefix}HTTP_CLONE_URL": self._clone_url(repository, "http"),
        }

    def _clone_url(self, repository: Repository, protocol: CloneProtocol) -> str:
        links = self._repositories.clone_links(repository, protocol)
        return links[0].href if links else ""


__all__ = ["HookEnvironmentBuilder", "REPO_ADMIN", "REPO_WRITE"]
