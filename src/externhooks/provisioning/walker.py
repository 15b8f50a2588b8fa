# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Enumerate project and repository scopes."""

from __future__ import annotations

from collections.abc import Iterator

from ..interfaces import ProjectService, RepositoryService
from ..models import Scope


class ScopeWalker:
    """Visit every project followed by its repositories."""

    def __init__(self, projects: ProjectService, repositories: RepositoryService) -> None:
        self._projects = projects
        self._repositories = repositories

    def walk(self) -> Iterator[Scope]:
        """Yield each project scope, then the scopes of the project's repositories."""

        for project in self._projects.find_all():
            yield Scope.for_project(project)
            for repository in self._repositories.find_by_project(project):
                yield Scope.for_repository(repository)


__all__ = ["ScopeWalker"]
