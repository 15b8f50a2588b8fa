# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-memory stand-ins for the host services externhooks talks to."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from externhooks.environment import HookEnvironmentBuilder
from externhooks.hooks import HookExecutor
from externhooks.license import LicenseGate
from externhooks.models import (
    HookScript,
    HookScriptCreateRequest,
    NamedLink,
    Project,
    PullRequest,
    PullRequestRef,
    Repository,
    RepositoryHook,
    Scope,
    User,
)

PROJECT = Project(id=1, key="PRJ", name="Project")
REPOSITORY = Repository(id=11, slug="repo", name="Repo", project=PROJECT)
USER = User(id=7, name="alice", slug="alice", display_name="Alice Liddell", email="alice@example.com")


def make_repository(repo_id: int, project: Project = PROJECT, *, slug: str | None = None) -> Repository:
    slug = slug or f"repo-{repo_id}"
    return Repository(id=repo_id, slug=slug, name=slug.title(), project=project)


def make_pull_request(
    *,
    pr_id: int = 5,
    version: int = 0,
    source: Repository = REPOSITORY,
    target: Repository = REPOSITORY,
    author: User = USER,
) -> PullRequest:
    return PullRequest(
        id=pr_id,
        version=version,
        title="Add feature",
        from_ref=PullRequestRef(
            id="refs/heads/feature",
            display_id="feature",
            latest_commit="b" * 40,
            repository=source,
        ),
        to_ref=PullRequestRef(
            id="refs/heads/master",
            display_id="master",
            latest_commit="a" * 40,
            repository=target,
        ),
        author=author,
    )


@dataclass
class FakeAuth:
    user: User = USER

    def current_user(self) -> User:
        return self.user


@dataclass
class FakePermissions:
    admin: bool = False
    repo_admin: bool = False
    repo_write: bool = False
    direct_admin: bool = False
    direct_write: bool = False

    def is_system_admin(self, user: User) -> bool:
        return self.admin

    def has_repository_permission(self, user: User, repository: Repository, permission: str) -> bool:
        return self.repo_admin if permission == "REPO_ADMIN" else self.repo_write

    def has_direct_repository_permission(self, user: User, repository: Repository, permission: str) -> bool:
        return self.direct_admin if permission == "REPO_ADMIN" else self.direct_write


@dataclass
class FakeProjects:
    projects: list[Project] = field(default_factory=list)

    def find_all(self) -> list[Project]:
        return list(self.projects)


@dataclass
class FakeRepositories:
    by_project: dict[int, list[Repository]] = field(default_factory=dict)
    links: dict[int, list[NamedLink]] = field(default_factory=dict)

    def find_by_project(self, project: Project) -> list[Repository]:
        return list(self.by_project.get(project.id, []))

    def clone_links(self, repository: Repository, protocol: str | None = None) -> list[NamedLink]:
        links = self.links.get(repository.id, [])
        if protocol is None:
            return list(links)
        return [link for link in links if link.name == protocol]


@dataclass
class FakeApplication:
    home_dir: Path
    shared_home_dir: Path
    clustered: bool = False
    base_url: str = "https://bitbucket.example.com"
    repo_dirs: dict[int, Path] = field(default_factory=dict)

    def repository_dir(self, repository: Repository) -> Path | None:
        return self.repo_dirs.get(repository.id)


@dataclass
class FakeLicense:
    valid: bool = True

    def is_valid(self) -> bool:
        return self.valid


@dataclass
class FakeLicenseManager:
    license: FakeLicense | None = None

    def get_license(self) -> FakeLicense | None:
        return self.license


@dataclass
class FakeRepositoryHooks:
    entries: dict[Scope, list[RepositoryHook]] = field(default_factory=dict)
    settings: dict[tuple[Scope, str], Mapping[str, object]] = field(default_factory=dict)

    def search(self, scope: Scope) -> list[RepositoryHook]:
        return list(self.entries.get(scope, []))

    def get_settings(self, scope: Scope, hook_key: str) -> Mapping[str, object] | None:
        return self.settings.get((scope, hook_key))


@dataclass
class FakeHookScripts:
    scripts: dict[int, HookScript] = field(default_factory=dict)
    configurations: dict[tuple[int, Scope], tuple[str, ...]] = field(default_factory=dict)
    deleted: list[int] = field(default_factory=list)
    next_id: int = 100

    def find_by_id(self, script_id: int) -> HookScript | None:
        return self.scripts.get(script_id)

    def create(self, request: HookScriptCreateRequest) -> HookScript:
        script = HookScript(id=self.next_id, **request.model_dump())
        self.next_id += 1
        self.scripts[script.id] = script
        return script

    def delete(self, script: HookScript) -> None:
        self.scripts.pop(script.id)
        self.deleted.append(script.id)
        for key in [key for key in self.configurations if key[0] == script.id]:
            del self.configurations[key]

    def set_configuration(self, script: HookScript, scope: Scope, triggers: Sequence[str]) -> None:
        self.configurations[(script.id, scope)] = tuple(triggers)


@dataclass
class FakeComments:
    comments: list[tuple[int, str]] = field(default_factory=list)

    def add_comment(self, pull_request: PullRequest, text: str) -> None:
        self.comments.append((pull_request.id, text))


@dataclass
class FakePullRequests:
    declined: list[tuple[int, int]] = field(default_factory=list)

    def decline(self, pull_request: PullRequest, version: int) -> None:
        self.declined.append((pull_request.id, version))


@dataclass
class FakeScheduler:
    runners: dict[str, Callable[[], object]] = field(default_factory=dict)
    scheduled: list[tuple[str, str, float]] = field(default_factory=list)
    unscheduled: list[str] = field(default_factory=list)

    def register_job_runner(self, runner_key: str, runner: Callable[[], object]) -> None:
        self.runners[runner_key] = runner

    def schedule_once(self, job_id: str, runner_key: str, delay: float) -> None:
        self.scheduled.append((job_id, runner_key, delay))

    def unschedule(self, job_id: str) -> None:
        self.unscheduled.append(job_id)

    def fire(self) -> object:
        _, runner_key, _ = self.scheduled[-1]
        return self.runners[runner_key]()


def build_executor(
    application: FakeApplication,
    *,
    license_entity: FakeLicense | None = None,
    permissions: FakePermissions | None = None,
    repositories: FakeRepositories | None = None,
    user: User = USER,
    default_timeout: float | None = None,
) -> HookExecutor:
    environment = HookEnvironmentBuilder(
        auth=FakeAuth(user),
        permissions=permissions or FakePermissions(),
        repositories=repositories or FakeRepositories(),
        application=application,
    )
    return HookExecutor(
        license_gate=LicenseGate(FakeLicenseManager(license_entity)),
        application=application,
        environment=environment,
        default_timeout=default_timeout,
    )
