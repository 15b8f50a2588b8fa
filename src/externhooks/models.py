# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the externhooks package."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScopeType(str, Enum):
    """Enumerate the configuration granularities understood by the host."""

    GLOBAL = "global"
    PROJECT = "project"
    REPOSITORY = "repository"


class Project(BaseModel):
    """Host project owning a set of repositories."""

    model_config = ConfigDict(frozen=True)

    id: int
    key: str
    name: str


class Repository(BaseModel):
    """Host repository together with its owning project."""

    model_config = ConfigDict(frozen=True)

    id: int
    slug: str
    name: str
    project: Project
    is_fork: bool = False


class User(BaseModel):
    """Host user account."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    slug: str
    display_name: str = ""
    email: str | None = None


class NamedLink(BaseModel):
    """Clone link advertised by the host for a repository."""

    model_config = ConfigDict(frozen=True)

    name: str
    href: str


class Scope(BaseModel):
    """Configuration scope forming the chain repository -> project -> global."""

    model_config = ConfigDict(frozen=True)

    type: ScopeType
    resource_id: int | None = None
    project_id: int | None = None

    @model_validator(mode="after")
    def _check_identity(self) -> Scope:
        """Ensure each scope type carries the identifiers it needs.

        Returns:
            Scope: The validated scope.

        Raises:
            ValueError: When identifiers are missing or superfluous.
        """

        if self.type is ScopeType.GLOBAL and (self.resource_id is not None or self.project_id is not None):
            raise ValueError("global scope carries no resource id")
        if self.type is ScopeType.PROJECT and self.resource_id is None:
            raise ValueError("project scope requires a resource id")
        if self.type is ScopeType.REPOSITORY and (self.resource_id is None or self.project_id is None):
            raise ValueError("repository scope requires repository and project ids")
        return self

    @classmethod
    def global_scope(cls) -> Scope:
        """Return the root scope."""

        return cls(type=ScopeType.GLOBAL)

    @classmethod
    def for_project(cls, project: Project) -> Scope:
        """Return the scope of ``project``."""

        return cls(type=ScopeType.PROJECT, resource_id=project.id)

    @classmethod
    def for_repository(cls, repository: Repository) -> Scope:
        """Return the scope of ``repository``."""

        return cls(
            type=ScopeType.REPOSITORY,
            resource_id=repository.id,
            project_id=repository.project.id,
        )

    def parent(self) -> Scope | None:
        """Return the next scope up the inheritance chain.

        Returns:
            Scope | None: Parent scope, or ``None`` for the global scope.
        """

        if self.type is ScopeType.REPOSITORY:
            return Scope(type=ScopeType.PROJECT, resource_id=self.project_id)
        if self.type is ScopeType.PROJECT:
            return Scope.global_scope()
        return None

    def ancestors(self) -> Iterator[Scope]:
        """Yield every ancestor, nearest first."""

        current = self.parent()
        while current is not None:
            yield current
            current = current.parent()

    def is_ancestor_of(self, other: Scope) -> bool:
        """Return ``True`` when ``self`` sits strictly above ``other``."""

        return any(scope == self for scope in other.ancestors())

    def key_suffix(self) -> str:
        """Render ``<type>[:<resource-id>]`` used in persisted keys."""

        if self.resource_id is None:
            return self.type.value
        return f"{self.type.value}:{self.resource_id}"

    def __str__(self) -> str:
        return self.key_suffix()


class RefChange(BaseModel):
    """Single ref update delivered to the external program."""

    model_config = ConfigDict(frozen=True)

    from_hash: str
    to_hash: str
    ref_id: str

    def to_line(self) -> str:
        """Render the stdin protocol line for this change."""

        return f"{self.from_hash} {self.to_hash} {self.ref_id}\n"

    @classmethod
    def parse_line(cls, line: str) -> RefChange:
        """Parse a ``<from> <to> <ref>`` protocol line.

        Args:
            line: Raw line, with or without its trailing newline.

        Returns:
            RefChange: Parsed ref change.

        Raises:
            ValueError: When the line does not contain three fields.
        """

        parts = line.strip().split(" ", 2)
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"malformed ref change line: {line!r}")
        return cls(from_hash=parts[0], to_hash=parts[1], ref_id=parts[2])


class HookVeto(BaseModel):
    """Reason attached to a rejected hook invocation."""

    model_config = ConfigDict(frozen=True)

    summary: str
    detail: str = ""


class HookResult(BaseModel):
    """Terminal outcome of one hook invocation."""

    model_config = ConfigDict(frozen=True)

    vetoes: tuple[HookVeto, ...] = Field(default_factory=tuple)

    @classmethod
    def accepted_result(cls) -> HookResult:
        """Return an accepting result."""

        return cls()

    @classmethod
    def rejected(cls, summary: str, detail: str = "") -> HookResult:
        """Return a result carrying a single veto."""

        return cls(vetoes=(HookVeto(summary=summary, detail=detail),))

    @property
    def accepted(self) -> bool:
        """Return ``True`` when no veto was raised."""

        return not self.vetoes

    @property
    def summary(self) -> str:
        """Return the headline of the first veto, or an empty string."""

        return self.vetoes[0].summary if self.vetoes else ""

    @property
    def detail(self) -> str:
        """Return the detail of the first veto, or an empty string."""

        return self.vetoes[0].detail if self.vetoes else ""


class PullRequestRef(BaseModel):
    """Source or target branch of a pull request."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_id: str
    latest_commit: str
    repository: Repository


class PullRequest(BaseModel):
    """Pull request as seen by the merge check."""

    model_config = ConfigDict(frozen=True)

    id: int
    version: int
    title: str
    from_ref: PullRequestRef
    to_ref: PullRequestRef
    author: User


class PullRequestCheck(BaseModel):
    """Persisted outcome of the last merge check run for a pull request."""

    model_config = ConfigDict(validate_assignment=True)

    project_id: int
    repository_id: int
    pull_request_id: int
    version: int
    was_accepted: bool = False
    was_handled: bool = False
    last_exception_summary: str | None = None
    last_exception_detail: str | None = None

    def identity(self) -> tuple[int, int, int]:
        """Return the ``(project, repository, pull request)`` key."""

        return (self.project_id, self.repository_id, self.pull_request_id)

    def replay(self) -> HookResult:
        """Return the recorded decision as a fresh :class:`HookResult`."""

        if self.was_accepted:
            return HookResult.accepted_result()
        return HookResult.rejected(self.last_exception_summary or "", self.last_exception_detail or "")


class HookScriptType(str, Enum):
    """Kinds of hook scripts the host can execute."""

    PRE = "pre"
    POST = "post"


class HookScript(BaseModel):
    """Hook script stored upstream by the host."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    plugin_key: str
    type: HookScriptType
    content: str


class HookScriptCreateRequest(BaseModel):
    """Payload used to create a hook script upstream."""

    model_config = ConfigDict(frozen=True)

    name: str
    plugin_key: str
    type: HookScriptType
    content: str


class RepositoryHook(BaseModel):
    """Hook configuration entry reported by the host for a scope.

    ``scope`` is where the effective configuration lives, which may be an
    ancestor of the scope that was searched.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    scope: Scope
    enabled: bool
    configured: bool


class HookRequest(BaseModel):
    """Push delivered to the pre- and post-receive adapters."""

    model_config = ConfigDict(frozen=True)

    repository: Repository
    ref_changes: tuple[RefChange, ...] = Field(default_factory=tuple)


class ProcessSpec(BaseModel):
    """Everything needed to spawn the external program."""

    model_config = ConfigDict(frozen=True)

    command: tuple[str, ...] = Field(min_length=1)
    cwd: Path
    env: dict[str, str] = Field(default_factory=dict)
    timeout: float | None = None


__all__ = [
    "HookRequest",
    "HookResult",
    "HookScript",
    "HookScriptCreateRequest",
    "HookScriptType",
    "HookVeto",
    "NamedLink",
    "ProcessSpec",
    "Project",
    "PullRequest",
    "PullRequestCheck",
    "PullRequestRef",
    "RefChange",
    "Repository",
    "RepositoryHook",
    "Scope",
    "ScopeType",
    "User",
]
