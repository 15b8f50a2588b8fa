# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the environment exported to hook programs."""

from __future__ import annotations

import logging

import pytest
from helpers.fakes import (
    PROJECT,
    REPOSITORY,
    USER,
    FakeApplication,
    FakeAuth,
    FakePermissions,
    FakeRepositories,
    make_pull_request,
    make_repository,
)

from externhooks.environment import HookEnvironmentBuilder
from externhooks.models import NamedLink, Project, User

LINKS = {
    REPOSITORY.id: [
        NamedLink(name="ssh", href="ssh://git@bb.example.com:7999/prj/repo.git"),
        NamedLink(name="http", href="https://bb.example.com/scm/prj/repo.git"),
    ]
}


def _builder(
    application: FakeApplication,
    *,
    user: User = USER,
    permissions: FakePermissions | None = None,
    links: dict[int, list[NamedLink]] | None = None,
) -> HookEnvironmentBuilder:
    return HookEnvironmentBuilder(
        auth=FakeAuth(user),
        permissions=permissions or FakePermissions(),
        repositories=FakeRepositories(links=LINKS if links is None else links),
        application=application,
    )


def test_pre_receive_variables(application: FakeApplication) -> None:
    permissions = FakePermissions(repo_admin=True, repo_write=True, direct_write=True)
    env = _builder(application, permissions=permissions).pre_receive(REPOSITORY)
    assert env == {
        "STASH_USER_NAME": "alice",
        "STASH_USER_EMAIL": "alice@example.com",
        "STASH_REPO_NAME": "Repo",
        "STASH_IS_ADMIN": "true",
        "STASH_IS_WRITE": "true",
        "STASH_IS_DIRECT_ADMIN": "false",
        "STASH_IS_DIRECT_WRITE": "true",
        "STASH_REPO_IS_FORK": "false",
        "STASH_REPO_CLONE_SSH": "ssh://git@bb.example.com:7999/prj/repo.git",
        "STASH_REPO_CLONE_HTTP": "https://bb.example.com/scm/prj/repo.git",
        "STASH_BASE_URL": "https://bitbucket.example.com",
        "STASH_PROJECT_NAME": "Project",
        "STASH_PROJECT_KEY": "PRJ",
    }


def test_missing_email_is_omitted_and_logged(
    application: FakeApplication,
    caplog: pytest.LogCaptureFixture,
) -> None:
    user = User(id=8, name="bob", slug="bob")
    with caplog.at_level(logging.ERROR, logger="externhooks.environment"):
        env = _builder(application, user=user).pre_receive(REPOSITORY)
    assert "STASH_USER_EMAIL" not in env
    assert env["STASH_USER_NAME"] == "bob"
    assert "bob" in caplog.text


def test_fork_flag(application: FakeApplication) -> None:
    fork = REPOSITORY.model_copy(update={"is_fork": True})
    assert _builder(application).pre_receive(fork)["STASH_REPO_IS_FORK"] == "true"


def test_no_clone_links(application: FakeApplication) -> None:
    env = _builder(application, links={}).pre_receive(REPOSITORY)
    assert not [name for name in env if name.startswith("STASH_REPO_CLONE_")]


def test_merge_check_variables(application: FakeApplication) -> None:
    source = make_repository(21, Project(id=2, key="FORK", name="Forks"), slug="repo-fork")
    pull_request = make_pull_request(pr_id=9, version=3, source=source)
    env = _builder(application).merge_check(pull_request)

    assert env["STASH_REPO_NAME"] == "Repo"
    assert env["PULL_REQUEST_FROM_HASH"] == "b" * 40
    assert env["PULL_REQUEST_FROM_ID"] == "refs/heads/feature"
    assert env["PULL_REQUEST_FROM_BRANCH"] == "feature"
    assert env["PULL_REQUEST_FROM_REPO_ID"] == "21"
    assert env["PULL_REQUEST_FROM_REPO_PROJECT_ID"] == "2"
    assert env["PULL_REQUEST_FROM_REPO_PROJECT_KEY"] == "FORK"
    assert env["PULL_REQUEST_FROM_REPO_SLUG"] == "repo-fork"
    assert env["PULL_REQUEST_FROM_SSH_CLONE_URL"] == ""
    assert env["PULL_REQUEST_FROM_HTTP_CLONE_URL"] == ""
    assert env["PULL_REQUEST_TO_HASH"] == "a" * 40
    assert env["PULL_REQUEST_TO_ID"] == "refs/heads/master"
    assert env["PULL_REQUEST_TO_REPO_NAME"] == "Repo"
    assert env["PULL_REQUEST_TO_REPO_PROJECT_KEY"] == PROJECT.key
    assert env["PULL_REQUEST_TO_SSH_CLONE_URL"] == "ssh://git@bb.example.com:7999/prj/repo.git"
    assert env["PULL_REQUEST_TO_HTTP_CLONE_URL"] == "https://bb.example.com/scm/prj/repo.git"
    assert env["PULL_REQUEST_ID"] == "9"
    assert env["PULL_REQUEST_VERSION"] == "3"
    assert env["PULL_REQUEST_AUTHOR_ID"] == "7"
    assert env["PULL_REQUEST_AUTHOR_NAME"] == "alice"
    assert env["PULL_REQUEST_AUTHOR_DISPLAY_NAME"] == "Alice Liddell"
    assert env["PULL_REQUEST_AUTHOR_EMAIL"] == "alice@example.com"
    assert env["PULL_REQUEST_AUTHOR_SLUG"] == "alice"
    assert env["PULL_REQUEST_TITLE"] == "Add feature"
    assert env["PULL_REQUEST_URL"] == "https://bitbucket.example.com/projects/PRJ/repos/repo/pull-requests/9"


def test_merge_check_omits_missing_author_email(application: FakeApplication) -> None:
    author = User(id=8, name="bob", slug="bob", display_name="Bob")
    env = _builder(application).merge_check(make_pull_request(author=author))
    assert "PULL_REQUEST_AUTHOR_EMAIL" not in env
