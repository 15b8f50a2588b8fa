# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for scopes, ref changes and hook results."""

from __future__ import annotations

import pytest
from helpers.fakes import PROJECT, REPOSITORY
from pydantic import ValidationError

from externhooks.models import HookResult, PullRequestCheck, RefChange, Scope, ScopeType


def test_scope_chain_from_repository() -> None:
    scope = Scope.for_repository(REPOSITORY)
    assert list(scope.ancestors()) == [Scope.for_project(PROJECT), Scope.global_scope()]
    assert Scope.global_scope().parent() is None


def test_scope_ancestry() -> None:
    repository = Scope.for_repository(REPOSITORY)
    project = Scope.for_project(PROJECT)
    assert project.is_ancestor_of(repository)
    assert Scope.global_scope().is_ancestor_of(project)
    assert not repository.is_ancestor_of(project)
    assert not project.is_ancestor_of(project)


def test_scope_key_suffix() -> None:
    assert Scope.global_scope().key_suffix() == "global"
    assert Scope.for_project(PROJECT).key_suffix() == "project:1"
    assert str(Scope.for_repository(REPOSITORY)) == "repository:11"


def test_scope_identity_is_validated() -> None:
    with pytest.raises(ValidationError):
        Scope(type=ScopeType.PROJECT)
    with pytest.raises(ValidationError):
        Scope(type=ScopeType.REPOSITORY, resource_id=1)
    with pytest.raises(ValidationError):
        Scope(type=ScopeType.GLOBAL, resource_id=1)


def test_ref_change_line_protocol() -> None:
    change = RefChange.parse_line("abc def refs/heads/main\n")
    assert change == RefChange(from_hash="abc", to_hash="def", ref_id="refs/heads/main")
    assert change.to_line() == "abc def refs/heads/main\n"
    with pytest.raises(ValueError, match="malformed"):
        RefChange.parse_line("abc def")


def test_hook_result_accessors() -> None:
    rejected = HookResult.rejected("Summary", "Detail")
    assert not rejected.accepted
    assert (rejected.summary, rejected.detail) == ("Summary", "Detail")
    assert HookResult.accepted_result().accepted


def test_check_replay() -> None:
    check = PullRequestCheck(project_id=1, repository_id=2, pull_request_id=3, version=4)
    assert check.identity() == (1, 2, 3)
    check.last_exception_summary = "Merge request failed"
    check.last_exception_detail = "nope"
    assert check.replay() == HookResult.rejected("Merge request failed", "nope")
    check.was_accepted = True
    assert check.replay().accepted
