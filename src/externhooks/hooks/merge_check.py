# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Merge-check adapter with per-version result caching.

The host may evaluate the same pull request several times without anything
changing. The decision reached for a pull request version is recorded in a
:class:`~externhooks.models.PullRequestCheck` and replayed until the version
moves on, so the external program runs at most once per version. Comments and
declines happen in :meth:`MergeCheckHook.on_end`, once per version.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from ..config import HookSettings
from ..constants import (
    CHECKS_SUCCESSFUL_COMMENT,
    COMMENT_PLACEHOLDER_DETAIL,
    COMMENT_PLACEHOLDER_SUMMARY,
    MERGE_CHECK_SUMMARY,
)
from ..interfaces import CommentService, PullRequestCheckStore, PullRequestService
from ..models import HookResult, HookVeto, PullRequest, PullRequestCheck, RefChange
from .base import HookContext, HookExecutor, missing_repository_dir

LOGGER = logging.getLogger(__name__)

PLACEHOLDER_VETO = HookVeto(summary=COMMENT_PLACEHOLDER_SUMMARY, detail=COMMENT_PLACEHOLDER_DETAIL)


def merge_ref_change(pull_request: PullRequest) -> RefChange:
    """Return the ref change a merge of ``pull_request`` would apply to its target."""

    return RefChange(
        from_hash=pull_request.to_ref.latest_commit,
        to_hash=pull_request.from_ref.latest_commit,
        ref_id=pull_request.to_ref.id,
    )


def format_comment(result: HookResult, check: PullRequestCheck | None = None) -> str:
    """Render the vetoes of ``result`` as a pull request comment.

    Each veto contributes its summary, followed by a newline and its detail
    when one is present. The comment placeholder is replaced by the decision
    recorded on ``check``.
    """

    parts: list[str] = []
    for veto in result.vetoes:
        if veto == PLACEHOLDER_VETO and check is not None:
            veto = HookVeto(
                summary=check.last_exception_summary or "",
                detail=check.last_exception_detail or "",
            )
        parts.append(f"{veto.summary}\n{veto.detail}" if veto.detail else veto.summary)
    return "".join(parts)


class MergeCheckHook:
    """Run the configured executable when a pull request is about to merge."""

    def __init__(
        self,
        executor: HookExecutor,
        *,
        checks: PullRequestCheckStore,
        comments: CommentService,
        pull_requests: PullRequestService,
    ) -> None:
        self._executor = executor
        self._checks = checks
        self._comments = comments
        self._pull_requests = pull_requests

    def pre_update(
        self,
        context: HookContext,
        pull_request: PullRequest,
        *,
        cancel: threading.Event | None = None,
    ) -> HookResult:
        """Return whether ``pull_request`` may be merged.

        Args:
            context: Settings for the hook at the target repository.
            pull_request: Pull request being merged.
            cancel: Optional event aborting the run.

        Returns:
            HookResult: The recorded decision when this version was already
            checked, otherwise the external program's decision. With
            ``add_comments`` a rejection carries the comment placeholder veto.
        """

        rejection = self._executor.license_gate.rejection()
        if rejection is not None:
            return rejection

        settings = context.settings
        checks = self._find_checks(pull_request)
        last = checks[0] if len(checks) == 1 else None
        if last is not None and last.version == pull_request.version:
            LOGGER.debug("Pull request %s was already checked at version %d", pull_request.id, last.version)
            return self._present(last.replay(), settings.add_comments)

        repository = pull_request.to_ref.repository
        cwd = self._executor.repository_dir(repository)
        if cwd is None:
            return missing_repository_dir(repository)

        if len(checks) > 1:
            # Ambiguous history: run uncached and skip the comment placeholder.
            return self._run(settings, pull_request, cwd, cancel)

        if last is not None:
            check = last
            check.version = pull_request.version
            check.was_handled = False
        else:
            check = self._checks.create(
                PullRequestCheck(
                    project_id=repository.project.id,
                    repository_id=repository.id,
                    pull_request_id=pull_request.id,
                    version=pull_request.version,
                )
            )

        result = self._run(settings, pull_request, cwd, cancel)
        check.was_accepted = result.accepted
        check.last_exception_summary = None if result.accepted else result.summary
        check.last_exception_detail = None if result.accepted else result.detail
        self._checks.save(check)
        return self._present(result, settings.add_comments)

    def on_end(self, context: HookContext, pull_request: PullRequest, result: HookResult) -> None:
        """Act on the final decision for ``pull_request`` once per version.

        Args:
            context: Settings for the hook at the target repository.
            pull_request: Pull request that was checked.
            result: Decision returned by :meth:`pre_update`.
        """

        check = self.get_check(pull_request)
        if check is None:
            LOGGER.debug("No check recorded for pull request %s", pull_request.id)
            return
        if check.version == pull_request.version and check.was_handled:
            return

        settings = context.settings
        if not result.accepted:
            if settings.add_comments:
                self._comments.add_comment(pull_request, format_comment(result, check))
            if settings.decline_pull_request_on_rejection:
                LOGGER.info("Declining pull request %s as configured", pull_request.id)
                self._pull_requests.decline(pull_request, pull_request.version)
        elif settings.add_comments:
            self._comments.add_comment(pull_request, CHECKS_SUCCESSFUL_COMMENT)

        check.was_handled = True
        self._checks.save(check)

    def get_check(self, pull_request: PullRequest) -> PullRequestCheck | None:
        """Return the single record stored for ``pull_request``.

        Returns:
            PullRequestCheck | None: The record, or ``None`` when there is none
            or when more than one exists.
        """

        checks = self._find_checks(pull_request)
        return checks[0] if len(checks) == 1 else None

    def _find_checks(self, pull_request: PullRequest) -> list[PullRequestCheck]:
        repository = pull_request.to_ref.repository
        checks = self._checks.find(repository.project.id, repository.id, pull_request.id)
        if len(checks) > 1:
            LOGGER.critical(
                "Found %d check records for pull request %s in %s/%s; ignoring them",
                len(checks),
                pull_request.id,
                repository.project.key,
                repository.slug,
            )
        return list(checks)

    def _run(
        self,
        settings: HookSettings,
        pull_request: PullRequest,
        cwd: Path,
        cancel: threading.Event | None,
    ) -> HookResult:
        return self._executor.execute(
            settings,
            cwd=cwd,
            env=self._executor.environment.merge_check(pull_request),
            ref_changes=(merge_ref_change(pull_request),),
            summary=MERGE_CHECK_SUMMARY,
            cancel=cancel,
        )

    @staticmethod
    def _present(result: HookResult, add_comments: bool) -> HookResult:
        if add_comments and not result.accepted:
            return HookResult(vetoes=(PLACEHOLDER_VETO,))
        return result


__all__ = ["MergeCheckHook", "PLACEHOLDER_VETO", "format_comment", "merge_ref_change"]
