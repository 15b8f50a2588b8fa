# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pre-receive adapter: veto pushes through the external program."""

from __future__ import annotations

import threading

from ..constants import PRE_RECEIVE_SUMMARY
from ..models import HookRequest, HookResult
from .base import HookContext, HookExecutor, missing_repository_dir


class PreReceiveHook:
    """Run the configured executable before a push is accepted."""

    def __init__(self, executor: HookExecutor, *, summary: str = PRE_RECEIVE_SUMMARY) -> None:
        self._executor = executor
        self.summary = summary

    def pre_update(
        self,
        context: HookContext,
        request: HookRequest,
        *,
        cancel: threading.Event | None = None,
    ) -> HookResult:
        """Return whether the push described by ``request`` may proceed.

        Args:
            context: Settings for the hook at the repository.
            request: Repository and ref changes being pushed.
            cancel: Optional event aborting the run.

        Returns:
            HookResult: License rejection, repository-directory rejection, or
            the external program's decision.
        """

        rejection = self._executor.license_gate.rejection()
        if rejection is not None:
            return rejection

        repository = request.repository
        cwd = self._executor.repository_dir(repository)
        if cwd is None:
            return missing_repository_dir(repository)

        env = self._executor.environment.pre_receive(repository)
        return self._executor.execute(
            context.settings,
            cwd=cwd,
            env=env,
            ref_changes=request.ref_changes,
            summary=self.summary,
            cancel=cancel,
        )


__all__ = ["PreReceiveHook"]
