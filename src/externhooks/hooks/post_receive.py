# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Post-receive adapter: notify the external program of accepted pushes."""

from __future__ import annotations

import logging
import threading

from ..constants import POST_RECEIVE_SUMMARY
from ..models import HookRequest, HookResult
from .base import HookContext, HookExecutor
from .pre_receive import PreReceiveHook

LOGGER = logging.getLogger(__name__)


class PostReceiveHook:
    """Run the configured executable after a push has been accepted.

    The push can no longer be vetoed, so a rejection is only logged.
    """

    def __init__(self, executor: HookExecutor) -> None:
        self._delegate = PreReceiveHook(executor, summary=POST_RECEIVE_SUMMARY)

    def post_update(
        self,
        context: HookContext,
        request: HookRequest,
        *,
        cancel: threading.Event | None = None,
    ) -> HookResult:
        """Run the program for ``request`` and return its outcome for inspection."""

        result = self._delegate.pre_update(context, request, cancel=cancel)
        if not result.accepted:
            LOGGER.warning(
                "Post-receive hook for %s/%s reported a failure: %s",
                request.repository.project.key,
                request.repository.slug,
                result.detail or result.summary,
            )
        return result


__all__ = ["PostReceiveHook"]
