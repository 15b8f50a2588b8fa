# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Hook adapters binding the execution protocol to host events."""

from __future__ import annotations

from .base import HookContext, HookExecutor, missing_repository_dir
from .merge_check import PLACEHOLDER_VETO, MergeCheckHook, format_comment, merge_ref_change
from .post_receive import PostReceiveHook
from .pre_receive import PreReceiveHook

__all__ = [
    "HookContext",
    "HookExecutor",
    "MergeCheckHook",
    "PLACEHOLDER_VETO",
    "PostReceiveHook",
    "PreReceiveHook",
    "format_comment",
    "merge_ref_change",
    "missing_repository_dir",
]
