# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants used across externhooks modules."""

from __future__ import annotations

from typing import Final

PLUGIN_KEY: Final[str] = "com.ngs.stash.externalhooks.external-hooks"

PRE_RECEIVE_COMPONENT: Final[str] = "external-pre-receive-hook"
POST_RECEIVE_COMPONENT: Final[str] = "external-post-receive-hook"
MERGE_CHECK_COMPONENT: Final[str] = "external-merge-check-hook"

PRE_RECEIVE_HOOK_KEY: Final[str] = f"{PLUGIN_KEY}:{PRE_RECEIVE_COMPONENT}"
POST_RECEIVE_HOOK_KEY: Final[str] = f"{PLUGIN_KEY}:{POST_RECEIVE_COMPONENT}"
MERGE_CHECK_HOOK_KEY: Final[str] = f"{PLUGIN_KEY}:{MERGE_CHECK_COMPONENT}"

# Settings keys persisted by the host for each hook configuration.
SETTING_EXE: Final[str] = "exe"
SETTING_PARAMS: Final[str] = "params"
SETTING_SAFE_PATH: Final[str] = "safe_path"
SETTING_ASYNC: Final[str] = "async"
SETTING_ADD_COMMENTS: Final[str] = "add_comments"
SETTING_DECLINE: Final[str] = "decline_pull_request_on_rejection"
SETTING_TIMEOUT: Final[str] = "timeout"

PARAMS_SEPARATOR: Final[str] = "\r\n"

SAFE_DIR_NAME: Final[str] = "external-hooks"

OUTPUT_LIMIT_BYTES: Final[int] = 65_000
READ_CHUNK_SIZE: Final[int] = 8192

TRUNCATION_NOTICE: Final[str] = (
    "\nHook response exceeds 65K length limit.\nFurther output will be trimmed.\n"
)
NO_DETAILS_MESSAGE: Final[str] = (
    "Specified executable provides no additional information,\n"
    "contact your Bitbucket Administrator for help."
)

INTERNAL_ERROR_SUMMARY: Final[str] = "Internal Error"
INTERNAL_ERROR_DETAIL: Final[str] = (
    "Internal Error occured during External Hooks execution.\nCheck Bitbucket logs for more info."
)
TIMEOUT_DETAIL: Final[str] = "External hook did not finish within {timeout:.1f}s and was terminated."

LICENSE_SUMMARY: Final[str] = "License is not valid."
LICENSE_DETAIL: Final[str] = (
    "License for External Hooks Plugin is expired.\n"
    'Visit "Manage add-ons" page in your Bitbucket instance for more info.'
)

REPOSITORY_DIR_SUMMARY: Final[str] = "Error while running the Hook"
REPOSITORY_DIR_DETAIL: Final[str] = (
    "External Hooks Plugin was not able to run hook in the the repo. Check Bitbucket logs for more info."
)

PRE_RECEIVE_SUMMARY: Final[str] = "Push rejected by External Hook"
POST_RECEIVE_SUMMARY: Final[str] = "Post-receive External Hook failed"
MERGE_CHECK_SUMMARY: Final[str] = "Merge request failed"

COMMENT_PLACEHOLDER_SUMMARY: Final[str] = "Merge check failed"
COMMENT_PLACEHOLDER_DETAIL: Final[str] = "See Pull-Request comments for more info"
CHECKS_SUCCESSFUL_COMMENT: Final[str] = "External Hooks: Checks succesful"

SWEEP_JOB_ID: Final[str] = "external-hooks-enable-job"
SWEEP_RUNNER_KEY: Final[str] = "external-hooks-enable"

# Host triggers that fire a script-backed hook on every kind of ref update.
PUSH_TRIGGERS: Final[tuple[str, ...]] = (
    "repo-push",
    "branch-create",
    "branch-delete",
    "tag-create",
    "tag-delete",
    "file-edit",
)

__all__ = [
    "CHECKS_SUCCESSFUL_COMMENT",
    "COMMENT_PLACEHOLDER_DETAIL",
    "COMMENT_PLACEHOLDER_SUMMARY",
    "INTERNAL_ERROR_DETAIL",
    "INTERNAL_ERROR_SUMMARY",
    "LICENSE_DETAIL",
    "LICENSE_SUMMARY",
    "MERGE_CHECK_COMPONENT",
    "MERGE_CHECK_HOOK_KEY",
    "MERGE_CHECK_SUMMARY",
    "NO_DETAILS_MESSAGE",
    "OUTPUT_LIMIT_BYTES",
    "PARAMS_SEPARATOR",
    "PLUGIN_KEY",
    "POST_RECEIVE_COMPONENT",
    "POST_RECEIVE_HOOK_KEY",
    "POST_RECEIVE_SUMMARY",
    "PRE_RECEIVE_COMPONENT",
    "PRE_RECEIVE_HOOK_KEY",
    "PRE_RECEIVE_SUMMARY",
    "PUSH_TRIGGERS",
    "READ_CHUNK_SIZE",
    "REPOSITORY_DIR_DETAIL",
    "REPOSITORY_DIR_SUMMARY",
    "SAFE_DIR_NAME",
    "SETTING_ADD_COMMENTS",
    "SETTING_ASYNC",
    "SETTING_DECLINE",
    "SETTING_EXE",
    "SETTING_PARAMS",
    "SETTING_SAFE_PATH",
    "SETTING_TIMEOUT",
    "SWEEP_JOB_ID",
    "SWEEP_RUNNER_KEY",
    "TIMEOUT_DETAIL",
    "TRUNCATION_NOTICE",
]
