# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the key-value and pull request check stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from externhooks.models import PullRequestCheck
from externhooks.store import (
    CHECKS_FILE,
    KEY_VALUE_FILE,
    InMemoryCheckStore,
    InMemoryKeyValueStore,
    JsonFileCheckStore,
    JsonFileKeyValueStore,
    StoreError,
)


def _check(pull_request_id: int = 3, **fields: object) -> PullRequestCheck:
    return PullRequestCheck(project_id=1, repository_id=2, pull_request_id=pull_request_id, **{"version": 0, **fields})


def test_in_memory_key_value_store() -> None:
    store = InMemoryKeyValueStore({"a": "1"})
    store.put("b", "2")
    store.remove("a")
    store.remove("missing")
    assert store.get("a") is None
    assert store.snapshot() == {"b": "2"}


def test_json_key_value_store_persists(tmp_path: Path) -> None:
    store = JsonFileKeyValueStore.in_directory(tmp_path / "state")
    store.put("hook:global", "101")
    store.put("hook:project:1", "102")
    store.remove("hook:global")

    path = tmp_path / "state" / KEY_VALUE_FILE
    assert json.loads(path.read_text(encoding="utf-8")) == {"hook:project:1": "102"}
    assert JsonFileKeyValueStore(path).get("hook:project:1") == "102"
    assert [entry.name for entry in path.parent.iterdir()] == [KEY_VALUE_FILE]


def test_json_key_value_store_rejects_non_object(tmp_path: Path) -> None:
    path = tmp_path / KEY_VALUE_FILE
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(StoreError):
        JsonFileKeyValueStore(path)


def test_corrupt_file_raises_store_error(tmp_path: Path) -> None:
    path = tmp_path / CHECKS_FILE
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError, match="Unable to read"):
        JsonFileCheckStore(path)


def test_malformed_check_record(tmp_path: Path) -> None:
    path = tmp_path / CHECKS_FILE
    path.write_text('[{"project_id": "x"}]', encoding="utf-8")
    with pytest.raises(StoreError, match="Malformed check record"):
        JsonFileCheckStore(path)


def test_check_store_hands_out_copies() -> None:
    store = InMemoryCheckStore()
    created = store.create(_check())
    created.was_handled = True
    (stored,) = store.find(1, 2, 3)
    assert stored.was_handled is False

    store.save(created)
    (stored,) = store.find(1, 2, 3)
    assert stored.was_handled is True
    assert store.find(1, 2, 4) == []


def test_check_store_refuses_duplicates() -> None:
    store = InMemoryCheckStore([_check()])
    with pytest.raises(ValueError, match="already exists"):
        store.create(_check(version=5))


def test_saving_unknown_record_fails() -> None:
    with pytest.raises(KeyError):
        InMemoryCheckStore().save(_check())


def test_json_check_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileCheckStore.in_directory(tmp_path)
    check = store.create(_check(last_exception_summary="Merge request failed"))
    check.was_accepted = True
    store.save(check)
    store.create(_check(pull_request_id=4))

    reloaded = JsonFileCheckStore(tmp_path / CHECKS_FILE)
    assert reloaded.records() == store.records()
    (first,) = reloaded.find(1, 2, 3)
    assert first.was_accepted is True
    assert first.last_exception_summary == "Merge request failed"
