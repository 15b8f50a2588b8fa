# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Key-value and pull request check stores.

The in-memory variants back tests and single-process embedding; the JSON
variants persist to the plugin state directory and rewrite their file
atomically on every change.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Final, cast

from pydantic import ValidationError

from .models import PullRequestCheck

LOGGER = logging.getLogger(__name__)

KEY_VALUE_FILE: Final[str] = "settings.json"
CHECKS_FILE: Final[str] = "pull-request-checks.json"


class StoreError(Exception):
    """Raised when a persisted store cannot be read."""


def _write_json_atomic(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
        handle.write("\n")
        temp_name = handle.name
    os.replace(temp_name, path)


def _read_json(path: Path) -> object | None:
    if not path.is_file():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise StoreError(f"Unable to read {path}: {exc}") from exc


class InMemoryKeyValueStore:
    """Dictionary-backed :class:`~externhooks.interfaces.KeyValueStore`."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of every stored entry."""

        with self._lock:
            return dict(self._values)


class JsonFileKeyValueStore(InMemoryKeyValueStore):
    """Key-value store persisted as a JSON object."""

    def __init__(self, path: Path) -> None:
        """Load entries from ``path`` when it exists.

        Args:
            path: JSON file holding the store.

        Raises:
            StoreError: When the file is unreadable or not a JSON object.
        """

        raw = _read_json(path)
        if raw is not None and not isinstance(raw, dict):
            raise StoreError(f"{path} does not contain a JSON object")
        super().__init__({str(key): str(value) for key, value in cast(dict[str, object], raw or {}).items()})
        self.path = path

    @classmethod
    def in_directory(cls, directory: Path) -> JsonFileKeyValueStore:
        """Return the store kept in ``directory``."""

        return cls(directory / KEY_VALUE_FILE)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            _write_json_atomic(self.path, self._values)

    def remove(self, key: str) -> None:
        with self._lock:
            if self._values.pop(key, None) is not None:
                _write_json_atomic(self.path, self._values)


class InMemoryCheckStore:
    """List-backed :class:`~externhooks.interfaces.PullRequestCheckStore`.

    Records are handed out as copies; changes become visible through
    :meth:`save`.
    """

    def __init__(self, records: Sequence[PullRequestCheck] = ()) -> None:
        self._records: list[PullRequestCheck] = [record.model_copy() for record in records]
        self._lock = threading.Lock()

    def find(self, project_id: int, repository_id: int, pull_request_id: int) -> list[PullRequestCheck]:
        identity = (project_id, repository_id, pull_request_id)
        with self._lock:
            return [record.model_copy() for record in self._records if record.identity() == identity]

    def create(self, check: PullRequestCheck) -> PullRequestCheck:
        """Store ``check`` as a new record.

        Raises:
            ValueError: When a record already exists for the same pull request.
        """

        with self._lock:
            if any(record.identity() == check.identity() for record in self._records):
                raise ValueError(f"A check record already exists for {check.identity()}")
            self._records.append(check.model_copy())
            self._changed()
        return check.model_copy()

    def save(self, check: PullRequestCheck) -> None:
        """Replace the stored record sharing the identity of ``check``.

        Raises:
            KeyError: When no record exists for the pull request.
        """

        with self._lock:
            for index, record in enumerate(self._records):
                if record.identity() == check.identity():
                    self._records[index] = check.model_copy()
                    self._changed()
                    return
        raise KeyError(check.identity())

    def records(self) -> list[PullRequestCheck]:
        """Return copies of every stored record."""

        with self._lock:
            return [record.model_copy() for record in self._records]

    def _changed(self) -> None:
        """Hook invoked with the lock held after every mutation."""


class JsonFileCheckStore(InMemoryCheckStore):
    """Check store persisted as a JSON array of records."""

    def __init__(self, path: Path) -> None:
        """Load records from ``path`` when it exists.

        Args:
            path: JSON file holding the records.

        Raises:
            StoreError: When the file is unreadable or holds malformed records.
        """

        raw = _read_json(path)
        if raw is not None and not isinstance(raw, list):
            raise StoreError(f"{path} does not contain a JSON array")
        try:
            records = [PullRequestCheck.model_validate(item) for item in raw or []]
        except ValidationError as exc:
            raise StoreError(f"Malformed check record in {path}: {exc}") from exc
        super().__init__(records)
        self.path = path

    @classmethod
    def in_directory(cls, directory: Path) -> JsonFileCheckStore:
        """Return the store kept in ``directory``."""

        return cls(directory / CHECKS_FILE)

    def _changed(self) -> None:
        _write_json_atomic(self.path, [record.model_dump(mode="json") for record in self._records])


__all__ = [
    "CHECKS_FILE",
    "InMemoryCheckStore",
    "InMemoryKeyValueStore",
    "JsonFileCheckStore",
    "JsonFileKeyValueStore",
    "KEY_VALUE_FILE",
    "StoreError",
]
