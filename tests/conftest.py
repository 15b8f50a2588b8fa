# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from helpers.fakes import REPOSITORY, FakeApplication

ScriptFactory = Callable[..., Path]


@pytest.fixture
def application(tmp_path: Path) -> FakeApplication:
    """Return host locations rooted in a temporary directory with one repository on disk."""

    home = tmp_path / "home"
    shared = home / "shared"
    repo_dir = shared / "data" / "repositories" / str(REPOSITORY.id)
    repo_dir.mkdir(parents=True)
    return FakeApplication(home_dir=home, shared_home_dir=shared, repo_dirs={REPOSITORY.id: repo_dir})


@pytest.fixture
def make_script(tmp_path: Path) -> ScriptFactory:
    """Return a factory writing executable ``/bin/sh`` scripts."""

    def _make(body: str, *, name: str = "hook.sh", directory: Path | None = None, mode: int = 0o755) -> Path:
        target_dir = directory or tmp_path / "bin"
        target_dir.mkdir(parents=True, exist_ok=True)
        script = target_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        script.chmod(mode)
        return script

    return _make
