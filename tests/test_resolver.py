# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for executable resolution and settings validation."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest
from helpers.fakes import FakeApplication, FakeAuth, FakeLicense, FakeLicenseManager, FakePermissions

from externhooks.config import HookSettings
from externhooks.license import LicenseGate
from externhooks.models import Scope
from externhooks.resolver import (
    BLANK_MESSAGE,
    CLUSTER_SAFE_MODE_MESSAGE,
    EXPIRED_MESSAGE,
    MISSING_MESSAGE,
    NOT_EXECUTABLE_MESSAGE,
    SYSADMIN_MESSAGE,
    UNLICENSED_MESSAGE,
    UNRESOLVED_MESSAGE,
    ExecutableResolver,
    SettingsValidationErrors,
    SettingsValidator,
    normalize_relative,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("hook.sh", PurePosixPath("hook.sh")),
        ("./a/../b/hook.sh", PurePosixPath("b/hook.sh")),
        ("/etc/passwd", PurePosixPath("etc/passwd")),
        ("a\\b\\hook.sh", PurePosixPath("a/b/hook.sh")),
        ("../../etc/passwd", None),
        ("a/../../hook", None),
    ],
)
def test_normalize_relative(raw: str, expected: PurePosixPath | None) -> None:
    assert normalize_relative(raw) == expected


def test_resolve_without_safe_mode_is_verbatim(application: FakeApplication) -> None:
    resolver = ExecutableResolver(application)
    assert resolver.resolve("../bin/hook", False) == Path("../bin/hook")


def test_safe_mode_anchors_under_local_home(application: FakeApplication) -> None:
    resolver = ExecutableResolver(application)
    resolved = resolver.resolve("/usr/bin/env", True)
    assert resolved == application.home_dir.absolute() / "external-hooks" / "usr" / "bin" / "env"


def test_safe_mode_uses_shared_home_when_clustered(application: FakeApplication) -> None:
    application.clustered = True
    resolved = ExecutableResolver(application).resolve("hooks/check.sh", True)
    assert resolved == application.shared_home_dir.absolute() / "external-hooks" / "hooks" / "check.sh"


def test_safe_mode_rejects_escape(application: FakeApplication) -> None:
    assert ExecutableResolver(application).resolve("../../etc/passwd", True) is None


def _validator(
    application: FakeApplication,
    *,
    license_entity: FakeLicense | None = FakeLicense(),
    admin: bool = True,
) -> SettingsValidator:
    return SettingsValidator(
        license_gate=LicenseGate(FakeLicenseManager(license_entity)),
        application=application,
        permissions=FakePermissions(admin=admin),
        auth=FakeAuth(),
    )


def _errors(validator: SettingsValidator, **settings: object) -> list[str]:
    errors = SettingsValidationErrors()
    validator.validate(HookSettings.from_settings(settings), errors, Scope.global_scope())
    return errors.field_errors.get("exe", [])


def test_validation_accepts_executable(application: FakeApplication, make_script) -> None:
    script = make_script("exit 0")
    assert _errors(_validator(application), exe=str(script)) == []


@pytest.mark.parametrize(
    ("license_entity", "expected"),
    [(None, UNLICENSED_MESSAGE), (FakeLicense(valid=False), EXPIRED_MESSAGE)],
)
def test_validation_checks_license_first(
    application: FakeApplication,
    license_entity: FakeLicense | None,
    expected: str,
) -> None:
    assert _errors(_validator(application, license_entity=license_entity), exe="") == [expected]


def test_cluster_requires_safe_mode(application: FakeApplication) -> None:
    application.clustered = True
    assert _errors(_validator(application), exe="/bin/true") == [CLUSTER_SAFE_MODE_MESSAGE]


def test_non_admin_requires_safe_mode(application: FakeApplication) -> None:
    assert _errors(_validator(application, admin=False), exe="/bin/true") == [SYSADMIN_MESSAGE]


def test_non_admin_may_use_safe_mode(application: FakeApplication, make_script) -> None:
    make_script("exit 0", directory=application.home_dir / "external-hooks")
    errors = _errors(_validator(application, admin=False), exe="hook.sh", safe_path=True)
    assert errors == []


def test_blank_executable(application: FakeApplication) -> None:
    assert _errors(_validator(application), exe="") == [BLANK_MESSAGE]


def test_unresolvable_safe_path(application: FakeApplication) -> None:
    assert _errors(_validator(application), exe="../../etc/passwd", safe_path=True) == [UNRESOLVED_MESSAGE]


def test_missing_executable(application: FakeApplication, tmp_path: Path) -> None:
    assert _errors(_validator(application), exe=str(tmp_path / "nope")) == [MISSING_MESSAGE]


def test_directory_is_not_an_executable(application: FakeApplication, tmp_path: Path) -> None:
    assert _errors(_validator(application), exe=str(tmp_path)) == [MISSING_MESSAGE]


def test_executable_bit_required(application: FakeApplication, make_script) -> None:
    script = make_script("exit 0", mode=0o644)
    assert _errors(_validator(application), exe=str(script)) == [NOT_EXECUTABLE_MESSAGE]
