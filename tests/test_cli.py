# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the externhooks command line interface."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from externhooks.cli import app
from externhooks.cli._services import read_ref_changes
from externhooks.cli.shared import CLIError, build_cli_logger
from externhooks.constants import PRE_RECEIVE_SUMMARY
from externhooks.resolver import SYSADMIN_MESSAGE, UNLICENSED_MESSAGE
from externhooks.templating import shell_quote

REF_LINE = f"{'0' * 40} {'1' * 40} refs/heads/main\n"


def _config(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / "externhooks.toml"
    path.write_text("\n".join(["[externhooks]", f'home_dir = "{tmp_path / "home"}"', *lines]) + "\n", encoding="utf-8")
    return path


def test_run_accepts(tmp_path: Path, make_script) -> None:
    script = make_script("cat > /dev/null\nexit 0")
    result = CliRunner().invoke(
        app,
        ["run", str(script), "--cwd", str(tmp_path), "--config", str(_config(tmp_path)), "--no-emoji"],
        input=REF_LINE + "\n" + REF_LINE,
    )
    assert result.exit_code == 0
    assert "Accepted 2 ref change(s)" in result.stdout


def test_run_rejects_with_program_output(tmp_path: Path, make_script) -> None:
    script = make_script('echo "refusing $1"\ncat\nexit 1')
    result = CliRunner().invoke(
        app,
        [
            "run",
            str(script),
            "--param",
            "main",
            "--cwd",
            str(tmp_path),
            "--config",
            str(_config(tmp_path)),
            "--no-emoji",
        ],
        input=REF_LINE,
    )
    assert result.exit_code == 1
    assert PRE_RECEIVE_SUMMARY in result.stdout
    assert "refusing main" in result.stdout
    assert REF_LINE.strip() in result.stdout


def test_run_reports_malformed_input(tmp_path: Path, make_script) -> None:
    script = make_script("exit 0")
    result = CliRunner().invoke(
        app,
        ["run", str(script), "--config", str(_config(tmp_path)), "--no-emoji"],
        input="just-one-field\n",
    )
    assert result.exit_code == 2
    assert "malformed ref change line" in result.stdout


def test_render_prints_script(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["render", "/opt/hooks/notify", "-p", "it's", "--async", "--config", str(_config(tmp_path))],
    )
    assert result.exit_code == 0
    expected = " ".join([shell_quote("/opt/hooks/notify"), shell_quote("it's")])
    assert expected in result.stdout
    assert 'stdin="$(mktemp)"' in result.stdout


def test_resolve_in_safe_mode(tmp_path: Path) -> None:
    config = _config(tmp_path)
    runner = CliRunner()

    result = runner.invoke(app, ["resolve", "/hooks/check.sh", "--safe-mode", "--config", str(config)])
    assert result.exit_code == 0
    assert result.stdout.strip() == str(tmp_path / "home" / "external-hooks" / "hooks" / "check.sh")

    escaped = runner.invoke(app, ["resolve", "../../etc/passwd", "--safe-mode", "--config", str(config)])
    assert escaped.exit_code == 1


def test_malformed_config_is_a_usage_error(tmp_path: Path) -> None:
    config = tmp_path / "broken.toml"
    config.write_text("clustered = [", encoding="utf-8")
    result = CliRunner().invoke(app, ["resolve", "hook", "--config", str(config)])
    assert result.exit_code == 2


def test_validate_without_license(tmp_path: Path, make_script) -> None:
    script = make_script("exit 0")
    result = CliRunner().invoke(
        app,
        ["validate", str(script), "--config", str(_config(tmp_path)), "--no-emoji"],
    )
    assert result.exit_code == 1
    assert UNLICENSED_MESSAGE in result.stdout


def test_validate_with_license(tmp_path: Path, make_script) -> None:
    script = make_script("exit 0")
    config = _config(tmp_path, "license_expires = 2999-12-31")
    runner = CliRunner()

    valid = runner.invoke(app, ["validate", str(script), "--config", str(config), "--no-emoji"])
    assert valid.exit_code == 0
    assert "Settings are valid" in valid.stdout

    not_admin = runner.invoke(app, ["validate", str(script), "--no-admin", "--config", str(config), "--no-emoji"])
    assert not_admin.exit_code == 1
    assert SYSADMIN_MESSAGE in not_admin.stdout


def test_read_ref_changes_skips_blank_lines() -> None:
    changes = read_ref_changes(["", REF_LINE, "  \n"])
    assert [change.ref_id for change in changes] == ["refs/heads/main"]
    with pytest.raises(CLIError) as excinfo:
        read_ref_changes(["a b"])
    assert excinfo.value.exit_code == 2


def test_cli_logger_prefixes_follow_emoji_setting(capsys: pytest.CaptureFixture[str]) -> None:
    build_cli_logger(emoji=False).ok("Settings are valid")
    build_cli_logger(emoji=True).fail("Settings are invalid")
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["Settings are valid", "❌ Settings are invalid"]
