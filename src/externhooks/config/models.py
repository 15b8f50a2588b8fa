# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for hook settings and the hosting server."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..constants import (
    PARAMS_SEPARATOR,
    SETTING_ASYNC,
    SETTING_TIMEOUT,
)

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"false", "0", "no", "off", ""})


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class HookSettings(BaseModel):
    """Settings an administrator stores for one hook at one scope."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    exe: str = ""
    params: str = ""
    safe_path: bool = False
    run_async: bool = Field(default=False, alias=SETTING_ASYNC)
    add_comments: bool = False
    decline_pull_request_on_rejection: bool = False
    timeout: float | None = Field(default=None, gt=0)

    @field_validator("exe", "params", mode="before")
    @classmethod
    def _none_as_blank(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("safe_path", "run_async", "add_comments", "decline_pull_request_on_rejection", mode="before")
    @classmethod
    def _coerce_flag(cls, value: object) -> object:
        """Accept the string spellings hosts use when persisting check boxes.

        Args:
            value: Raw value read from the settings mapping.

        Returns:
            object: ``bool`` for recognised spellings, the original value otherwise.
        """

        if value is None:
            return False
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return value

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None) -> HookSettings:
        """Build settings from the raw mapping persisted by the host.

        Args:
            settings: Mapping keyed by ``exe``, ``params``, ``safe_path``,
                ``async``, ``add_comments``,
                ``decline_pull_request_on_rejection`` and ``timeout``.

        Returns:
            HookSettings: Parsed settings; missing keys take their defaults.

        Raises:
            ConfigError: When a value cannot be coerced to its field type.
        """

        payload = {key: value for key, value in (settings or {}).items() if value is not None}
        if payload.get(SETTING_TIMEOUT) in ("", 0):
            payload.pop(SETTING_TIMEOUT)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"Invalid hook settings: {exc}") from exc

    def arguments(self) -> list[str]:
        """Return the argument list encoded in ``params``.

        Lines are separated by CRLF; empty lines are dropped and the remaining
        lines are kept verbatim.

        Returns:
            list[str]: Arguments passed after the executable.
        """

        if not self.params.strip():
            return []
        return [arg for arg in self.params.split(PARAMS_SEPARATOR) if arg]


class ServerConfig(BaseModel):
    """Server-wide settings read from ``externhooks.toml``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    home_dir: Path = Field(default_factory=lambda: Path.cwd() / "home")
    shared_home_dir: Path | None = None
    clustered: bool = False
    base_url: str = "http://localhost:7990"
    state_dir: Path | None = None
    sweep_jitter: float = Field(default=5.0, ge=0)
    default_timeout: float | None = Field(default=None, gt=0)
    license_expires: date | None = None

    @property
    def effective_shared_home(self) -> Path:
        """Return the shared home, defaulting to ``<home>/shared``."""

        return self.shared_home_dir or self.home_dir / "shared"

    @property
    def effective_state_dir(self) -> Path:
        """Return where plugin bookkeeping files are kept."""

        return self.state_dir or self.effective_shared_home / "data" / "externhooks"


__all__ = ["ConfigError", "HookSettings", "ServerConfig"]
