# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Load :class:`ServerConfig` from TOML with environment expansion."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .models import ConfigError, ServerConfig

CONFIG_SECTION_KEY: Final[str] = "externhooks"
DEFAULT_CONFIG_NAME: Final[str] = "externhooks.toml"

_ENV_REFERENCE = re.compile(r"\$\{(\w+)\}|\$(\w+)")


def _expand(value: Any, env: Mapping[str, str]) -> Any:
    if not isinstance(value, str):
        return value
    return _ENV_REFERENCE.sub(lambda match: env.get(match.group(1) or match.group(2), match.group(0)), value)


def read_config_document(path: Path, *, env: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return the raw configuration table stored in ``path``.

    Either a top-level document or an ``[externhooks]`` table is accepted;
    ``$VAR`` and ``${VAR}`` references in string values are expanded from
    ``env``; unknown variables are left as written.

    Args:
        path: TOML file to read.
        env: Environment used for expansion, defaults to ``os.environ``.

    Returns:
        dict[str, Any]: Expanded configuration mapping, empty when ``path`` is missing.

    Raises:
        ConfigError: When the file is not valid TOML or the section is not a table.
    """

    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Configuration at {path} is not valid TOML: {exc}") from exc
    section = data.get(CONFIG_SECTION_KEY, data)
    if not isinstance(section, MutableMapping):
        raise ConfigError(f"Configuration at {path} must be a table")
    environ = env if env is not None else os.environ
    return {key: _expand(value, environ) for key, value in section.items()}


def load_server_config(path: Path | None = None, *, env: Mapping[str, str] | None = None) -> ServerConfig:
    """Return the server configuration stored at ``path``.

    Args:
        path: Configuration file; ``externhooks.toml`` in the working directory
            when omitted. A missing file yields the defaults.
        env: Environment used for ``$VAR`` expansion.

    Returns:
        ServerConfig: Validated configuration.

    Raises:
        ConfigError: When the document is malformed or fails validation.
    """

    config_path = path if path is not None else Path.cwd() / DEFAULT_CONFIG_NAME
    document = read_config_document(config_path, env=env)
    try:
        return ServerConfig.model_validate(document)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc


__all__ = ["CONFIG_SECTION_KEY", "DEFAULT_CONFIG_NAME", "load_server_config", "read_config_document"]
