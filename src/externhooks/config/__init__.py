# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models, loaders and config-backed host adapters."""

from __future__ import annotations

from .host import ConfiguredApplication, ConfiguredLicenseManager, ExpiringLicense
from .loader import DEFAULT_CONFIG_NAME, load_server_config, read_config_document
from .models import ConfigError, HookSettings, ServerConfig

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "ConfigError",
    "ConfiguredApplication",
    "ConfiguredLicenseManager",
    "ExpiringLicense",
    "HookSettings",
    "ServerConfig",
    "load_server_config",
    "read_config_document",
]
