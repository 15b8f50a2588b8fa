# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Host adapters backed by :class:`ServerConfig` for standalone use."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from ..models import Repository
from .models import ServerConfig


@dataclass(frozen=True, slots=True)
class ConfiguredApplication:
    """Expose server locations described by a :class:`ServerConfig`."""

    config: ServerConfig

    @property
    def base_url(self) -> str:
        return self.config.base_url.rstrip("/")

    @property
    def home_dir(self) -> Path:
        return self.config.home_dir

    @property
    def shared_home_dir(self) -> Path:
        return self.config.effective_shared_home

    @property
    def clustered(self) -> bool:
        return self.config.clustered

    def repository_dir(self, repository: Repository) -> Path | None:
        """Return ``<shared home>/data/repositories/<id>`` when it exists."""

        candidate = self.shared_home_dir / "data" / "repositories" / str(repository.id)
        return candidate if candidate.is_dir() else None


@dataclass(frozen=True, slots=True)
class ExpiringLicense:
    """License valid up to and including ``expires``."""

    expires: date
    today: date | None = None

    def is_valid(self) -> bool:
        return (self.today or date.today()) <= self.expires


@dataclass(frozen=True, slots=True)
class ConfiguredLicenseManager:
    """Serve the license described by ``license_expires``."""

    config: ServerConfig

    def get_license(self) -> ExpiringLicense | None:
        if self.config.license_expires is None:
            return None
        return ExpiringLicense(expires=self.config.license_expires)


__all__ = ["ConfiguredApplication", "ConfiguredLicenseManager", "ExpiringLicense"]
