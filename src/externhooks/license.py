# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""License gate consulted before provisioning and execution."""

from __future__ import annotations

import logging

from .constants import LICENSE_DETAIL, LICENSE_SUMMARY
from .interfaces import LicenseManager
from .models import HookResult

LOGGER = logging.getLogger(__name__)


class LicenseGate:
    """Decide whether hooks may run or be provisioned.

    A missing license is treated as a grace period and counts as valid for
    execution; provisioning additionally requires the license to be defined.
    """

    def __init__(self, manager: LicenseManager) -> None:
        self._manager = manager

    def is_defined(self) -> bool:
        """Return ``True`` when a license entity is installed."""

        return self._manager.get_license() is not None

    def is_valid(self) -> bool:
        """Return ``True`` when execution is permitted."""

        license_entity = self._manager.get_license()
        if license_entity is None:
            return True
        return license_entity.is_valid()

    def rejection(self) -> HookResult | None:
        """Return the rejection to report when the license is not valid.

        Returns:
            HookResult | None: License rejection, or ``None`` when execution may proceed.
        """

        if self.is_valid():
            return None
        LOGGER.warning("Rejecting hook execution: license is not valid")
        return HookResult.rejected(LICENSE_SUMMARY, LICENSE_DETAIL)


__all__ = ["LicenseGate"]
