# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run-once job recreating every hook script after startup or an upgrade."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from itertools import chain

from ..constants import SWEEP_JOB_ID, SWEEP_RUNNER_KEY
from ..interfaces import JobScheduler
from ..models import Scope
from .provisioner import HookProvisioner
from .walker import ScopeWalker

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepReport:
    """Aggregate outcome of one provisioning sweep."""

    visited: list[Scope] = field(default_factory=list)
    installed: int = 0
    failed: int = 0


class ProvisioningSweep:
    """Schedule and run the provisioning sweep once per cluster."""

    def __init__(
        self,
        *,
        scheduler: JobScheduler,
        provisioner: HookProvisioner,
        walker: ScopeWalker,
        clustered: bool = False,
        jitter: float = 5.0,
        rng: random.Random | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._provisioner = provisioner
        self._walker = walker
        self._clustered = clustered
        self._jitter = jitter
        self._rng = rng or random.Random()  # nosec B311

    def start(self) -> float:
        """Register the job runner and schedule a single run.

        Clustered nodes start at the same time, so the run is delayed by a
        random amount up to the configured jitter.

        Returns:
            float: Delay in seconds before the job runs.
        """

        LOGGER.info("Registering job for creating hook scripts")
        self._scheduler.register_job_runner(SWEEP_RUNNER_KEY, self.run_job)
        delay = self._rng.uniform(0.0, self._jitter) if self._clustered and self._jitter > 0 else 0.0
        self._scheduler.schedule_once(SWEEP_JOB_ID, SWEEP_RUNNER_KEY, delay)
        return delay

    def run_job(self) -> SweepReport:
        """Provision the global scope and every project and repository scope.

        Returns:
            SweepReport: Scopes visited and the number of installs and failures.
        """

        LOGGER.info("Started job for creating hook scripts")
        report = SweepReport()
        try:
            for scope in chain((Scope.global_scope(),), self._walker.walk()):
                outcome = self._provisioner.install(scope)
                report.visited.append(scope)
                report.installed += len(outcome.installed)
                report.failed += len(outcome.failed)
        finally:
            self._scheduler.unschedule(SWEEP_JOB_ID)
        LOGGER.info(
            "Hook script sweep visited %d scopes: %d installed, %d failed",
            len(report.visited),
            report.installed,
            report.failed,
        )
        return report


__all__ = ["ProvisioningSweep", "SweepReport"]
