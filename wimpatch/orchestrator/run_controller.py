# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/orchestrator/run_controller.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..acquire.artifacts import ArtifactAcquirer
from ..config.servicing import ServicingConfig
from ..console.operator import OperatorConsole
from ..core.exceptions import ServicingError
from ..core.logger import Log
from ..core.utils import U
from ..dism.executor import ImageServicingExecutor, parse_image_indexes
from ..servicing.driver_injection import DEFAULT_SIGNING_POLICY, DriverInjectionStep, SigningPolicy
from ..servicing.models import DriverSource, ImageIndex, ImageKind, ImageReference
from ..servicing.mount_session import MountSessions
from ..servicing.update_application import UpdateApplicationStep
from ..servicing.verification import VerificationGate
from .index_orchestrator import IndexOrchestrator

INSTALL_ACTIVITY = "Servicing install image"
BOOT_ACTIVITY = "Servicing boot image"


@dataclass
class RunReport:
    packages: Tuple[Path, ...] = ()
    install_committed: List[int] = field(default_factory=list)
    boot_committed: List[int] = field(default_factory=list)


class RunController:
    """
    Drives a whole run: acquire packages, then every install index, then
    every boot index, strictly one at a time. The first index that does not
    reach Committed ends the run.
    """

    def __init__(
        self,
        logger: logging.Logger,
        config: ServicingConfig,
        *,
        executor: ImageServicingExecutor,
        console: OperatorConsole,
        acquirer: Optional[ArtifactAcquirer] = None,
        signing_policy: SigningPolicy = DEFAULT_SIGNING_POLICY,
    ):
        self.logger = logger
        self.config = config
        self.executor = executor
        self.console = console
        self.acquirer = acquirer or ArtifactAcquirer(logger, config.staging_dir)

        self.install_image = ImageReference(config.install_wim, ImageKind.INSTALL)
        self.boot_image = ImageReference(config.boot_wim, ImageKind.BOOT)

        self.orchestrator = IndexOrchestrator(
            logger,
            sessions=MountSessions(logger, executor, config.workdir),
            drivers=DriverInjectionStep(logger, executor, signing_policy),
            updates=UpdateApplicationStep(logger, executor),
            driver_source=DriverSource(config.drivers),
            gate=VerificationGate(logger, executor, console) if config.verify else None,
        )

    # ------------------------------------------------------------------
    # Index enumeration
    # ------------------------------------------------------------------

    def install_indexes(self) -> List[ImageIndex]:
        if not self.config.all_indexes:
            return [ImageIndex(self.config.index, self.install_image)]

        upper = self.config.max_install_indexes
        if self.config.detect_indexes:
            detected = self._detect_install_indexes()
            if detected:
                return [ImageIndex(n, self.install_image) for n in detected]
            Log.warn(self.logger, f"Index detection found nothing; assuming {upper} indexes")
        return [ImageIndex(n, self.install_image) for n in range(1, upper + 1)]

    def boot_indexes(self) -> List[ImageIndex]:
        return [ImageIndex(n, self.boot_image) for n in range(1, self.config.boot_index_count + 1)]

    def _detect_install_indexes(self) -> List[int]:
        res = self.executor.image_info(self.install_image.path)
        if not res.ok:
            self.logger.warning("Get-WimInfo failed for %s (rc=%d)", self.install_image.path, res.returncode)
            return []
        found = parse_image_indexes(res.stdout)
        self.logger.info("Detected %d index(es) in %s: %s", len(found), self.install_image.path.name, found)
        return found

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _run_phase(self, activity: str, indexes: Sequence[ImageIndex], packages: Sequence[Path]) -> List[int]:
        U.banner(self.logger, activity)
        committed: List[int] = []
        total = len(indexes)
        for n, index in enumerate(indexes):
            self.console.progress(activity, f"Index {index.ordinal} ({n + 1}/{total})", n * 100.0 / total)
            result = self.orchestrator.process(index, packages)
            if not result.committed:
                Log.fail(
                    self.logger,
                    f"Stopping run: {index} ended {result.state.value}; "
                    f"{total - n - 1} remaining index(es) in this phase not attempted",
                )
                if result.error is not None:
                    raise result.error
                raise ServicingError(
                    msg=f"{index} ended {result.state.value} without an error",
                    context={"image": str(index.image.path), "index": index.ordinal, "state": result.state.value},
                )
            committed.append(index.ordinal)
        self.console.complete(activity)
        return committed

    def run(self) -> RunReport:
        report = RunReport()
        try:
            report.packages = self.acquirer.acquire(self.config.update_url, self.config.update_path)

            U.ensure_dir(self.config.workdir)
            report.install_committed = self._run_phase(INSTALL_ACTIVITY, self.install_indexes(), report.packages)
            report.boot_committed = self._run_phase(BOOT_ACTIVITY, self.boot_indexes(), ())
        except ServicingError:
            self.logger.error("Run halted; re-run after fixing the cause (committed indexes keep their changes)")
            raise
        finally:
            self.console.close()

        U.banner(self.logger, "Done")
        return report
