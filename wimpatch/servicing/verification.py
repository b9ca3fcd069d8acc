# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/servicing/verification.py
from __future__ import annotations

import logging
from pathlib import Path

from ..console.operator import OperatorConsole
from ..dism.executor import ImageServicingExecutor


class VerificationGate:
    """
    Interactive checkpoint before commit: shows the packages now integrated
    into the mounted image, then waits for the operator. Cannot fail; the only
    way to stop here is to terminate the process.
    """

    def __init__(self, logger: logging.Logger, executor: ImageServicingExecutor, console: OperatorConsole):
        self.logger = logger
        self.executor = executor
        self.console = console

    def verify(self, mount_dir: Path) -> None:
        res = self.executor.list_packages(mount_dir)
        if res.ok:
            body = res.stdout
        else:
            self.logger.warning("Could not list packages in %s (rc=%d)", mount_dir, res.returncode)
            body = f"package listing failed (rc={res.returncode}): {res.tail()}"
        self.console.show(f"Packages in {mount_dir}", body)
        self.console.acknowledge("Review the image, then press Enter to commit (Ctrl+C aborts the whole run)...")
