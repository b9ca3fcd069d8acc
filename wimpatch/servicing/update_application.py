# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/servicing/update_application.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from ..core.exceptions import UpdateApplicationError
from ..core.logger import Log
from ..dism.executor import ImageServicingExecutor


class UpdateApplicationStep:
    """Applies update packages in order; cumulative packages assume their predecessors."""

    def __init__(self, logger: logging.Logger, executor: ImageServicingExecutor):
        self.logger = logger
        self.executor = executor

    def apply_all(self, mount_dir: Path, packages: Sequence[Path]) -> int:
        """Returns the number of packages applied. Stops at the first failure."""
        total = len(packages)
        for n, pkg in enumerate(packages, 1):
            Log.step(self.logger, f"Applying update {n}/{total}: {Path(pkg).name}")
            res = self.executor.add_package(mount_dir, Path(pkg))
            if not res.ok:
                raise UpdateApplicationError(
                    msg=f"Failed to apply update package {Path(pkg).name} ({n}/{total}, rc={res.returncode})",
                    package=str(pkg),
                    context={
                        "operation": "add-package",
                        "mount_dir": str(mount_dir),
                        "applied": n - 1,
                        "remaining": total - n,
                        "output": res.tail(),
                    },
                )
        return total
