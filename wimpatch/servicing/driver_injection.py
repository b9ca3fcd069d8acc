# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/servicing/driver_injection.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from ..core.exceptions import DriverInjectionError
from ..core.logger import Log
from ..dism.executor import ExecResult, ImageServicingExecutor
from .models import DriverSource


@dataclass(frozen=True)
class DriverAttempt:
    label: str
    force_unsigned: bool = False


@dataclass(frozen=True)
class SigningPolicy:
    """
    Ordered driver-injection attempts. The first attempt that succeeds ends
    the step; each later attempt relaxes signature enforcement further.
    """
    attempts: Tuple[DriverAttempt, ...]

    def __post_init__(self) -> None:
        if not self.attempts:
            raise ValueError("SigningPolicy needs at least one attempt")


DEFAULT_SIGNING_POLICY = SigningPolicy(
    attempts=(
        DriverAttempt("signed-only"),
        DriverAttempt("accept-unsigned", force_unsigned=True),
    )
)

SIGNED_ONLY_POLICY = SigningPolicy(attempts=(DriverAttempt("signed-only"),))


class DriverInjectionStep:
    def __init__(
        self,
        logger: logging.Logger,
        executor: ImageServicingExecutor,
        policy: SigningPolicy = DEFAULT_SIGNING_POLICY,
    ):
        self.logger = logger
        self.executor = executor
        self.policy = policy

    def inject(self, mount_dir: Path, source: DriverSource) -> DriverAttempt:
        """Returns the attempt that succeeded."""
        results: List[Tuple[DriverAttempt, ExecResult]] = []
        for n, attempt in enumerate(self.policy.attempts, 1):
            Log.step(self.logger, f"Adding drivers from {source.root_path} ({attempt.label})")
            res = self.executor.add_driver(
                mount_dir,
                source.root_path,
                recurse=True,
                force_unsigned=attempt.force_unsigned,
            )
            if res.ok:
                if n > 1:
                    Log.warn(self.logger, f"Drivers added only with relaxed signing policy: {attempt.label}")
                return attempt
            results.append((attempt, res))
            self.logger.warning(
                "Driver injection attempt %d/%d (%s) failed with rc=%d",
                n,
                len(self.policy.attempts),
                attempt.label,
                res.returncode,
            )

        last_attempt, last = results[-1]
        raise DriverInjectionError(
            msg=f"Failed to add drivers from {source.root_path} after {len(results)} attempt(s)",
            context={
                "operation": "add-driver",
                "drivers": str(source.root_path),
                "mount_dir": str(mount_dir),
                "attempts": [a.label for a, _ in results],
                "last_rc": last.returncode,
                "output": last.tail(),
            },
        )
