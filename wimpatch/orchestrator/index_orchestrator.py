# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/orchestrator/index_orchestrator.py
"""
Per-index servicing state machine.

    Idle -> Mounted -> DriversInjected -> UpdatesApplied (install only)
         -> Verified (optional) -> Committed

Any failure after the mount discards the session (state Discarded); a mount
failure leaves the index Idle. Install and boot images share this class and
differ only in whether updates are applied.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..core.exceptions import MountError, ServicingError
from ..core.logger import Log
from ..servicing.driver_injection import DriverInjectionStep
from ..servicing.models import DriverSource, ImageIndex, IndexResult, IndexState
from ..servicing.mount_session import MountSession, MountSessions
from ..servicing.update_application import UpdateApplicationStep
from ..servicing.verification import VerificationGate


class IndexOrchestrator:
    def __init__(
        self,
        logger: logging.Logger,
        *,
        sessions: MountSessions,
        drivers: DriverInjectionStep,
        updates: UpdateApplicationStep,
        driver_source: DriverSource,
        gate: Optional[VerificationGate] = None,
    ):
        self.logger = logger
        self.sessions = sessions
        self.drivers = drivers
        self.updates = updates
        self.driver_source = driver_source
        self.gate = gate

    def process(self, index: ImageIndex, packages: Sequence[Path] = ()) -> IndexResult:
        log = Log.bind(self.logger, image=index.image.path.name, kind=index.image.kind.value, index=index.ordinal)
        Log.step(log, f"Servicing {index}")

        try:
            session = self.sessions.open(index)
        except MountError as e:
            Log.fail(log, str(e))
            return IndexResult(index=index, state=IndexState.IDLE, error=e)

        state = IndexState.MOUNTED
        try:
            self.drivers.inject(session.mount_dir, self.driver_source)
            state = IndexState.DRIVERS_INJECTED

            if index.image.receives_updates:
                self.updates.apply_all(session.mount_dir, packages)
                state = IndexState.UPDATES_APPLIED

            if self.gate is not None:
                self.gate.verify(session.mount_dir)
                state = IndexState.VERIFIED

            self.sessions.commit(session)
        except ServicingError as e:
            Log.fail(log, f"{e} (after state {state.value})")
            self._discard(session, log)
            return IndexResult(index=index, state=IndexState.DISCARDED, error=e.with_context(index=index.ordinal))  # type: ignore[arg-type]
        except BaseException:
            # Never leave an image mounted behind an unexpected error or Ctrl+C.
            log.error("Unexpected error after state %s; discarding", state.value)
            self._discard(session, log)
            raise

        Log.ok(log, f"Committed {index}")
        return IndexResult(index=index, state=IndexState.COMMITTED)

    def _discard(self, session: MountSession, log: logging.LoggerAdapter) -> None:
        try:
            self.sessions.discard(session)
        except Exception as e:
            log.error("Discard raised %s: %s", type(e).__name__, e)
