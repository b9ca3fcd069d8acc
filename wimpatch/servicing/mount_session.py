# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/servicing/mount_session.py
"""
Lifecycle of a single mounted image index.

Each index gets a deterministic slot directory `<workdir>/<kind>_<ordinal>`.
A slot left behind by a killed run is deleted and recreated on the next
open(). A failed mount, commit() and discard() all remove it again.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..core.exceptions import MountError
from ..core.utils import U
from ..dism.executor import ImageServicingExecutor
from .models import ImageIndex, SessionState


@dataclass
class MountSession:
    index: ImageIndex
    mount_dir: Path
    state: SessionState = SessionState.UNMOUNTED


class MountSessions:
    def __init__(self, logger: logging.Logger, executor: ImageServicingExecutor, workdir: Path):
        self.logger = logger
        self.executor = executor
        self.workdir = Path(workdir)

    def slot_for(self, index: ImageIndex) -> Path:
        return self.workdir / f"{index.image.kind.value}_{index.ordinal}"

    def open(self, index: ImageIndex) -> MountSession:
        mount_dir = self.slot_for(index)
        if U.remove_tree(mount_dir):
            self.logger.info("Removed stale mount directory %s", mount_dir)
        U.ensure_dir(mount_dir)

        session = MountSession(index=index, mount_dir=mount_dir)
        self.logger.info("Mounting %s at %s", index, mount_dir)
        res = self.executor.mount(index.image.path, index.ordinal, mount_dir)
        if not res.ok:
            self._remove_slot(mount_dir)
            raise MountError(
                msg=f"Failed to mount {index.image.path} index {index.ordinal} (rc={res.returncode})",
                context={
                    "image": str(index.image.path),
                    "index": index.ordinal,
                    "operation": "mount",
                    "mount_dir": str(mount_dir),
                    "output": res.tail(),
                },
            )
        session.state = SessionState.MOUNTED
        return session

    def commit(self, session: MountSession) -> None:
        if session.state is not SessionState.MOUNTED:
            raise MountError(msg=f"Cannot commit {session.index}: session is {session.state.value}")

        session.state = SessionState.COMMITTING
        self.logger.info("Committing %s", session.index)
        res = self.executor.unmount(session.mount_dir, commit=True)
        if not res.ok:
            raise MountError(
                msg=f"Failed to commit {session.index.image.path} index {session.index.ordinal} (rc={res.returncode})",
                context={
                    "image": str(session.index.image.path),
                    "index": session.index.ordinal,
                    "operation": "commit",
                    "mount_dir": str(session.mount_dir),
                    "output": res.tail(),
                },
            )
        U.remove_tree(session.mount_dir)
        session.state = SessionState.UNMOUNTED

    def discard(self, session: MountSession) -> None:
        """Best-effort: a failing discard is logged, the slot is removed regardless."""
        session.state = SessionState.DISCARDING
        self.logger.warning("Discarding changes to %s", session.index)
        res = self.executor.unmount(session.mount_dir, commit=False)
        if not res.ok:
            self.logger.error(
                "Discard of %s failed (rc=%d): %s",
                session.mount_dir,
                res.returncode,
                res.tail() or "no output",
            )
        self._remove_slot(session.mount_dir)
        session.state = SessionState.UNMOUNTED

    def _remove_slot(self, mount_dir: Path) -> None:
        try:
            U.remove_tree(mount_dir)
        except OSError as e:
            self.logger.error("Could not remove mount directory %s: %s", mount_dir, e)
