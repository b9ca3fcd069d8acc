# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""
Progress reporter implementations for update-package downloads.

- RichProgressReporter: animated transfer bar (requires a TTY)
- LoggingProgressReporter: periodic log lines (works everywhere)
- NoopProgressReporter: silent
"""
from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from ..core.logger import is_tty
from ..core.utils import U


class ProgressReporter(ABC):
    @abstractmethod
    def start(self, description: str, total: Optional[int] = None) -> None:
        ...

    @abstractmethod
    def update(self, delta: int) -> None:
        """Advance by delta bytes."""
        ...

    @abstractmethod
    def finish(self) -> None:
        ...


class RichProgressReporter(ProgressReporter):
    def __init__(self, console: Console, refresh_hz: float = 10.0):
        self.console = console
        self.refresh_hz = refresh_hz
        self.progress: Optional[Progress] = None
        self.task_id: Optional[TaskID] = None

    def start(self, description: str, total: Optional[int] = None) -> None:
        self.progress = Progress(
            SpinnerColumn(style="bright_green"),
            TextColumn("[progress.description]{task.description}", style="bold cyan"),
            BarColumn(complete_style="bright_blue", finished_style="bright_green", pulse_style="magenta"),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=False,
            refresh_per_second=max(1, int(self.refresh_hz)),
        )
        self.progress.start()
        self.task_id = self.progress.add_task(description, total=total if total and total > 0 else None)

    def update(self, delta: int) -> None:
        if self.progress and self.task_id is not None:
            self.progress.update(self.task_id, advance=delta)

    def finish(self) -> None:
        if self.progress:
            self.progress.stop()
            self.progress = None


class LoggingProgressReporter(ProgressReporter):
    def __init__(self, logger: logging.Logger, log_every_bytes: int = 64 * 1024 * 1024):
        self.logger = logger
        self.log_every_bytes = log_every_bytes
        self.downloaded = 0
        self.total: Optional[int] = None
        self.last_log_mark = 0

    def start(self, description: str, total: Optional[int] = None) -> None:
        self.total = total
        self.logger.info("Starting download: %s (%s)", description, U.human_bytes(total))

    def update(self, delta: int) -> None:
        self.downloaded += delta
        if self.downloaded - self.last_log_mark < self.log_every_bytes:
            return
        self.last_log_mark = self.downloaded
        if self.total and self.total > 0:
            pct = (self.downloaded / self.total) * 100.0
            self.logger.info(
                "Download progress: %s / %s (%.1f%%)",
                U.human_bytes(self.downloaded),
                U.human_bytes(self.total),
                pct,
            )
        else:
            self.logger.info("Download progress: %s", U.human_bytes(self.downloaded))

    def finish(self) -> None:
        self.logger.info("Download completed: %s", U.human_bytes(self.downloaded))


class NoopProgressReporter(ProgressReporter):
    def start(self, description: str, total: Optional[int] = None) -> None:
        pass

    def update(self, delta: int) -> None:
        pass

    def finish(self) -> None:
        pass


def create_progress_reporter(logger: logging.Logger, *, show_progress: bool = True) -> ProgressReporter:
    if not show_progress:
        return NoopProgressReporter()
    if is_tty(sys.stdout):
        return RichProgressReporter(Console(stderr=False))
    return LoggingProgressReporter(logger)
