# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""
Operator console implementations.

Two strategies behind one interface:
- RichOperatorConsole: animated percentage bars on stdout (requires a TTY)
- LoggingOperatorConsole: progress as plain stdout lines, warnings via the logger (works everywhere)

Both provide the blocking acknowledgment prompt used by the verification gate.
"""
from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

from ..core.logger import is_tty


class OperatorConsole(ABC):
    """Progress display plus a blocking prompt-for-acknowledgment primitive."""

    @abstractmethod
    def progress(self, activity: str, status: str, percent: float) -> None:
        ...

    @abstractmethod
    def complete(self, activity: str) -> None:
        ...

    @abstractmethod
    def show(self, title: str, body: str) -> None:
        ...

    @abstractmethod
    def acknowledge(self, prompt: str) -> None:
        """Block until the operator confirms. Never returns a refusal."""
        ...

    def close(self) -> None:
        pass


def _clamp_percent(percent: float) -> float:
    return max(0.0, min(100.0, float(percent)))


class RichOperatorConsole(OperatorConsole):
    def __init__(self, console: Optional[Console] = None, refresh_hz: float = 10.0):
        self.console = console or Console(stderr=False)
        self.refresh_hz = refresh_hz
        self.progress_bar: Optional[Progress] = None
        self.tasks: Dict[str, TaskID] = {}

    def _ensure_started(self) -> Progress:
        if self.progress_bar is None:
            self.progress_bar = Progress(
                SpinnerColumn(style="bright_green"),
                TextColumn("[progress.description]{task.description}", style="bold cyan"),
                BarColumn(complete_style="bright_blue", finished_style="bright_green"),
                TextColumn("{task.percentage:>5.1f}%"),
                TextColumn("{task.fields[status]}", style="dim"),
                TimeElapsedColumn(),
                console=self.console,
                transient=False,
                refresh_per_second=max(1, int(self.refresh_hz)),
            )
            self.progress_bar.start()
        return self.progress_bar

    def progress(self, activity: str, status: str, percent: float) -> None:
        bar = self._ensure_started()
        if activity not in self.tasks:
            self.tasks[activity] = bar.add_task(activity, total=100.0, status=status)
        bar.update(self.tasks[activity], completed=_clamp_percent(percent), status=status)

    def complete(self, activity: str) -> None:
        bar = self._ensure_started()
        if activity not in self.tasks:
            self.tasks[activity] = bar.add_task(activity, total=100.0, status="")
        bar.update(self.tasks[activity], completed=100.0, status="done")

    def _pause(self) -> None:
        # The live bar would redraw over prompts and panels.
        if self.progress_bar is not None:
            self.progress_bar.stop()
            self.progress_bar = None
            self.tasks.clear()

    def show(self, title: str, body: str) -> None:
        self._pause()
        self.console.print(Panel(body or "(no output)", title=title, title_align="left", expand=True, style="cyan"))

    def acknowledge(self, prompt: str) -> None:
        self._pause()
        try:
            self.console.input(f"[bold yellow]{prompt}[/bold yellow] ")
        except EOFError:
            self.console.print("[yellow]stdin closed; continuing without acknowledgment[/yellow]")

    def close(self) -> None:
        self._pause()


class LoggingOperatorConsole(OperatorConsole):
    def __init__(self, logger: logging.Logger, stream: Any = None):
        self.logger = logger
        self.stream = stream or sys.stdout

    def progress(self, activity: str, status: str, percent: float) -> None:
        print(f"{activity}: {status} ({_clamp_percent(percent):.0f}%)", file=self.stream, flush=True)

    def complete(self, activity: str) -> None:
        print(f"{activity}: complete", file=self.stream, flush=True)

    def show(self, title: str, body: str) -> None:
        print(f"==== {title} ====", file=self.stream)
        print(body or "(no output)", file=self.stream)

    def acknowledge(self, prompt: str) -> None:
        print(prompt, file=self.stream, flush=True)
        try:
            input()
        except EOFError:
            self.logger.warning("stdin closed; continuing without acknowledgment")


def create_operator_console(logger: logging.Logger, *, fancy: Optional[bool] = None) -> OperatorConsole:
    """Rich bars on an interactive stdout, plain progress lines otherwise."""
    if fancy is None:
        fancy = is_tty(sys.stdout)
    if fancy:
        return RichOperatorConsole()
    return LoggingOperatorConsole(logger)
