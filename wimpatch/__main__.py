# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/__main__.py
from __future__ import annotations

import argparse
import logging
import sys
import traceback
from typing import Any, Optional, Sequence

from .acquire.artifacts import ArtifactAcquirer
from .acquire.http_download import HTTPDownloader
from .cli.args import parse_args_with_config
from .config.servicing import ServicingConfig
from .console.operator import create_operator_console
from .core.exceptions import WimpatchError, format_exception_for_cli
from .dism.executor import DismExecutor
from .orchestrator.run_controller import RunController, RunReport


def _print_stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


def _safe_log(logger: Any, level: str, msg: str) -> None:
    """
    Best-effort logging without assuming logger exists.
    """
    if logger is None:
        _print_stderr(msg)
        return
    getattr(logger, level)(msg)


def _summary(report: RunReport) -> str:
    lines = [f"wimpatch: servicing complete ({len(report.packages)} update package(s))"]
    lines.append(f"  install indexes committed: {', '.join(map(str, report.install_committed)) or '-'}")
    lines.append(f"  boot indexes committed:    {', '.join(map(str, report.boot_committed)) or '-'}")
    return "\n".join(lines)


def run(args: argparse.Namespace, logger: logging.Logger) -> int:
    config = ServicingConfig.from_args(args)
    executor = DismExecutor(
        logger,
        dism=config.dism,
        dry_run=config.dry_run,
        timeout=config.command_timeout,
    )
    console = create_operator_console(logger, fancy=False if getattr(args, "no_progress", False) else None)
    acquirer = ArtifactAcquirer(
        logger,
        config.staging_dir,
        downloader=HTTPDownloader(logger, show_progress=not getattr(args, "no_progress", False)),
    )

    report = RunController(logger, config, executor=executor, console=console, acquirer=acquirer).run()
    print(_summary(report))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    logger: Optional[logging.Logger] = None
    verbose = 0

    # Phase 1: parse
    try:
        args, _conf, logger = parse_args_with_config(argv)
        verbose = int(getattr(args, "verbose", 0) or 0)
    except WimpatchError as e:
        _safe_log(logger, "error", f"💥 ERROR    {format_exception_for_cli(e, verbose=1)}")
        raise SystemExit(e.code)
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        raise SystemExit(130)

    # Phase 2: run
    try:
        rc = run(args, logger)
    except WimpatchError as e:
        _safe_log(logger, "error", format_exception_for_cli(e, verbose=max(1, verbose)))
        rc = e.code
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        rc = 130
    except Exception as e:
        _safe_log(logger, "error", f"💥 UNHANDLED {type(e).__name__}: {e}")
        _safe_log(logger, "debug", traceback.format_exc())
        rc = 1

    raise SystemExit(rc)


if __name__ == "__main__":
    main()
