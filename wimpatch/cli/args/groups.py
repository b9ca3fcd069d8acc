# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse

from ...config.servicing import (
    DEFAULT_BOOT_WIM,
    DEFAULT_DRIVERS_DIR,
    DEFAULT_INSTALL_INDEX,
    MAX_INSTALL_INDEXES,
)


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from ... import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML/JSON config file (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged config and exit.")
    p.add_argument("--dump-args", action="store_true", help="Print final parsed args and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -v, -vv, -vvv")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Less output: -q warnings, -qq errors only.")
    p.add_argument("--log-file", dest="log_file", default=None, help="Write logs to file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit logs as NDJSON.")


def _add_image_inputs(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Images and drivers
    # ------------------------------------------------------------------
    p.add_argument(
        "install_wim",
        nargs="?",
        default=None,
        metavar="INSTALL_WIM",
        help="Installation image to service (install.wim). Required here or as `install_wim:` in config.",
    )
    p.add_argument("--index", type=int, default=DEFAULT_INSTALL_INDEX, help="Edition index to service in the install image.")
    p.add_argument(
        "--all-indexes",
        dest="all_indexes",
        action="store_true",
        help="Service every install index 1..--max-install-indexes instead of --index.",
    )
    p.add_argument(
        "--max-install-indexes",
        dest="max_install_indexes",
        type=int,
        default=MAX_INSTALL_INDEXES,
        help="Index count assumed for --all-indexes. Must match the real image.",
    )
    p.add_argument(
        "--detect-indexes",
        dest="detect_indexes",
        action="store_true",
        help="With --all-indexes, ask DISM /Get-WimInfo for the real index list.",
    )
    p.add_argument("--boot-wim", dest="boot_wim", default=DEFAULT_BOOT_WIM, help="Pre-boot image (boot.wim); indexes 1 and 2 get drivers.")
    p.add_argument("--drivers", dest="drivers", default=DEFAULT_DRIVERS_DIR, help="Driver directory added recursively.")


def _add_update_sources(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Update packages (at least one source)
    # ------------------------------------------------------------------
    p.add_argument("--update-path", dest="update_path", default=None, help="Local update package (.msu) to stage.")
    p.add_argument("--update-url", dest="update_url", default=None, help="URL of an update package to download and stage.")
    p.add_argument(
        "--staging-dir",
        dest="staging_dir",
        default=None,
        help="Where packages are staged (default: <workdir>/updates). Never cleared.",
    )


def _add_operation_flags(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Operation
    # ------------------------------------------------------------------
    p.add_argument("--verify", action="store_true", help="List packages and wait for Enter before each commit.")
    p.add_argument("--workdir", default=None, help="Root for mount directories and staging (default: current directory).")
    p.add_argument("--dry-run", dest="dry_run", action="store_true", help="Log DISM commands instead of running them.")
    p.add_argument("--dism", dest="dism", default="dism", help="DISM executable.")
    p.add_argument(
        "--command-timeout",
        dest="command_timeout",
        type=float,
        default=None,
        help="Per-DISM-command timeout in seconds (default: none).",
    )
    p.add_argument("--no-progress", dest="no_progress", action="store_true", help="Log progress instead of drawing bars.")
