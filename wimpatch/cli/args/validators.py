# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import os
from typing import Any

from ...core.exceptions import ConfigurationError, InputNotFound, MissingInput


def _require(v: Any) -> bool:
    """True if v is meaningfully present (treats empty/whitespace-only strings as missing)."""
    if v is None:
        return False
    if isinstance(v, str):
        return v.strip() != ""
    return True


def _validate_install_image(args: argparse.Namespace) -> None:
    if not _require(getattr(args, "install_wim", None)):
        raise ConfigurationError(msg="Missing install image: pass INSTALL_WIM or set `install_wim:` in config")


def _validate_update_sources(args: argparse.Namespace) -> None:
    url = getattr(args, "update_url", None)
    if not _require(url) and not _require(getattr(args, "update_path", None)):
        raise MissingInput(msg="No update package given: pass --update-url and/or --update-path")
    if _require(url) and not str(url).lower().startswith(("http://", "https://")):
        raise ConfigurationError(msg=f"--update-url must be http(s): {url}")


def _validate_ranges(args: argparse.Namespace) -> None:
    if int(getattr(args, "index", 1)) < 1:
        raise ConfigurationError(msg=f"--index must be >= 1, got {args.index}")
    if int(getattr(args, "max_install_indexes", 1)) < 1:
        raise ConfigurationError(msg=f"--max-install-indexes must be >= 1, got {args.max_install_indexes}")
    if getattr(args, "detect_indexes", False) and not getattr(args, "all_indexes", False):
        raise ConfigurationError(msg="--detect-indexes only makes sense with --all-indexes")


def _validate_driver_dir(args: argparse.Namespace, workdir: str) -> None:
    drivers = str(getattr(args, "drivers", "") or "")
    path = drivers if os.path.isabs(drivers) else os.path.join(workdir, drivers)
    if not os.path.isdir(path):
        raise InputNotFound(msg=f"Driver directory not found: {path}", context={"drivers": path})


def validate_args(args: argparse.Namespace, *, check_paths: bool = True) -> None:
    """
    Validate parsed args without side effects. Image files are not checked:
    DISM reports a missing or locked image with more detail than we could.
    """
    _validate_install_image(args)
    _validate_update_sources(args)
    _validate_ranges(args)
    if check_paths and not getattr(args, "dry_run", False):
        _validate_driver_dir(args, getattr(args, "workdir", None) or os.getcwd())
