# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/config/servicing.py
from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.exceptions import ConfigurationError

DEFAULT_INSTALL_INDEX = 6
# DISM has no cheap "how many indexes" answer during servicing; the operator
# keeps this in line with the actual install.wim (see --detect-indexes).
MAX_INSTALL_INDEXES = 11
# Pre-boot recovery images ship two variants (WinPE and Setup).
BOOT_INDEX_COUNT = 2

DEFAULT_BOOT_WIM = "./Downloads/boot.wim"
DEFAULT_DRIVERS_DIR = "./drivers"
DEFAULT_STAGING_SUBDIR = "updates"


@dataclass(frozen=True)
class ServicingConfig:
    """Everything the run controller needs; relative paths are already resolved against workdir."""
    install_wim: Path
    boot_wim: Path
    drivers: Path
    workdir: Path
    staging_dir: Path
    index: int = DEFAULT_INSTALL_INDEX
    all_indexes: bool = False
    max_install_indexes: int = MAX_INSTALL_INDEXES
    detect_indexes: bool = False
    boot_index_count: int = BOOT_INDEX_COUNT
    verify: bool = False
    update_url: Optional[str] = None
    update_path: Optional[Path] = None
    dry_run: bool = False
    dism: str = "dism"
    command_timeout: Optional[float] = None
    verbose: int = 0

    def __post_init__(self) -> None:
        if self.index < 1:
            raise ConfigurationError(msg=f"--index must be >= 1, got {self.index}")
        if self.max_install_indexes < 1:
            raise ConfigurationError(msg=f"--max-install-indexes must be >= 1, got {self.max_install_indexes}")
        if self.boot_index_count < 1:
            raise ConfigurationError(msg=f"boot index count must be >= 1, got {self.boot_index_count}")
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ConfigurationError(msg=f"--command-timeout must be > 0, got {self.command_timeout}")

    @staticmethod
    def from_args(args: argparse.Namespace, *, cwd: Optional[Path] = None) -> "ServicingConfig":
        base = Path(cwd) if cwd is not None else Path.cwd()
        workdir = _resolve(base, getattr(args, "workdir", None) or ".")

        def rel(v: Optional[str]) -> Optional[Path]:
            return _resolve(workdir, v) if v else None

        install = rel(getattr(args, "install_wim", None))
        if install is None:
            raise ConfigurationError(msg="Missing install image: pass INSTALL_WIM or set `install_wim:` in config")

        staging = rel(getattr(args, "staging_dir", None)) or (workdir / DEFAULT_STAGING_SUBDIR)
        timeout = getattr(args, "command_timeout", None)

        return ServicingConfig(
            install_wim=install,
            boot_wim=rel(getattr(args, "boot_wim", None) or DEFAULT_BOOT_WIM),  # type: ignore[arg-type]
            drivers=rel(getattr(args, "drivers", None) or DEFAULT_DRIVERS_DIR),  # type: ignore[arg-type]
            workdir=workdir,
            staging_dir=staging,
            index=int(getattr(args, "index", DEFAULT_INSTALL_INDEX)),
            all_indexes=bool(getattr(args, "all_indexes", False)),
            max_install_indexes=int(getattr(args, "max_install_indexes", MAX_INSTALL_INDEXES)),
            detect_indexes=bool(getattr(args, "detect_indexes", False)),
            verify=bool(getattr(args, "verify", False)),
            update_url=getattr(args, "update_url", None) or None,
            update_path=rel(getattr(args, "update_path", None)),
            dry_run=bool(getattr(args, "dry_run", False)),
            dism=str(getattr(args, "dism", None) or "dism"),
            command_timeout=float(timeout) if timeout is not None else None,
            verbose=int(getattr(args, "verbose", 0) or 0),
        )


def _resolve(base: Path, value: str) -> Path:
    p = Path(value).expanduser()
    return p if p.is_absolute() else (base / p)
