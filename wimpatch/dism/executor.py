# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/dism/executor.py
"""
Thin seam around the external image-servicing engine (DISM).

Every operation returns an ExecResult instead of raising, so the servicing
pipeline decides what a non-zero exit code means. Tests substitute any
object satisfying ImageServicingExecutor.
"""
from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from ..core.logger import Log
from ..core.utils import U


@dataclass(frozen=True)
class ExecResult:
    argv: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = 5) -> str:
        """Last few non-empty output lines, for error context."""
        text = "\n".join(x for x in (self.stdout, self.stderr) if x)
        kept = [ln.strip() for ln in text.splitlines() if ln.strip()]
        return " | ".join(kept[-lines:])


class ImageServicingExecutor(Protocol):
    def mount(self, image_path: Path, index: int, mount_dir: Path) -> ExecResult:
        ...

    def add_driver(self, mount_dir: Path, driver_dir: Path, *, recurse: bool = True, force_unsigned: bool = False) -> ExecResult:
        ...

    def add_package(self, mount_dir: Path, package_path: Path) -> ExecResult:
        ...

    def list_packages(self, mount_dir: Path) -> ExecResult:
        ...

    def unmount(self, mount_dir: Path, *, commit: bool) -> ExecResult:
        ...

    def image_info(self, image_path: Path) -> ExecResult:
        ...


_INDEX_LINE_RE = re.compile(r"^\s*Index\s*:\s*(\d+)\s*$", re.IGNORECASE | re.MULTILINE)


def parse_image_indexes(wim_info: str) -> List[int]:
    """Pull `Index : N` entries out of `/Get-WimInfo` output."""
    return sorted({int(m.group(1)) for m in _INDEX_LINE_RE.finditer(wim_info or "")})


@dataclass
class DismExecutor:
    """
    Spawns dism.exe for each operation.

    dry_run logs the command line and reports success without executing.
    """
    logger: logging.Logger
    dism: str = "dism"
    dry_run: bool = False
    timeout: Optional[float] = None
    english: bool = True
    history: List[ExecResult] = field(default_factory=list)

    def _run(self, args: Sequence[str], *, capture: bool = False) -> ExecResult:
        argv = [self.dism, *args]
        if self.english:
            argv.append("/English")

        if self.dry_run:
            self.logger.info("DRY-RUN %s", U._pretty_cmd(argv))
            res = ExecResult(argv=tuple(argv), returncode=0)
            self.history.append(res)
            return res

        Log.trace(self.logger, "dism: %s", U._pretty_cmd(argv))
        try:
            cp = U.run_cmd(
                self.logger,
                argv,
                check=False,
                capture=capture,
                stream=not capture,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            res = ExecResult(argv=tuple(argv), returncode=124, stderr=f"timed out after {e.timeout}s")
        except OSError as e:
            # dism.exe missing or not executable
            res = ExecResult(argv=tuple(argv), returncode=127, stderr=str(e))
        else:
            res = ExecResult(argv=tuple(argv), returncode=cp.returncode, stdout=cp.stdout or "", stderr=cp.stderr or "")

        if not res.ok:
            self.logger.debug("dism rc=%d: %s", res.returncode, res.tail())
        self.history.append(res)
        return res

    def mount(self, image_path: Path, index: int, mount_dir: Path) -> ExecResult:
        return self._run(["/Mount-Wim", f"/WimFile:{image_path}", f"/Index:{int(index)}", f"/MountDir:{mount_dir}"])

    def add_driver(self, mount_dir: Path, driver_dir: Path, *, recurse: bool = True, force_unsigned: bool = False) -> ExecResult:
        args = [f"/Image:{mount_dir}", "/Add-Driver", f"/Driver:{driver_dir}"]
        if recurse:
            args.append("/Recurse")
        if force_unsigned:
            args.append("/ForceUnsigned")
        return self._run(args)

    def add_package(self, mount_dir: Path, package_path: Path) -> ExecResult:
        return self._run([f"/Image:{mount_dir}", "/Add-Package", f"/PackagePath:{package_path}"])

    def list_packages(self, mount_dir: Path) -> ExecResult:
        return self._run([f"/Image:{mount_dir}", "/Get-Packages"], capture=True)

    def unmount(self, mount_dir: Path, *, commit: bool) -> ExecResult:
        return self._run(["/Unmount-Wim", f"/MountDir:{mount_dir}", "/Commit" if commit else "/Discard"])

    def image_info(self, image_path: Path) -> ExecResult:
        return self._run(["/Get-WimInfo", f"/WimFile:{image_path}"], capture=True)
