# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/acquire/artifacts.py
"""
Resolve the update packages for a run.

The staging directory is reused across runs on purpose: packages fetched
by an earlier run are applied again together with the new ones.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional, Sequence, Tuple

from ..core.exceptions import InputNotFound, MissingInput, NoPackagesFound
from ..core.logger import Log
from ..core.utils import U
from .http_download import HTTPDownloader, filename_from_url

# Alternate data stream Windows attaches to files that came from the internet.
ZONE_IDENTIFIER_STREAM = "Zone.Identifier"

DEFAULT_PACKAGE_EXTENSIONS: Tuple[str, ...] = (".msu",)


def safety_marker_path(package: Path) -> Path:
    return Path(f"{package}:{ZONE_IDENTIFIER_STREAM}")


class ArtifactAcquirer:
    def __init__(
        self,
        logger: logging.Logger,
        staging_dir: Path,
        *,
        downloader: Optional[HTTPDownloader] = None,
        extensions: Sequence[str] = DEFAULT_PACKAGE_EXTENSIONS,
    ):
        self.logger = logger
        self.staging_dir = Path(staging_dir)
        self.downloader = downloader or HTTPDownloader(logger)
        self.extensions = tuple(e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions)

    def acquire(self, url: Optional[str] = None, local_path: Optional[Path] = None) -> Tuple[Path, ...]:
        if not url and not local_path:
            raise MissingInput(msg="No update package given: pass --update-url and/or --update-path")

        U.banner(self.logger, "Acquire update packages")
        U.ensure_dir(self.staging_dir)

        if url:
            self.downloader.download(url, self.staging_dir / filename_from_url(url))

        if local_path:
            self._copy_local(Path(local_path))

        packages = self.list_packages()
        for pkg in packages:
            self._clear_safety_marker(pkg)

        if not packages:
            raise NoPackagesFound(
                msg=f"No update packages ({', '.join(self.extensions)}) found in {self.staging_dir}",
                context={"staging_dir": str(self.staging_dir)},
            )

        Log.ok(self.logger, f"{len(packages)} update package(s) staged")
        for pkg in packages:
            self.logger.info(" - %s", pkg.name)
        return packages

    def _copy_local(self, src: Path) -> Path:
        if not src.is_file():
            raise InputNotFound(msg=f"Update package not found: {src}", context={"path": str(src)})
        dest = self.staging_dir / src.name
        if src.resolve() == dest.resolve():
            self.logger.info("Update package already staged: %s", dest)
            return dest
        self.logger.info("Copying %s -> %s", src, dest)
        shutil.copyfile(src, dest)
        return dest

    def list_packages(self) -> Tuple[Path, ...]:
        """Package files in the staging directory, ordered by file name."""
        if not self.staging_dir.is_dir():
            return ()
        found = [
            p
            for p in self.staging_dir.iterdir()
            if p.is_file() and p.suffix.lower() in self.extensions
        ]
        return tuple(sorted(found, key=lambda p: p.name.lower()))

    def _clear_safety_marker(self, package: Path) -> None:
        """Cosmetic: a marker that cannot be removed is logged and skipped."""
        marker = safety_marker_path(package)
        try:
            marker.unlink()
            self.logger.debug("Cleared download marker on %s", package.name)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning("Could not clear download marker on %s: %s", package.name, e)
