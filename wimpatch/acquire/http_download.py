# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/acquire/http_download.py
"""
Blocking single-file HTTP(S) download for update packages.
"""
from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlsplit

import requests

from ..core.exceptions import DownloadError
from .progress_reporters import ProgressReporter, create_progress_reporter


def filename_from_url(url: str) -> str:
    """Last path segment of the URL, percent-decoded. Query and fragment are ignored."""
    path = unquote(urlsplit(url).path or "")
    name = posixpath.basename(path.rstrip("/"))
    # Strip anything that could climb out of the staging directory.
    name = name.replace("\\", "_").strip()
    if name in ("", ".", ".."):
        raise DownloadError(msg=f"Cannot derive a file name from URL: {url}", context={"url": url})
    return name


class HTTPDownloader:
    """
    Streams one URL into a file.

    Notes:
      - writes to <dest>.part and renames on success, so an interrupted
        download never leaves a truncated package behind
      - no retry: any transport or HTTP error is a DownloadError
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        timeout: Optional[float] = None,
        chunk_size: int = 1024 * 1024,
        show_progress: bool = True,
        http_client: Optional[Any] = None,  # For testing/mocking
    ) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError(f"Invalid timeout: {timeout}")
        self.logger = logger
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.show_progress = show_progress
        self._http_client = http_client or requests

    def _reporter(self) -> ProgressReporter:
        return create_progress_reporter(self.logger, show_progress=self.show_progress)

    def download(self, url: str, dest: Path) -> Path:
        dest = Path(dest)
        tmp = dest.with_name(dest.name + ".part")
        reporter = self._reporter()
        downloaded = 0

        self.logger.info("Downloading %s -> %s", url, dest)
        try:
            with self._http_client.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                total_hdr = response.headers.get("content-length")
                total = int(total_hdr) if total_hdr and str(total_hdr).isdigit() else None

                reporter.start(dest.name, total)
                try:
                    with open(tmp, "wb") as f:
                        for chunk in response.iter_content(chunk_size=self.chunk_size):
                            if not chunk:
                                continue
                            f.write(chunk)
                            downloaded += len(chunk)
                            reporter.update(len(chunk))
                        f.flush()
                        os.fsync(f.fileno())
                finally:
                    reporter.finish()

            os.replace(tmp, dest)
        except requests.RequestException as e:
            tmp.unlink(missing_ok=True)
            status = getattr(getattr(e, "response", None), "status_code", None)
            raise DownloadError(
                msg=f"Download failed: {url}: {e}",
                cause=e,
                context={"url": url, "dest": str(dest), "status": status},
            ) from e
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise DownloadError(
                msg=f"Could not write download to {dest}: {e}",
                cause=e,
                context={"url": url, "dest": str(dest)},
            ) from e

        self.logger.info("Downloaded %s (%d bytes)", dest.name, downloaded)
        return dest
