# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/acquire/__init__.py
from .artifacts import ArtifactAcquirer
from .http_download import HTTPDownloader, filename_from_url

__all__ = ["ArtifactAcquirer", "HTTPDownloader", "filename_from_url"]
