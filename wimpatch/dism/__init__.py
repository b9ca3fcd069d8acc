# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/dism/__init__.py
from .executor import DismExecutor, ExecResult, ImageServicingExecutor, parse_image_indexes

__all__ = ["DismExecutor", "ExecResult", "ImageServicingExecutor", "parse_image_indexes"]
