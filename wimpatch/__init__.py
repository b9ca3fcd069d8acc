# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/__init__.py
"""
wimpatch - offline servicing of Windows installation and boot images

Injects drivers and cumulative updates into install.wim and mirrors the
driver injection into boot.wim, one image index at a time, through DISM.

Usage as a library:

    from wimpatch import RunController, ServicingConfig, DismExecutor

    config = ServicingConfig(install_wim=..., boot_wim=..., drivers=..., ...)
    report = RunController(logger, config, executor=DismExecutor(logger), console=...).run()
"""

__version__ = "0.1.0"

from .config.servicing import ServicingConfig
from .dism.executor import DismExecutor, ExecResult
from .orchestrator import IndexOrchestrator, RunController, RunReport

__all__ = [
    "__version__",
    "ServicingConfig",
    "DismExecutor",
    "ExecResult",
    "IndexOrchestrator",
    "RunController",
    "RunReport",
]
