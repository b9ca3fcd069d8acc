# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# wimpatch/orchestrator/__init__.py
from .index_orchestrator import IndexOrchestrator
from .run_controller import RunController, RunReport

__all__ = ["IndexOrchestrator", "RunController", "RunReport"]
